from __future__ import annotations

import logging
from typing import Any, Mapping

from ..models import BusinessProfile, Location, LocationUpdate, ProfileUpdate, UploadResponse
from ..storage import StorageKey
from ..uploads import PROFILE_FILE_FIELD, is_local_file_ref, is_remote_url, open_upload
from ..validation import (
    ClientValidationError,
    ValidationIssue,
    require,
    validate_business_name,
    validate_email,
    validate_gst,
    validate_pincode,
)
from .base import BaseClient, coerce_request, parse_record

logger = logging.getLogger(__name__)


class ProfileClient(BaseClient):
    """Business profile; the last fetched copy is cached as ``userData``."""

    def get_profile(self) -> BusinessProfile:
        data = self._request(
            "GET",
            "/api/profile",
            operation="profile.get",
            fallback_message="Failed to load profile",
        )
        profile = parse_record(data, BusinessProfile, operation="profile.get")
        self._merge_cached_profile(profile.model_dump(exclude_none=True))
        return profile

    def update_profile(self, fields: ProfileUpdate | Mapping[str, Any]) -> dict[str, Any]:
        """Send only the given fields; validation runs before the request."""
        request = coerce_request(fields, ProfileUpdate)
        if request.business_name is not None:
            require(validate_business_name(request.business_name), "business_name")
        require(validate_email(request.email), "email")
        require(validate_gst(request.gst_number), "gst_number")
        require(validate_pincode(request.pincode), "pincode")
        payload = request.to_payload()
        if request.gst_number:
            payload["gst_number"] = request.gst_number.upper()
        if not payload:
            raise ClientValidationError([ValidationIssue(field="profile", reason="Nothing to update")])
        data = self._request(
            "PUT",
            "/api/profile",
            json_body=payload,
            operation="profile.update",
            fallback_message="Failed to update profile",
        )
        self._merge_cached_profile(payload)
        return data if isinstance(data, dict) else {}

    def regenerate_pin(self) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/api/profile/regenerate-pin",
            operation="profile.regenerate_pin",
            fallback_message="Failed to regenerate PIN",
        )
        return data if isinstance(data, dict) else {}

    def upload_profile_photo(self, ref: str) -> UploadResponse:
        response = self._upload(ref, "/api/profile/upload-photo", "profile.upload_photo")
        if response.url:
            self._merge_cached_profile({"profile_photo_url": response.url})
        return response

    def upload_logo(self, ref: str) -> UploadResponse:
        response = self._upload(ref, "/api/profile/upload-logo", "profile.upload_logo")
        if response.url:
            self._merge_cached_profile({"logo_url": response.url})
        return response

    def upload_shop_photo(self, ref: str) -> UploadResponse:
        return self._upload(ref, "/api/profile/upload-shop-photo", "profile.upload_shop_photo")

    def get_location(self) -> Location:
        data = self._request(
            "GET",
            "/api/location",
            operation="profile.location",
            fallback_message="Failed to load location",
        )
        return parse_record(data, Location, key="location", operation="profile.location")

    def update_location(self, latitude: float, longitude: float, address: str) -> dict[str, Any]:
        request = coerce_request(
            {"latitude": latitude, "longitude": longitude, "address": address},
            LocationUpdate,
        )
        data = self._request(
            "POST",
            "/api/location/update",
            json_body=request.to_payload(),
            operation="profile.update_location",
            fallback_message="Failed to update location",
        )
        return data if isinstance(data, dict) else {}

    def get_qr_code(self) -> dict[str, Any]:
        data = self._request(
            "GET",
            "/api/business/qr-code",
            operation="profile.qr_code",
            fallback_message="Failed to load QR code",
        )
        return data if isinstance(data, dict) else {}

    def get_access_pin(self) -> dict[str, Any]:
        data = self._request(
            "GET",
            "/api/business/access-pin",
            operation="profile.access_pin",
            fallback_message="Failed to load access PIN",
        )
        return data if isinstance(data, dict) else {}

    def _upload(self, ref: str, path: str, operation: str) -> UploadResponse:
        if is_remote_url(ref):
            # Already hosted; nothing to upload.
            return UploadResponse(photo_url=ref)
        if not is_local_file_ref(ref):
            raise ClientValidationError([ValidationIssue(field=PROFILE_FILE_FIELD, reason="Unsupported image reference")])
        data = self.http.request(
            "POST",
            path,
            files={PROFILE_FILE_FIELD: open_upload(ref)},
            operation=operation,
            fallback_message="Failed to upload photo",
        )
        return parse_record(data, UploadResponse, operation=operation)

    def _merge_cached_profile(self, fields: Mapping[str, Any]) -> None:
        store = self.http.store
        cached = store.user_data() or {}
        cached.update(fields)
        if not store.set_json(StorageKey.USER_DATA, cached):
            logger.warning("profile_cache_not_updated")
