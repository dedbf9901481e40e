from __future__ import annotations

from typing import Any, Mapping

from ..models import Offer, OfferCreate, Voucher, VoucherCreate
from ..validation import ClientValidationError, ValidationIssue
from .base import BaseClient, coerce_request, parse_list, parse_record


class OffersClient(BaseClient):
    def list_offers(self) -> list[Offer]:
        data = self._request("GET", "/api/offers", operation="offers.list", fallback_message="Failed to load offers")
        return parse_list(data, Offer, key="offers", operation="offers.list")

    def add_offer(self, payload: OfferCreate | Mapping[str, Any]) -> Offer:
        request = coerce_request(payload, OfferCreate)
        _require_window(request.valid_from, request.valid_until)
        data = self._request(
            "POST",
            "/api/offer",
            json_body=request.to_payload(),
            operation="offers.add",
            fallback_message="Failed to add offer",
        )
        return parse_record(data, Offer, key="offer", operation="offers.add")

    def update_offer(self, offer_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        return self._mutate("PUT", f"/api/offer/{offer_id}", "offers.update", "Failed to update offer", dict(fields))

    def toggle_offer(self, offer_id: str) -> dict[str, Any]:
        return self._mutate("PUT", f"/api/offer/{offer_id}/toggle", "offers.toggle", "Failed to update offer")

    def delete_offer(self, offer_id: str) -> None:
        self._mutate("DELETE", f"/api/offer/{offer_id}", "offers.delete", "Failed to delete offer")

    def list_vouchers(self) -> list[Voucher]:
        data = self._request(
            "GET", "/api/vouchers", operation="vouchers.list", fallback_message="Failed to load vouchers"
        )
        return parse_list(data, Voucher, key="vouchers", operation="vouchers.list")

    def add_voucher(self, payload: VoucherCreate | Mapping[str, Any]) -> Voucher:
        request = coerce_request(payload, VoucherCreate)
        _require_window(request.valid_from, request.valid_until)
        data = self._request(
            "POST",
            "/api/voucher",
            json_body=request.to_payload(),
            operation="vouchers.add",
            fallback_message="Failed to add voucher",
        )
        return parse_record(data, Voucher, key="voucher", operation="vouchers.add")

    def update_voucher(self, voucher_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        return self._mutate(
            "PUT", f"/api/voucher/{voucher_id}", "vouchers.update", "Failed to update voucher", dict(fields)
        )

    def toggle_voucher(self, voucher_id: str) -> dict[str, Any]:
        return self._mutate("PUT", f"/api/voucher/{voucher_id}/toggle", "vouchers.toggle", "Failed to update voucher")

    def delete_voucher(self, voucher_id: str) -> None:
        self._mutate("DELETE", f"/api/voucher/{voucher_id}", "vouchers.delete", "Failed to delete voucher")

    def _mutate(
        self,
        method: str,
        path: str,
        operation: str,
        fallback_message: str,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        data = self._request(method, path, json_body=json_body, operation=operation, fallback_message=fallback_message)
        return data if isinstance(data, dict) else {}


def _require_window(valid_from: str, valid_until: str) -> None:
    # ISO dates compare correctly as strings.
    if valid_until < valid_from:
        raise ClientValidationError([ValidationIssue(field="valid_until", reason="End date must be after start date")])
