from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..models import (
    CatalogFromInventoryResult,
    CatalogItem,
    CatalogItemCreate,
    CatalogItemUpdate,
    CatalogListResponse,
)
from ..uploads import PRODUCT_IMAGE_FIELD
from ..validation import ClientValidationError, ValidationIssue, require, validate_product_name
from .base import BaseClient, coerce_request, parse_record


class CatalogClient(BaseClient):
    """Customer-facing listings.

    A hidden price is sent as ``price: 0``; see ``CatalogItem.price_hidden``.
    """

    def list_catalog(self) -> list[CatalogItem]:
        data = self._request(
            "GET",
            "/api/catalog",
            operation="catalog.list",
            fallback_message="Failed to load catalog",
        )
        if isinstance(data, list):
            data = {"items": data}
        return parse_record(data, CatalogListResponse, operation="catalog.list").items

    def get_catalog_item(self, item_id: str) -> CatalogItem:
        data = self._request(
            "GET",
            f"/api/catalog/{item_id}",
            operation="catalog.get",
            fallback_message="Failed to load product",
        )
        return parse_record(data, CatalogItem, key="item", operation="catalog.get")

    def add_catalog_item(
        self,
        payload: CatalogItemCreate | Mapping[str, Any],
        image: str | None = None,
    ) -> CatalogItem:
        request = coerce_request(payload, CatalogItemCreate)
        require(validate_product_name(request.name), "name")
        body = request.to_payload()
        if image:
            body[PRODUCT_IMAGE_FIELD] = image
        data = self._send_with_file(
            "POST",
            "/api/catalog",
            body,
            PRODUCT_IMAGE_FIELD,
            operation="catalog.add",
            fallback_message="Failed to add product",
        )
        return parse_record(data, CatalogItem, key="item", operation="catalog.add")

    def update_catalog_item(self, item_id: str, fields: CatalogItemUpdate | Mapping[str, Any]) -> dict[str, Any]:
        request = coerce_request(fields, CatalogItemUpdate)
        if request.name is not None:
            require(validate_product_name(request.name), "name")
        data = self._request(
            "PUT",
            f"/api/catalog/{item_id}",
            json_body=request.to_payload(),
            operation="catalog.update",
            fallback_message="Failed to update product",
        )
        return data if isinstance(data, dict) else {}

    def delete_catalog_item(self, item_id: str) -> None:
        self._request(
            "DELETE",
            f"/api/catalog/{item_id}",
            operation="catalog.delete",
            fallback_message="Failed to delete product",
        )

    def add_from_inventory(self, product_ids: Sequence[str]) -> CatalogFromInventoryResult:
        if not product_ids:
            raise ClientValidationError([ValidationIssue(field="product_ids", reason="Select at least one product")])
        data = self._request(
            "POST",
            "/api/catalog/add-from-inventory",
            json_body={"product_ids": [str(pid) for pid in product_ids]},
            operation="catalog.add_from_inventory",
            fallback_message="Failed to add products to catalog",
        )
        return parse_record(data, CatalogFromInventoryResult, operation="catalog.add_from_inventory")

    def toggle_visibility(self, item_id: str) -> dict[str, Any]:
        data = self._request(
            "PUT",
            f"/api/catalog/toggle-visibility/{item_id}",
            operation="catalog.toggle_visibility",
            fallback_message="Failed to update product visibility",
        )
        return data if isinstance(data, dict) else {}
