from __future__ import annotations

from typing import Any, Mapping

from ..models import Product, ProductCreate, ProductUpdate
from ..uploads import PRODUCT_IMAGE_FIELD
from ..validation import require, validate_price, validate_product_name, validate_quantity
from .base import BaseClient, coerce_request, parse_list, parse_record


class ProductsClient(BaseClient):
    """Internal inventory (not the customer-facing catalog)."""

    def list_products(self) -> list[Product]:
        data = self._request(
            "GET",
            "/api/products",
            operation="products.list",
            fallback_message="Failed to load products",
        )
        return parse_list(data, Product, key="products", operation="products.list")

    def get_product(self, product_id: str) -> Product:
        data = self._request(
            "GET",
            f"/api/product/{product_id}",
            operation="products.get",
            fallback_message="Failed to load product",
        )
        return parse_record(data, Product, key="product", operation="products.get")

    def add_product(self, payload: ProductCreate | Mapping[str, Any]) -> Product:
        """Create a product; a local ``product_image`` goes up as multipart."""
        request = coerce_request(payload, ProductCreate)
        require(validate_product_name(request.name), "name")
        require(validate_price(request.price), "price")
        require(validate_quantity(request.stock_quantity), "stock_quantity")
        data = self._send_with_file(
            "POST",
            "/api/product",
            request.to_payload(),
            PRODUCT_IMAGE_FIELD,
            operation="products.add",
            fallback_message="Failed to add product",
        )
        return parse_record(data, Product, key="product", operation="products.add")

    def update_product(self, product_id: str, fields: ProductUpdate | Mapping[str, Any]) -> dict[str, Any]:
        """Partial update: only the given fields are sent."""
        request = coerce_request(fields, ProductUpdate)
        if request.price is not None:
            require(validate_price(request.price), "price")
        if request.stock_quantity is not None:
            require(validate_quantity(request.stock_quantity), "stock_quantity")
        if request.name is not None:
            require(validate_product_name(request.name), "name")
        data = self._request(
            "PUT",
            f"/api/product/{product_id}",
            json_body=request.to_payload(),
            operation="products.update",
            fallback_message="Failed to update product",
        )
        return data if isinstance(data, dict) else {}

    def delete_product(self, product_id: str) -> None:
        self._request(
            "DELETE",
            f"/api/product/{product_id}",
            operation="products.delete",
            fallback_message="Failed to delete product",
        )

    def categories(self) -> list[str]:
        data = self._request(
            "GET",
            "/api/products/categories",
            operation="products.categories",
            fallback_message="Failed to load categories",
        )
        return _string_list(data, "categories")

    def units(self) -> list[str]:
        data = self._request(
            "GET",
            "/api/products/units",
            operation="products.units",
            fallback_message="Failed to load units",
        )
        return _string_list(data, "units")


def _string_list(payload: Any, key: str) -> list[str]:
    rows = payload.get(key, []) if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        return []
    return [str(row) for row in rows if row is not None]
