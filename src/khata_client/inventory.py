from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from .clients.products import ProductsClient
from .exceptions import ApiError
from .logging_utils import log_action
from .models import Product
from .optimistic import (
    InFlightRegistry,
    MutationOutcome,
    MutationState,
    OptimisticMutation,
    ReloadFromServer,
    RestorePrevious,
)
from .staleness import StalenessGate
from .storage import SessionStore, StorageKey
from .ui_errors import UserFacingError, to_user_facing_error
from .validation import ValidationResult, parse_float, parse_int, validate_price, validate_quantity

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5
ALL_CATEGORIES = "All"


@dataclass(frozen=True)
class InventoryStats:
    total_products: int
    total_value: float
    low_stock_count: int


def is_low_stock(product: Product) -> bool:
    threshold = product.low_stock_threshold or DEFAULT_LOW_STOCK_THRESHOLD
    return product.stock_quantity <= threshold


class InventoryState:
    """In-memory product list backed by the ``products_cache`` snapshot.

    Loads go through the staleness gate on focus; mutations are optimistic
    and serialized per product id.
    """

    def __init__(
        self,
        products_client: ProductsClient,
        store: SessionStore,
        gate: StalenessGate | None = None,
        on_error: Callable[[UserFacingError], None] | None = None,
    ) -> None:
        self.products_client = products_client
        self.store = store
        self.gate = gate or StalenessGate()
        self.on_error = on_error
        self.products: list[Product] = []
        self.last_error: UserFacingError | None = None
        self.in_flight = InFlightRegistry()

    # Loading

    def load_cached(self) -> list[Product]:
        rows = self.store.get_json(StorageKey.PRODUCTS_CACHE)
        if not isinstance(rows, list):
            return self.products
        cached: list[Product] = []
        for row in rows:
            try:
                cached.append(Product.model_validate(row))
            except PydanticValidationError:
                logger.warning("products_cache_row_skipped")
        self.products = cached
        return self.products

    def on_focus(self) -> bool:
        """Refetch only when stale; returns True when a request was made."""
        if not self.products:
            self.load_cached()
        if not self.gate.should_fetch():
            log_action(logger, "inventory", "focus", "skipped_fresh", count=len(self.products))
            return False
        self.refresh()
        return True

    def refresh(self) -> bool:
        """Pull-to-refresh: always hits the network."""
        try:
            self._fetch()
        except ApiError as exc:
            self._report(exc, "Failed to load products. Please check your connection.")
            log_action(logger, "inventory", "refresh", "failed", code=exc.code)
            return False
        log_action(logger, "inventory", "refresh", "success", count=len(self.products))
        return True

    def _fetch(self) -> list[Product]:
        products = self.products_client.list_products()
        self.products = products
        self._save_cache()
        self.gate.mark_fetched()
        self.last_error = None
        return products

    def _save_cache(self) -> None:
        snapshot = [product.model_dump(mode="json") for product in self.products]
        self.store.set_json(StorageKey.PRODUCTS_CACHE, snapshot)

    # Mutations

    def adjust_stock(self, product_id: str, delta: int) -> MutationOutcome[int]:
        product = self.find(product_id)
        if product is None:
            return self._rejected(0, "Product not found")
        current = product.stock_quantity
        new_quantity = current + delta
        if new_quantity < 0:
            return self._rejected(current, "Stock cannot go below zero")
        return self._mutate(
            product_id,
            "stock_quantity",
            current,
            new_quantity,
            strategy=ReloadFromServer(self._fetch),
            fallback_message="Failed to update stock",
        )

    def set_price(self, product_id: str, price: Any) -> MutationOutcome[Any]:
        return self._set_validated(product_id, "price", price, validate_price, "Failed to update price")

    def set_low_stock_threshold(self, product_id: str, threshold: Any) -> MutationOutcome[Any]:
        return self._set_validated(
            product_id, "low_stock_threshold", threshold, validate_quantity, "Failed to update threshold"
        )

    def set_description(self, product_id: str, description: str) -> MutationOutcome[Any]:
        product = self.find(product_id)
        if product is None:
            return self._rejected(None, "Product not found")
        outcome = self._mutate(
            product_id,
            "description",
            product.description,
            description.strip(),
            strategy=RestorePrevious(),
            fallback_message="Failed to update description",
        )
        if outcome.ok:
            self.refresh()
        return outcome

    def delete_product(self, product_id: str) -> bool:
        try:
            self.products_client.delete_product(product_id)
        except ApiError as exc:
            self._report(exc, "Failed to delete product. Please try again.")
            log_action(logger, "inventory", "delete", "failed", product_id=product_id, code=exc.code)
            return False
        self.products = [product for product in self.products if product.id != product_id]
        self._save_cache()
        log_action(logger, "inventory", "delete", "success", product_id=product_id)
        return True

    def _set_validated(
        self,
        product_id: str,
        field_name: str,
        raw_value: Any,
        validator: Callable[[Any], ValidationResult],
        fallback_message: str,
    ) -> MutationOutcome[Any]:
        product = self.find(product_id)
        if product is None:
            return self._rejected(None, "Product not found")
        previous = getattr(product, field_name)
        result = validator(raw_value)
        if not result:
            return self._rejected(previous, result.error or "Invalid value")
        value = parse_float(raw_value) if field_name == "price" else parse_int(raw_value)
        outcome = self._mutate(
            product_id,
            field_name,
            previous,
            value,
            strategy=RestorePrevious(),
            fallback_message=fallback_message,
        )
        if outcome.ok:
            self.refresh()
        return outcome

    def _mutate(
        self,
        product_id: str,
        field_name: str,
        previous: Any,
        new_value: Any,
        *,
        strategy: RestorePrevious | ReloadFromServer,
        fallback_message: str,
    ) -> MutationOutcome[Any]:
        if not self.in_flight.begin(product_id):
            return self._rejected(previous, "Another update for this product is in progress")
        mutation = OptimisticMutation(
            apply=lambda value: self._replace(product_id, **{field_name: value}),
            commit=lambda value: self.products_client.update_product(product_id, {field_name: value}),
            strategy=strategy,
            on_error=self._remember,
            fallback_message=fallback_message,
        )
        try:
            outcome = mutation.run(previous, new_value)
        finally:
            self.in_flight.end(product_id)
        if outcome.ok:
            self._save_cache()
        log_action(
            logger,
            "inventory",
            f"update_{field_name}",
            outcome.state.value,
            product_id=product_id,
        )
        return outcome

    def _replace(self, product_id: str, **changes: Any) -> None:
        self.products = [
            product.model_copy(update=changes) if product.id == product_id else product
            for product in self.products
        ]

    def _rejected(self, value: Any, message: str) -> MutationOutcome[Any]:
        error = UserFacingError(message=message)
        self._remember(error)
        return MutationOutcome(state=MutationState.IDLE, value=value, error=error)

    def _remember(self, error: UserFacingError) -> None:
        self.last_error = error
        if self.on_error is not None:
            self.on_error(error)

    def _report(self, exc: Exception, fallback: str) -> None:
        self._remember(to_user_facing_error(exc, fallback=fallback))

    # Views

    def find(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def categories(self) -> list[str]:
        return sorted({product.category for product in self.products if product.category})

    def filtered(self, search: str = "", category: str | None = None) -> list[Product]:
        rows = self.products
        if category and category != ALL_CATEGORIES:
            wanted = category.lower()
            rows = [product for product in rows if product.category.lower() == wanted]
        query = search.strip().lower()
        if query:
            rows = [product for product in rows if query in product.name.lower()]
        return rows

    def stats(self) -> InventoryStats:
        return InventoryStats(
            total_products=len(self.products),
            total_value=sum(product.price * product.stock_quantity for product in self.products),
            low_stock_count=sum(1 for product in self.products if is_low_stock(product)),
        )

    def is_low_stock(self, product: Product) -> bool:
        return is_low_stock(product)
