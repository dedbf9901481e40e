from __future__ import annotations

import json

import pytest
import responses

from khata_client.clients.products import ProductsClient
from khata_client.http_client import HttpClient
from khata_client.inventory import InventoryState, is_low_stock
from khata_client.models import Product
from khata_client.optimistic import MutationState
from khata_client.staleness import StalenessGate
from khata_client.storage import SessionStore, StorageKey
from khata_client.ui_errors import UserFacingError

BASE_URL = "https://api.example.com"
PRODUCTS_URL = f"{BASE_URL}/api/products"

PRODUCTS = [
    {"id": "p1", "name": "Basmati Rice", "category": "Grocery", "price": 80, "unit": "kg", "stock_quantity": 5},
    {
        "id": "p2",
        "name": "Toor Dal",
        "category": "Grocery",
        "price": 120,
        "unit": "kg",
        "stock_quantity": 20,
        "low_stock_threshold": 25,
    },
    {"id": "p3", "name": "Soap", "category": "Personal Care", "price": 30, "unit": "pcs", "stock_quantity": 0},
]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def inventory(http: HttpClient, store: SessionStore, clock: FakeClock) -> InventoryState:
    return InventoryState(ProductsClient(http=http), store, StalenessGate(now=clock))


def _loaded(inventory: InventoryState) -> InventoryState:
    inventory.products = [Product.model_validate(row) for row in PRODUCTS]
    return inventory


@responses.activate
def test_focus_respects_staleness_gate(inventory: InventoryState, store: SessionStore, clock: FakeClock) -> None:
    responses.add(responses.GET, PRODUCTS_URL, json={"products": PRODUCTS}, status=200)

    assert inventory.on_focus() is True
    assert len(responses.calls) == 1
    assert [row["id"] for row in store.get_json(StorageKey.PRODUCTS_CACHE)] == ["p1", "p2", "p3"]

    clock.now = 200.0
    assert inventory.on_focus() is False
    assert len(responses.calls) == 1

    clock.now = 310.0
    assert inventory.on_focus() is True
    assert len(responses.calls) == 2


@responses.activate
def test_manual_refresh_bypasses_gate(inventory: InventoryState, clock: FakeClock) -> None:
    responses.add(responses.GET, PRODUCTS_URL, json={"products": PRODUCTS}, status=200)
    inventory.on_focus()

    clock.now = 10.0
    assert inventory.refresh() is True
    assert len(responses.calls) == 2


@responses.activate
def test_focus_shows_cached_snapshot_before_fetch(inventory: InventoryState, store: SessionStore) -> None:
    store.set_json(StorageKey.PRODUCTS_CACHE, PRODUCTS[:1])
    responses.add(responses.GET, PRODUCTS_URL, json={"message": "down"}, status=503)

    inventory.on_focus()

    assert [product.id for product in inventory.products] == ["p1"]
    assert inventory.last_error is not None


@responses.activate
def test_load_failure_keeps_previous_state(inventory: InventoryState) -> None:
    errors: list[UserFacingError] = []
    inventory.on_error = errors.append
    _loaded(inventory)
    responses.add(responses.GET, PRODUCTS_URL, json={"message": "Service unavailable"}, status=503)

    assert inventory.refresh() is False

    assert len(inventory.products) == 3
    assert errors and errors[0].message == "Service unavailable"
    assert inventory.gate.last_fetch is None


@responses.activate
def test_decrement_below_zero_is_rejected_without_request(inventory: InventoryState, store: SessionStore) -> None:
    _loaded(inventory)

    outcome = inventory.adjust_stock("p3", -1)

    assert outcome.state == MutationState.IDLE
    assert outcome.error is not None
    assert inventory.find("p3").stock_quantity == 0
    assert len(responses.calls) == 0
    assert store.get(StorageKey.PRODUCTS_CACHE) is None


@responses.activate
def test_increment_is_optimistic_and_confirmed(inventory: InventoryState, store: SessionStore) -> None:
    _loaded(inventory)
    responses.add(responses.PUT, f"{BASE_URL}/api/product/p1", json={"message": "updated"}, status=200)

    outcome = inventory.adjust_stock("p1", 1)

    assert outcome.ok
    assert inventory.find("p1").stock_quantity == 6
    assert json.loads(responses.calls[0].request.body) == {"stock_quantity": 6}
    cached = {row["id"]: row for row in store.get_json(StorageKey.PRODUCTS_CACHE)}
    assert cached["p1"]["stock_quantity"] == 6


@responses.activate
def test_failed_stock_update_reloads_from_server(inventory: InventoryState) -> None:
    _loaded(inventory)
    server_rows = [dict(PRODUCTS[0], stock_quantity=4)] + PRODUCTS[1:]
    responses.add(responses.PUT, f"{BASE_URL}/api/product/p1", json={"message": "Update failed"}, status=500)
    responses.add(responses.GET, PRODUCTS_URL, json={"products": server_rows}, status=200)

    outcome = inventory.adjust_stock("p1", -1)

    assert outcome.state == MutationState.ROLLED_BACK
    assert outcome.error is not None
    assert outcome.error.message == "Update failed"
    assert inventory.find("p1").stock_quantity == 4
    assert [call.request.method for call in responses.calls] == ["PUT", "GET"]
    assert inventory.last_error == outcome.error


@responses.activate
def test_same_product_mutation_is_serialized(inventory: InventoryState) -> None:
    _loaded(inventory)
    inventory.in_flight.begin("p1")

    outcome = inventory.adjust_stock("p1", 1)

    assert outcome.state == MutationState.IDLE
    assert inventory.find("p1").stock_quantity == 5
    assert len(responses.calls) == 0


@responses.activate
def test_set_price_validates_then_updates_and_reloads(inventory: InventoryState) -> None:
    _loaded(inventory)

    rejected = inventory.set_price("p1", "-5")
    assert rejected.error is not None
    assert rejected.error.message == "Price cannot be negative"
    assert len(responses.calls) == 0

    responses.add(responses.PUT, f"{BASE_URL}/api/product/p1", json={}, status=200)
    responses.add(
        responses.GET,
        PRODUCTS_URL,
        json={"products": [dict(PRODUCTS[0], price=95)] + PRODUCTS[1:]},
        status=200,
    )

    outcome = inventory.set_price("p1", "95")

    assert outcome.ok
    assert json.loads(responses.calls[0].request.body) == {"price": 95.0}
    assert inventory.find("p1").price == 95


@responses.activate
def test_set_description_restores_previous_on_failure(inventory: InventoryState) -> None:
    _loaded(inventory)
    responses.add(responses.PUT, f"{BASE_URL}/api/product/p2", json={}, status=500)

    outcome = inventory.set_description("p2", "Unpolished")

    assert outcome.state == MutationState.ROLLED_BACK
    assert inventory.find("p2").description is None
    assert outcome.error.message == "Failed to update product"


@responses.activate
def test_set_low_stock_threshold(inventory: InventoryState) -> None:
    _loaded(inventory)
    responses.add(responses.PUT, f"{BASE_URL}/api/product/p1", json={}, status=200)
    responses.add(responses.GET, PRODUCTS_URL, json={"products": PRODUCTS}, status=200)

    outcome = inventory.set_low_stock_threshold("p1", "3")

    assert outcome.ok
    assert json.loads(responses.calls[0].request.body) == {"low_stock_threshold": 3}


@responses.activate
def test_delete_product_removes_locally_on_success(inventory: InventoryState, store: SessionStore) -> None:
    _loaded(inventory)
    responses.add(responses.DELETE, f"{BASE_URL}/api/product/p3", status=204)

    assert inventory.delete_product("p3") is True

    assert inventory.find("p3") is None
    assert [row["id"] for row in store.get_json(StorageKey.PRODUCTS_CACHE)] == ["p1", "p2"]


@responses.activate
def test_delete_product_failure_keeps_item(inventory: InventoryState) -> None:
    _loaded(inventory)
    responses.add(responses.DELETE, f"{BASE_URL}/api/product/p3", json={}, status=500)

    assert inventory.delete_product("p3") is False
    assert inventory.find("p3") is not None
    assert inventory.last_error.message == "Failed to delete product"


def test_filters_categories_and_stats(inventory: InventoryState) -> None:
    _loaded(inventory)

    assert [p.id for p in inventory.filtered(category="grocery")] == ["p1", "p2"]
    assert [p.id for p in inventory.filtered(search="dal", category="All")] == ["p2"]
    assert [p.id for p in inventory.filtered(search="  ")] == ["p1", "p2", "p3"]
    assert inventory.categories() == ["Grocery", "Personal Care"]

    stats = inventory.stats()
    assert stats.total_products == 3
    assert stats.total_value == 80 * 5 + 120 * 20
    assert stats.low_stock_count == 3


def test_low_stock_uses_default_threshold() -> None:
    assert is_low_stock(Product(id="a", name="A", stock_quantity=5)) is True
    assert is_low_stock(Product(id="b", name="B", stock_quantity=6)) is False
    assert is_low_stock(Product(id="c", name="C", stock_quantity=6, low_stock_threshold=10)) is True
