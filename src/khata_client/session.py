from __future__ import annotations

from dataclasses import dataclass, field

import requests

from .clients.auth import AuthClient
from .clients.catalog import CatalogClient
from .clients.customers import CustomersClient
from .clients.dashboard import DashboardClient
from .clients.invoices import InvoiceClient
from .clients.offers import OffersClient
from .clients.products import ProductsClient
from .clients.profile import ProfileClient
from .clients.transactions import TransactionsClient
from .config import ClientConfig
from .http_client import HttpClient
from .inventory import InventoryState
from .session_state import SessionState
from .staleness import StalenessGate
from .storage import JsonFileStore, KeyValueStore, SessionStore


@dataclass
class ApiSession:
    """Wires one store, one session observable and one HTTP client.

    Nothing here is module-global; tests build their own with a
    ``MemoryStore`` and a stubbed ``requests.Session``.
    """

    config: ClientConfig
    backend: KeyValueStore | None = None
    http_session: requests.Session | None = None
    store: SessionStore = field(init=False)
    state: SessionState = field(init=False)
    http: HttpClient = field(init=False)

    def __post_init__(self) -> None:
        backend = self.backend or JsonFileStore(app_name=self.config.app_name, directory=self.config.store_dir)
        self.store = SessionStore(backend)
        self.state = SessionState(self.store)
        self.http = HttpClient(
            config=self.config,
            store=self.store,
            session_state=self.state,
            session=self.http_session,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    def auth_client(self) -> AuthClient:
        return AuthClient(http=self.http)

    def dashboard_client(self) -> DashboardClient:
        return DashboardClient(http=self.http)

    def customers_client(self) -> CustomersClient:
        return CustomersClient(http=self.http)

    def transactions_client(self) -> TransactionsClient:
        return TransactionsClient(http=self.http)

    def products_client(self) -> ProductsClient:
        return ProductsClient(http=self.http)

    def catalog_client(self) -> CatalogClient:
        return CatalogClient(http=self.http)

    def profile_client(self) -> ProfileClient:
        return ProfileClient(http=self.http)

    def offers_client(self) -> OffersClient:
        return OffersClient(http=self.http)

    def invoice_client(self) -> InvoiceClient:
        return InvoiceClient(http=self.http)

    def inventory_state(self, gate: StalenessGate | None = None) -> InventoryState:
        return InventoryState(self.products_client(), self.store, gate)

    def close(self) -> None:
        self.state.close()
        if self.http.session is not None:
            self.http.session.close()
