from .auth import AuthClient
from .catalog import CatalogClient
from .customers import CustomersClient
from .dashboard import DashboardClient
from .invoices import InvoiceClient
from .offers import OffersClient
from .products import ProductsClient
from .profile import ProfileClient
from .transactions import TransactionsClient

__all__ = [
    "AuthClient",
    "CatalogClient",
    "CustomersClient",
    "DashboardClient",
    "InvoiceClient",
    "OffersClient",
    "ProductsClient",
    "ProfileClient",
    "TransactionsClient",
]
