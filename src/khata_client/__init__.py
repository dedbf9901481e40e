from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    AuthError,
    ContractError,
    ForbiddenError,
    MissingTokenError,
    NotFoundError,
    StorageError,
    TransportError,
    ValidationError,
)
from .http_client import HttpClient
from .inventory import InventoryState, InventoryStats
from .models import (
    AuthResponse,
    BusinessProfile,
    CatalogItem,
    Customer,
    DashboardSummary,
    Product,
    ProductCreate,
    ProductUpdate,
    Transaction,
    TransactionCreate,
)
from .optimistic import (
    InFlightRegistry,
    MutationOutcome,
    MutationState,
    OptimisticMutation,
    ReloadFromServer,
    RestorePrevious,
)
from .session import ApiSession
from .session_state import SessionEvent, SessionEventKind, SessionState
from .staleness import StalenessGate
from .storage import JsonFileStore, MemoryStore, SessionStore, StorageKey
from .ui_errors import UserFacingError, to_user_facing_error
from .validation import ClientValidationError, ValidationIssue, ValidationResult

__all__ = [
    "ApiError",
    "ApiSession",
    "AuthError",
    "AuthResponse",
    "BusinessProfile",
    "CatalogItem",
    "ClientConfig",
    "ClientValidationError",
    "ConfigError",
    "ContractError",
    "Customer",
    "DashboardSummary",
    "ForbiddenError",
    "HttpClient",
    "InFlightRegistry",
    "InventoryState",
    "InventoryStats",
    "JsonFileStore",
    "MemoryStore",
    "MissingTokenError",
    "MutationOutcome",
    "MutationState",
    "NotFoundError",
    "OptimisticMutation",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "ReloadFromServer",
    "RestorePrevious",
    "SessionEvent",
    "SessionEventKind",
    "SessionState",
    "SessionStore",
    "StalenessGate",
    "StorageError",
    "StorageKey",
    "Transaction",
    "TransactionCreate",
    "TransportError",
    "UserFacingError",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
    "load_config",
    "to_user_facing_error",
]
