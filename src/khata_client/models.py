from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _as_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_as_str)]


def _null_to(default: Any) -> BeforeValidator:
    # The backend sends null for unset columns; read them as the default.
    return BeforeValidator(lambda value: default if value is None else value)


Text = Annotated[str, _null_to("")]
Amount = Annotated[float, _null_to(0.0)]
Count = Annotated[int, _null_to(0)]
ActiveFlag = Annotated[bool, _null_to(True)]
TransactionType = Literal["credit", "payment"]


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow")


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# Auth


class LoginRequest(_Request):
    phone_number: str
    password: str


class RegisterRequest(_Request):
    business_name: str
    phone_number: str
    password: str


class AuthResponse(_Record):
    token: str | None = None
    business_id: Optional[Identifier] = None
    business: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    message: str | None = None


# Customers and transactions


class Customer(_Record):
    id: Identifier
    name: str
    phone_number: str | None = None
    address: str | None = None
    balance: Amount = 0.0

    @property
    def business_will_receive(self) -> bool:
        return self.balance > 0


class CustomerCreate(_Request):
    name: str
    phone_number: str
    address: str | None = None


class CustomerListResponse(_Record):
    customers: List[Customer] = Field(default_factory=list)


class Transaction(_Record):
    id: Identifier
    customer_id: Optional[Identifier] = None
    type: str
    amount: float
    notes: str | None = None
    receipt_url: str | None = None
    created_at: str | None = None


class TransactionCreate(_Request):
    customer_id: Identifier
    type: TransactionType
    amount: float = Field(gt=0)
    notes: str | None = None
    receipt_url: str | None = None


class TransactionListResponse(_Record):
    transactions: List[Transaction] = Field(default_factory=list)


class RecurringTransaction(_Record):
    id: Identifier
    customer_id: Optional[Identifier] = None
    type: str | None = None
    amount: Amount = 0.0
    frequency: str | None = None
    is_active: ActiveFlag = True


class RecurringTransactionCreate(_Request):
    customer_id: Identifier
    type: TransactionType
    amount: float = Field(gt=0)
    frequency: Literal["daily", "weekly", "monthly"]
    start_date: str | None = None
    notes: str | None = None


class DashboardSummary(_Record):
    total_credit: Amount = 0.0
    total_payment: Amount = 0.0
    recent_customers: List[Customer] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_summary(cls, data: Any) -> Any:
        # The backend nests the totals under "summary" on some deployments.
        if isinstance(data, dict) and isinstance(data.get("summary"), dict):
            merged = {**data, **data["summary"]}
            merged.pop("summary", None)
            return merged
        return data

    @property
    def net_balance(self) -> float:
        return self.total_credit - self.total_payment


# Inventory


class Product(_Record):
    id: Identifier
    name: str
    category: Text = ""
    subcategory: str | None = None
    description: str | None = None
    price: Amount = 0.0
    unit: Text = ""
    stock_quantity: Count = 0
    low_stock_threshold: int | None = None
    image_url: str | None = None
    product_image_url: str | None = None


class ProductCreate(_Request):
    name: str
    category: str
    subcategory: str | None = None
    description: str | None = None
    price: float = Field(ge=0)
    unit: str
    stock_quantity: int = Field(ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    product_image: str | None = None


class ProductUpdate(_Request):
    name: str | None = None
    category: str | None = None
    subcategory: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    unit: str | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    image_url: str | None = None


class ProductListResponse(_Record):
    products: List[Product] = Field(default_factory=list)


# Catalog


class CatalogItem(_Record):
    id: Identifier
    name: str
    description: str | None = None
    category: str | None = None
    price: Amount = 0.0
    is_visible: ActiveFlag = True
    image_url: str | None = None
    hide_price: bool | None = None

    @property
    def price_hidden(self) -> bool:
        # price 0 is the wire encoding for "contact for price"; free items
        # cannot be told apart unless the backend sends hide_price.
        if self.hide_price is not None:
            return self.hide_price
        return self.price == 0


class CatalogItemCreate(_Request):
    name: str
    description: str | None = None
    category: str | None = None
    price: float = Field(default=0.0, ge=0)
    hide_price: bool = Field(default=False, exclude=True)
    is_visible: bool = True
    image_url: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.hide_price:
            payload["price"] = 0
        return payload


class CatalogItemUpdate(_Request):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = Field(default=None, ge=0)
    hide_price: bool = Field(default=False, exclude=True)
    is_visible: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.hide_price:
            payload["price"] = 0
        return payload


class CatalogListResponse(_Record):
    items: List[CatalogItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_aliases(cls, data: Any) -> Any:
        if isinstance(data, dict) and "items" not in data:
            for key in ("catalog", "products"):
                if isinstance(data.get(key), list):
                    return {**data, "items": data[key]}
        return data


class CatalogFromInventoryResult(_Record):
    added_items: List[dict[str, Any]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.errors)


# Profile


class BusinessProfile(_Record):
    id: Optional[Identifier] = None
    business_name: str | None = None
    name: str | None = None
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    gst_number: str | None = None
    category: str | None = None
    subcategory: str | None = None
    profile_photo_url: str | None = None
    logo_url: str | None = None
    shop_photos: List[str] = Field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        for key in ("profile", "business"):
            if isinstance(data, dict) and isinstance(data.get(key), dict):
                return data[key]
        return data

    @property
    def display_name(self) -> str | None:
        return self.business_name or self.name


class ProfileUpdate(_Request):
    # Partial updates: unknown profile fields are passed through.
    model_config = ConfigDict(extra="allow")

    business_name: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    gst_number: str | None = None
    category: str | None = None
    subcategory: str | None = None


class UploadResponse(_Record):
    photo_url: str | None = None
    profile_photo_url: str | None = None
    logo_url: str | None = None
    shop_photo_url: str | None = None

    @property
    def url(self) -> str | None:
        return self.photo_url or self.profile_photo_url or self.logo_url or self.shop_photo_url


class LocationUpdate(_Request):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str


class Location(_Record):
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None


# Offers and vouchers


class Offer(_Record):
    id: Identifier
    title: str
    description: str | None = None
    product_id: Optional[Identifier] = None
    discount_percentage: Amount = 0.0
    valid_from: str | None = None
    valid_until: str | None = None
    is_active: ActiveFlag = True


class OfferCreate(_Request):
    title: str
    description: str
    product_id: Optional[Identifier] = None
    discount_percentage: float = Field(gt=0, le=100)
    valid_from: str
    valid_until: str


class Voucher(_Record):
    id: Identifier
    title: str
    description: str | None = None
    discount_type: str | None = None
    discount_value: Amount = 0.0
    min_purchase: float | None = None
    max_discount: float | None = None
    valid_from: str | None = None
    valid_until: str | None = None
    is_active: ActiveFlag = True


class VoucherCreate(_Request):
    title: str
    description: str
    discount_type: Literal["percentage", "flat"]
    discount_value: float = Field(gt=0)
    min_purchase: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    valid_from: str
    valid_until: str


# Invoices


class InvoiceLine(_Request):
    name: str
    quantity: float = Field(gt=0)
    price: float = Field(ge=0)
    unit: str | None = None


class InvoiceRequest(_Request):
    customer_id: Optional[Identifier] = None
    transaction_id: Optional[Identifier] = None
    items: List[InvoiceLine] = Field(default_factory=list)
    notes: str | None = None

    @model_validator(mode="after")
    def _needs_subject(self) -> "InvoiceRequest":
        if not (self.customer_id or self.transaction_id or self.items):
            raise ValueError("invoice needs a customer, a transaction or line items")
        return self
