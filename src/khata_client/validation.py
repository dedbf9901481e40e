"""Client-side input validation.

Everything here runs before a request is built; a failed check never
reaches the network layer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NON_DIGIT_RE = re.compile(r"\D")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_GST_RE = re.compile(r"[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")

MAX_PRICE = 10_000_000
MAX_QUANTITY = 1_000_000


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str


class ClientValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        return f"{issue.field}: {issue.reason}"


_OK = ValidationResult(valid=True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(valid=False, error=message)


def parse_float(value: str | int | float) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if value != value else float(value)
    match = _LEADING_FLOAT_RE.match(value)
    return float(match.group(1)) if match else None


def parse_int(value: str | int | float) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if value != value else int(value)
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def validate_phone(phone: str) -> ValidationResult:
    cleaned = _NON_DIGIT_RE.sub("", phone or "")
    if not cleaned:
        return _fail("Phone number is required")
    if len(cleaned) != 10:
        return _fail("Phone number must be exactly 10 digits")
    if cleaned[0] not in "6789":
        return _fail("Phone number must start with 6, 7, 8, or 9")
    return _OK


def validate_email(email: str | None) -> ValidationResult:
    if not email:
        return _OK
    if not _EMAIL_RE.fullmatch(email):
        return _fail("Invalid email format")
    return _OK


def validate_price(price: str | int | float) -> ValidationResult:
    value = parse_float(price)
    if value is None:
        return _fail("Price must be a valid number")
    if value < 0:
        return _fail("Price cannot be negative")
    if value > MAX_PRICE:
        return _fail("Price cannot exceed ₹1 crore")
    return _OK


def validate_quantity(quantity: str | int | float) -> ValidationResult:
    value = parse_int(quantity)
    if value is None:
        return _fail("Quantity must be a valid number")
    if value < 0:
        return _fail("Quantity cannot be negative")
    if value > MAX_QUANTITY:
        return _fail("Quantity cannot exceed 1 million")
    return _OK


def validate_gst(gst: str | None) -> ValidationResult:
    if not gst:
        return _OK
    if not _GST_RE.fullmatch(gst.upper()):
        return _fail("Invalid GST format (e.g., 22AAAAA0000A1Z5)")
    return _OK


def validate_pincode(pincode: str | None) -> ValidationResult:
    if not pincode:
        return _OK
    if len(_NON_DIGIT_RE.sub("", pincode)) != 6:
        return _fail("Pincode must be exactly 6 digits")
    return _OK


def _validate_name(name: str | None, label: str) -> ValidationResult:
    if not name or not name.strip():
        return _fail(f"{label} is required")
    if len(name.strip()) < 2:
        return _fail(f"{label} must be at least 2 characters")
    if len(name) > 100:
        return _fail(f"{label} cannot exceed 100 characters")
    return _OK


def validate_product_name(name: str | None) -> ValidationResult:
    return _validate_name(name, "Product name")


def validate_customer_name(name: str | None) -> ValidationResult:
    return _validate_name(name, "Customer name")


def validate_business_name(name: str | None) -> ValidationResult:
    return _validate_name(name, "Business name")


def validate_password(password: str | None) -> ValidationResult:
    if not password:
        return _fail("Password is required")
    return _OK


def sanitize_numeric_input(value: str) -> str:
    return _NON_NUMERIC_RE.sub("", value)


def sanitize_phone_input(value: str) -> str:
    return _NON_DIGIT_RE.sub("", value)[:10]


def require(result: ValidationResult, field: str) -> None:
    if not result.valid:
        raise ClientValidationError([ValidationIssue(field=field, reason=result.error or "invalid value")])
