from __future__ import annotations

from typing import Any

from ..models import Customer, CustomerCreate, Transaction
from ..validation import require, sanitize_phone_input, validate_customer_name, validate_phone
from .base import BaseClient, parse_list, parse_record


class CustomersClient(BaseClient):
    """Customer ledger entries.

    The backend only lets this client create customers; there is no update
    or delete endpoint.
    """

    def list_customers(self) -> list[Customer]:
        data = self._request(
            "GET",
            "/api/customers",
            operation="customers.list",
            fallback_message="Failed to load customers",
        )
        return parse_list(data, Customer, key="customers", operation="customers.list")

    def get_customer(self, customer_id: str) -> Customer:
        data = self._request(
            "GET",
            f"/api/customer/{customer_id}",
            operation="customers.get",
            fallback_message="Failed to load customer",
        )
        return parse_record(data, Customer, key="customer", operation="customers.get")

    def add_customer(self, name: str, phone_number: str, address: str | None = None) -> Customer:
        require(validate_customer_name(name), "name")
        require(validate_phone(phone_number), "phone_number")
        request = CustomerCreate(
            name=name.strip(),
            phone_number=sanitize_phone_input(phone_number),
            address=(address or "").strip() or None,
        )
        data = self._request(
            "POST",
            "/api/customer",
            json_body=request.to_payload(),
            operation="customers.add",
            fallback_message="Failed to add customer",
        )
        return parse_record(data, Customer, key="customer", operation="customers.add")

    def customer_transactions(self, customer_id: str) -> list[Transaction]:
        data = self._request(
            "GET",
            f"/api/customer/{customer_id}/transactions",
            operation="customers.transactions",
            fallback_message="Failed to load transactions",
        )
        return parse_list(data, Transaction, key="transactions", operation="customers.transactions")

    def remind_customer(self, customer_id: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            f"/api/customer/{customer_id}/remind",
            operation="customers.remind",
            fallback_message="Failed to send reminder",
        )
        return data if isinstance(data, dict) else {}

    def remind_all(self) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/api/customers/remind-all",
            operation="customers.remind_all",
            fallback_message="Failed to send reminders",
        )
        return data if isinstance(data, dict) else {}
