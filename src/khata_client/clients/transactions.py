from __future__ import annotations

from typing import Any, Mapping

from ..models import (
    RecurringTransaction,
    RecurringTransactionCreate,
    Transaction,
    TransactionCreate,
)
from ..uploads import RECEIPT_FIELD, is_local_file_ref
from .base import BaseClient, coerce_request, parse_list, parse_record


class TransactionsClient(BaseClient):
    """Credit/payment entries. Create-only, like customers."""

    def list_transactions(self, customer_id: str | None = None) -> list[Transaction]:
        params = {"customer_id": customer_id} if customer_id else None
        data = self._request(
            "GET",
            "/api/transactions",
            params=params,
            operation="transactions.list",
            fallback_message="Failed to load transactions",
        )
        return parse_list(data, Transaction, key="transactions", operation="transactions.list")

    def add_transaction(
        self,
        customer_id: str,
        type: str,
        amount: float,
        notes: str | None = None,
        receipt: str | None = None,
    ) -> Transaction:
        """Record a credit or payment.

        ``receipt`` may be a local file (uploaded as multipart under the
        ``receipt`` field) or an already-hosted URL (sent as ``receipt_url``).
        """
        request = coerce_request(
            {
                "customer_id": customer_id,
                "type": type,
                "amount": amount,
                "notes": (notes or "").strip() or None,
            },
            TransactionCreate,
        )
        payload = request.to_payload()
        if receipt:
            payload[RECEIPT_FIELD] = receipt
        data = self._send_with_file(
            "POST",
            "/api/transaction",
            _receipt_payload(payload),
            RECEIPT_FIELD,
            operation="transactions.add",
            fallback_message="Failed to add transaction",
        )
        return parse_record(data, Transaction, key="transaction", operation="transactions.add")

    def list_recurring(self) -> list[RecurringTransaction]:
        data = self._request(
            "GET",
            "/api/recurring-transactions",
            operation="recurring.list",
            fallback_message="Failed to load recurring transactions",
        )
        return parse_list(data, RecurringTransaction, key="recurring_transactions", operation="recurring.list")

    def add_recurring(self, payload: RecurringTransactionCreate | Mapping[str, Any]) -> RecurringTransaction:
        request = coerce_request(payload, RecurringTransactionCreate)
        data = self._request(
            "POST",
            "/api/recurring-transaction",
            json_body=request.to_payload(),
            operation="recurring.add",
            fallback_message="Failed to add recurring transaction",
        )
        return parse_record(data, RecurringTransaction, key="recurring_transaction", operation="recurring.add")

    def toggle_recurring(self, recurring_id: str) -> dict[str, Any]:
        data = self._request(
            "PUT",
            f"/api/recurring-transaction/{recurring_id}/toggle",
            operation="recurring.toggle",
            fallback_message="Failed to update recurring transaction",
        )
        return data if isinstance(data, dict) else {}

    def delete_recurring(self, recurring_id: str) -> None:
        self._request(
            "DELETE",
            f"/api/recurring-transaction/{recurring_id}",
            operation="recurring.delete",
            fallback_message="Failed to delete recurring transaction",
        )


def _receipt_payload(payload: dict[str, Any]) -> dict[str, Any]:
    # Hosted receipts travel in JSON as receipt_url; only local files keep the
    # multipart field name.
    receipt = payload.get(RECEIPT_FIELD)
    if isinstance(receipt, str) and not is_local_file_ref(receipt):
        payload = {key: value for key, value in payload.items() if key != RECEIPT_FIELD}
        payload["receipt_url"] = receipt
    return payload
