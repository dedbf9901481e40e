from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from ..exceptions import ContractError, StorageError
from ..models import InvoiceRequest
from .base import BaseClient, coerce_request

logger = logging.getLogger(__name__)


class InvoiceClient(BaseClient):
    def generate_invoice(
        self,
        payload: InvoiceRequest | Mapping[str, Any],
        dest_dir: str | Path,
        *,
        now: datetime | None = None,
    ) -> Path:
        """Generate a PDF invoice and save it under ``dest_dir``.

        The endpoint answers with the PDF bytes, not JSON; the caller gets the
        path of the written file.
        """
        request = coerce_request(payload, InvoiceRequest)
        content = self.http.request_bytes(
            "POST",
            "/api/generate-invoice",
            json_body=request.to_payload(),
            accept="application/pdf",
            operation="invoices.generate",
            fallback_message="Failed to generate invoice",
        )
        if not content:
            raise ContractError(
                code="EMPTY_INVOICE",
                message="Invoice response was empty",
                details=None,
                status_code=200,
            )
        target = Path(dest_dir) / _invoice_filename(request, now or datetime.now(timezone.utc))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Cannot save invoice to {target}: {exc}") from exc
        logger.info("invoice_saved", extra={"path": str(target), "size_bytes": len(content)})
        return target


def _invoice_filename(request: InvoiceRequest, now: datetime) -> str:
    subject = request.transaction_id or request.customer_id or "items"
    safe_subject = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in subject)
    return f"invoice_{safe_subject}_{now.strftime('%Y%m%d%H%M%S')}.pdf"
