from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ContractError
from ..http_client import HttpClient
from ..uploads import is_local_file_ref, open_upload
from ..validation import ClientValidationError, ValidationIssue

T = TypeVar("T", bound=BaseModel)


@dataclass
class BaseClient:
    http: HttpClient

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return self.http.request(method, path, **kwargs)

    def _send_with_file(
        self,
        method: str,
        path: str,
        payload: dict[str, Any],
        file_field: str,
        **kwargs: Any,
    ) -> Any:
        """Send JSON, or multipart when ``payload[file_field]`` is a local file.

        Remote URLs stay in the JSON body as plain strings and are never
        re-uploaded.
        """
        ref = payload.get(file_field)
        if isinstance(ref, str) and is_local_file_ref(ref):
            fields = {key: _form_value(value) for key, value in payload.items() if key != file_field}
            return self.http.request(
                method,
                path,
                data=fields,
                files={file_field: open_upload(ref)},
                **kwargs,
            )
        return self.http.request(method, path, json_body=payload, **kwargs)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def coerce_request(value: T | Mapping[str, Any], model_type: type[T]) -> T:
    if isinstance(value, model_type):
        return value
    try:
        return model_type.model_validate(value)
    except PydanticValidationError as exc:
        issues = [
            ValidationIssue(
                field=".".join(str(part) for part in error.get("loc", ())) or "payload",
                reason=error.get("msg", "Invalid value"),
            )
            for error in exc.errors()
        ]
        raise ClientValidationError(issues) from exc


def parse_record(payload: Any, model_type: type[T], *, key: str | None = None, operation: str) -> T:
    """Validate a response body; ``key`` unwraps ``{key: {...}}`` envelopes."""
    data = payload
    if key and isinstance(payload, dict) and isinstance(payload.get(key), dict):
        data = payload[key]
    if not isinstance(data, dict):
        raise _contract_error(operation, "Expected a JSON object", payload)
    try:
        return model_type.model_validate(data)
    except PydanticValidationError as exc:
        raise _contract_error(operation, f"Unexpected response shape: {exc.errors()[0].get('msg')}", payload) from exc


def parse_list(payload: Any, model_type: type[T], *, key: str, operation: str) -> list[T]:
    rows = payload
    if isinstance(payload, dict):
        rows = payload.get(key, [])
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise _contract_error(operation, f"Expected a list under {key!r}", payload)
    try:
        return [model_type.model_validate(row) for row in rows]
    except PydanticValidationError as exc:
        raise _contract_error(operation, f"Unexpected row shape: {exc.errors()[0].get('msg')}", payload) from exc


def _contract_error(operation: str, message: str, payload: Any) -> ContractError:
    return ContractError(
        code="UNEXPECTED_RESPONSE",
        message=message,
        details={"operation": operation},
        status_code=200,
        raw_payload=payload,
    )
