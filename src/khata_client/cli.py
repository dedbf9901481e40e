from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from .config import ConfigError, load_config
from .exceptions import ApiError, StorageError
from .logging_utils import configure_logging
from .session import ApiSession
from .ui_errors import to_user_facing_error
from .validation import ClientValidationError


def _session(args: argparse.Namespace) -> ApiSession:
    return ApiSession(load_config(args.env_file))


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_login(args: argparse.Namespace) -> None:
    session = _session(args)
    response = session.auth_client().login(args.phone, args.password)
    _emit({"business_id": response.business_id, "authenticated": session.is_authenticated})


def cmd_logout(args: argparse.Namespace) -> None:
    session = _session(args)
    session.auth_client().logout()
    _emit({"authenticated": session.is_authenticated})


def cmd_status(args: argparse.Namespace) -> None:
    session = _session(args)
    _emit(
        {
            "api_base_url": session.config.api_base_url,
            "authenticated": session.is_authenticated,
            "business_setup_completed": session.store.business_setup_completed(),
        }
    )


def cmd_products(args: argparse.Namespace) -> None:
    session = _session(args)
    products = session.products_client().list_products()
    _emit([product.model_dump(mode="json") for product in products])


def cmd_invoice(args: argparse.Namespace) -> None:
    session = _session(args)
    payload = {"customer_id": args.customer_id, "transaction_id": args.transaction_id}
    path = session.invoice_client().generate_invoice(payload, args.out_dir)
    _emit({"path": str(path)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="khata", description="Khata business client")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--log-level", default=None, help="overrides KHATA_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login")
    login_parser.add_argument("--phone", required=True)
    login_parser.add_argument("--password", required=True)
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout")
    logout_parser.set_defaults(func=cmd_logout)

    status_parser = subparsers.add_parser("status")
    status_parser.set_defaults(func=cmd_status)

    products_parser = subparsers.add_parser("products")
    products_parser.set_defaults(func=cmd_products)

    invoice_parser = subparsers.add_parser("invoice")
    invoice_parser.add_argument("--customer-id", default=None)
    invoice_parser.add_argument("--transaction-id", default=None)
    invoice_parser.add_argument("--out-dir", default=".")
    invoice_parser.set_defaults(func=cmd_invoice)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        args.func(args)
    except (ApiError, ClientValidationError, StorageError) as exc:
        error = to_user_facing_error(exc)
        print(error.message, file=sys.stderr)
        if error.technical_details:
            print(error.technical_details, file=sys.stderr)
        return 1
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
