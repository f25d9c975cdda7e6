from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from catalog_sync.app import (
    OAuthResult,
    connect,
    connect_with_code,
    disconnect,
    get_connection_status,
    import_or_sync,
)
from catalog_sync.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile a local catalog with Shopify")
    subparsers = parser.add_subparsers(dest="command", required=True)

    connect_parser = subparsers.add_parser("connect", help="Link a business to a Shopify store")
    connect_parser.add_argument("--business-id", type=str, required=True)
    connect_parser.add_argument(
        "--shop",
        type=str,
        required=True,
        help="Shop name or <name>.myshopify.com domain",
    )
    credentials = connect_parser.add_mutually_exclusive_group(required=True)
    credentials.add_argument(
        "--access-token",
        type=str,
        help="Access token from a completed OAuth handshake",
    )
    credentials.add_argument(
        "--code",
        type=str,
        help="OAuth authorization code to exchange for an access token",
    )
    connect_parser.add_argument(
        "--scopes",
        type=str,
        default="",
        help="Comma-separated scopes granted with --access-token",
    )

    sync = subparsers.add_parser("sync", help="Import or re-sync the full catalog")
    sync.add_argument("--business-id", type=str, required=True)

    status = subparsers.add_parser("status", help="Show the connection status")
    status.add_argument("--business-id", type=str, required=True)

    disconnect_parser = subparsers.add_parser(
        "disconnect",
        help="Remove the connection and keep products as manual entries",
    )
    disconnect_parser.add_argument("--business-id", type=str, required=True)

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _parse_scopes(value: str) -> tuple[str, ...]:
    return tuple(scope.strip() for scope in value.split(",") if scope.strip())


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    try:
        configure_logging()
    except ConfigurationError as exc:
        log.error("Invalid logging configuration: %s", exc)  # noqa: TRY400
        sys.exit(2)
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        business_id = _parse_uuid(parsed_args.business_id)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "connect":
            if parsed_args.code is not None:
                connection_id = connect_with_code(
                    business_id=business_id,
                    shop=parsed_args.shop,
                    code=parsed_args.code,
                )
            else:
                connection_id = connect(
                    business_id=business_id,
                    shop=parsed_args.shop,
                    oauth=OAuthResult(
                        access_token=parsed_args.access_token,
                        scopes=_parse_scopes(parsed_args.scopes),
                    ),
                )
            log.info("Connected business %s (connection %s)", business_id, connection_id)
        elif parsed_args.command == "sync":
            result = import_or_sync(business_id=business_id)
            log.info(
                "Catalog sync %s: added=%s, updated=%s, removed=%s, skipped=%s",
                result.status,
                result.added,
                result.updated,
                result.removed,
                result.skipped,
            )
            for error in result.errors:
                log.warning("Sync error: %s", error)
        elif parsed_args.command == "status":
            status = get_connection_status(business_id=business_id)
            if status.connected:
                log.info(
                    "Connected to %s (last sync %s at %s, scopes=%s)",
                    status.shop,
                    status.last_sync_status or "never",
                    status.last_sync_at,
                    ",".join(status.scopes),
                )
            else:
                log.info("Business %s is not connected", business_id)
        elif parsed_args.command == "disconnect":
            detached = disconnect(business_id=business_id)
            log.info(
                "Disconnected: detached %s products and %s variants",
                detached.products,
                detached.variants,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Configuration error during %s", parsed_args.command)
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
