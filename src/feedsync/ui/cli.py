# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from feedsync.app import list_option_values, preview_groups, registry, sync_feed
from feedsync.config import ConfigurationError, configure_logging, get_shopify_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from feedsync.domain.model import VariantGroup
    from feedsync.domain.sync import ProgressEvent

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile a product feed with a Shopify catalog")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Create and update products from the feed")
    sync.add_argument(
        "--feed-url",
        type=str,
        help="Feed URL (defaults to FEEDSYNC_FEED_URL)",
    )
    sync.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print progress events as JSON lines",
    )

    preview = subparsers.add_parser("preview", help="Show how feed items group into products")
    preview.add_argument(
        "--feed-url",
        type=str,
        help="Feed URL (defaults to FEEDSYNC_FEED_URL)",
    )

    colors = subparsers.add_parser("colors", help="List option values used in the catalog")
    colors.add_argument(
        "--option",
        type=str,
        default="Color",
        help="Option name to collect (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def print_event(event: ProgressEvent) -> None:
    print(json.dumps(event.to_dict(), ensure_ascii=False, default=str), flush=True)


def _print_groups(groups: Sequence[VariantGroup]) -> None:
    print(f"{len(groups)} product groups")
    for group in groups:
        print(f"\n{group.model_title}  [{group.group_id}]")
        for variant in group.variants:
            price = variant.price if variant.price is not None else "no price"
            print(
                f"  - {variant.capacity} / {variant.color} / {variant.condition}"
                f"  {price}  (sku {variant.sku})"
            )


def _run_sync(args: argparse.Namespace) -> None:
    shop_config = get_shopify_config()
    tenant = shop_config.tenant

    def cancel_handler(_signal_received: int, _frame: FrameType | None) -> None:
        if registry.request_cancel(tenant):
            log.info("Cancelling after the current batch (Ctrl+C again to abort)")
            signal(SIGINT, sigint_handler)
        else:
            sigint_handler(_signal_received, _frame)

    signal(SIGINT, cancel_handler)
    summary = sync_feed(
        feed_url=args.feed_url,
        shopify=shop_config,
        sinks=() if args.quiet else (print_event,),
    )
    log.info(
        "Sync %s: %s/%s groups, created=%s updated=%s skipped=%s errored=%s",
        summary.status,
        summary.processed_groups,
        summary.total_groups,
        summary.created,
        summary.updated,
        summary.skipped,
        summary.errored,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync":
            _run_sync(parsed_args)
        elif parsed_args.command == "preview":
            _print_groups(preview_groups(feed_url=parsed_args.feed_url))
        elif parsed_args.command == "colors":
            for value in list_option_values(parsed_args.option):
                print(value)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
