from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from types import MappingProxyType
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from modelcat.adapters.catalog_file import dump_catalog, load_catalog, load_rows
from modelcat.app import build_completion, build_registry, import_models, sync_models
from modelcat.config import configure_logging, get_sync_config
from modelcat.domain.sync import CancellationSignal, SyncCallbacks, SyncCancelledError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from modelcat.config import SyncConfig
    from modelcat.domain.sync.events import ConfirmLlmCheck

log = logging.getLogger(__name__)

DEFAULT_CATALOG = Path("catalog.json")

_cancellation = CancellationSignal()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain a catalog of AI models")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch, screen and merge models from sources")
    sync.add_argument(
        "--feed",
        action="append",
        default=[],
        metavar="ID=URL",
        help="JSON feed to fetch; repeatable",
    )
    sync.add_argument(
        "--source",
        action="append",
        default=[],
        metavar="ID",
        help="Extra source to enable, e.g. llm_discovery or local_discovery; repeatable",
    )
    sync.add_argument("--block-nsfw", action="store_true", help="Block flagged models")
    sync.add_argument("--no-translate", action="store_true", help="Skip CJK translation")
    sync.add_argument("--auto-merge", action="store_true", help="Merge fuzzy duplicates")
    sync.add_argument(
        "--yes-llm-safety",
        action="store_true",
        help="Run the model-based safety check without asking",
    )
    _add_catalog_arguments(sync)

    import_ = subparsers.add_parser("import", help="Import rows from a JSON file")
    import_.add_argument("rows", type=Path, help="JSON file holding a list of rows")
    import_.add_argument("--sheet", type=str, help="Sheet name used to infer the domain")
    import_.add_argument("--auto-merge", action="store_true", help="Merge fuzzy duplicates")
    _add_catalog_arguments(import_)

    return parser.parse_args(list(argv))


def _add_catalog_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--existing",
        type=Path,
        default=DEFAULT_CATALOG,
        help="Catalog to merge into (default: %(default)s)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Where to write the merged catalog (defaults to --existing)",
    )


def _parse_feeds(values: Sequence[str]) -> dict[str, str]:
    feeds: dict[str, str] = {}
    for value in values:
        feed_id, sep, url = value.partition("=")
        if not sep or not feed_id.strip() or not url.strip():
            raise ValueError(f"Invalid --feed value (expected ID=URL): {value}")
        feeds[feed_id.strip()] = url.strip()
    return feeds


def _sync_config(args: argparse.Namespace, feeds: dict[str, str]) -> SyncConfig:
    base = get_sync_config()
    sources = dict(base.sources)
    sources.update(dict.fromkeys(feeds, True))
    sources.update(dict.fromkeys(args.source, True))
    return replace(
        base,
        sources=MappingProxyType(sources),
        enable_nsfw_filtering=base.enable_nsfw_filtering or args.block_nsfw,
        enable_translation=base.enable_translation and not args.no_translate,
        auto_merge_duplicates=base.auto_merge_duplicates or args.auto_merge,
    )


def _confirm_llm_check(*, assume_yes: bool) -> ConfirmLlmCheck:
    def confirm(count: int, estimated_seconds: float) -> bool:
        if assume_yes:
            return True
        if not sys.stdin.isatty():
            log.info("Skipping model-based safety check (non-interactive)")
            return False
        answer = input(
            f"Run model-based safety check on {count} models (~{estimated_seconds:.0f}s)? [y/N] "
        )
        return answer.strip().lower() in {"y", "yes"}

    return confirm


def _run_sync(args: argparse.Namespace) -> None:
    feeds = _parse_feeds(args.feed)
    config = _sync_config(args, feeds)
    existing = load_catalog(args.existing)
    callbacks = SyncCallbacks(
        confirm_llm_check=_confirm_llm_check(assume_yes=args.yes_llm_safety),
        cancellation=_cancellation,
    )
    result = sync_models(
        registry=build_registry(feeds),
        existing=existing,
        config=config,
        callbacks=callbacks,
        completion=build_completion(),
    )
    output = args.output or args.existing
    dump_catalog(result.merge.models, output)
    log.info(
        "Wrote %d models to %s (%d blocked)",
        len(result.merge.models),
        output,
        len(result.sync.flagged),
    )


def _run_import(args: argparse.Namespace) -> None:
    rows = load_rows(args.rows)
    existing = load_catalog(args.existing)
    response = import_models(
        rows,
        existing=existing,
        auto_merge_duplicates=args.auto_merge,
        sheet_name=args.sheet,
    )
    output = args.output or args.existing
    dump_catalog(response.models, output)
    log.info("Wrote %d models to %s", len(response.models), output)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "sync":
            _parse_feeds(parsed_args.feed)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        if parsed_args.command == "sync":
            _run_sync(parsed_args)
        elif parsed_args.command == "import":
            _run_import(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except SyncCancelledError:
        log.warning("Sync cancelled; catalog left unchanged")
        sys.exit(130)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """First Ctrl+C cancels at the next checkpoint, the second one quits."""
    if _cancellation.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(130)
    log.info("Cancelling after the current stage (Ctrl+C again to quit)")
    _cancellation.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
