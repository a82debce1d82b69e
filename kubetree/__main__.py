"""Command-line entry point: ``python -m kubetree`` or ``kubetree``."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from kubetree import __version__
from kubetree.app import VIEW_NAMESPACES, VIEW_RESOURCES, KubeTreeApp
from kubetree.models.state import ConfigLoadError, ConfigManager, TreeSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubetree",
        description="Browse Kubernetes resources as a live, paginated tree.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--context",
        default=None,
        help="kubeconfig context to use (default: current context)",
    )
    parser.add_argument(
        "-n",
        "--namespace",
        default=None,
        help="Limit namespaced resources to this namespace (default: all namespaces)",
    )
    parser.add_argument(
        "--view",
        choices=(VIEW_RESOURCES, VIEW_NAMESPACES),
        default=VIEW_RESOURCES,
        help="Tree to display (default: resources)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        default=None,
        help="Start live updates immediately",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Items revealed per 'Load More' page",
    )
    parser.add_argument(
        "--no-paging",
        action="store_true",
        help="Show every item at once instead of paging",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet window for coalescing refreshes, in milliseconds",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Settings file (default: {ConfigManager.DEFAULT_PATH})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write debug logs to this file",
    )
    return parser


def configure_logging(log_file: Path | None) -> None:
    """Send logs to ``log_file``; without one, logging stays silent so the TUI is not disturbed."""
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("kubetree")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.context is not None:
        overrides["context"] = args.context
    if args.watch:
        overrides["watch_enabled"] = True
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.no_paging:
        overrides["progressive_loading"] = False
    if args.debounce_ms is not None:
        overrides["debounce_ms"] = args.debounce_ms
    return overrides


def resolve_settings(args: argparse.Namespace) -> TreeSettings:
    """Load the settings file and apply command-line overrides on top.

    Overrides are re-validated, so an out-of-range ``--page-size`` is
    rejected the same way as a bad value in the settings file.
    """
    try:
        settings = ConfigManager.load(args.config)
    except ConfigLoadError as exc:
        raise SystemExit(str(exc)) from exc

    overrides = settings_overrides(args)
    if not overrides:
        return settings
    merged = settings.model_dump()
    merged.update(overrides)
    try:
        return TreeSettings.model_validate(merged)
    except ValueError as exc:
        raise SystemExit(f"Invalid option: {exc}") from exc


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)
    settings = resolve_settings(args)
    logger.info("Starting kubetree %s (view=%s)", __version__, args.view)

    app = KubeTreeApp(
        settings=settings,
        config_path=args.config,
        namespace=args.namespace,
        view=args.view,
    )
    app.run()


if __name__ == "__main__":  # pragma: no cover
    main()
