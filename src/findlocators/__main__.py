from __future__ import annotations

import argparse
from dataclasses import replace
from importlib import metadata
import json
from pathlib import Path
import sys

from .app_logging import build_logger
from .models import STRATEGIES, Rect
from .settings import InspectorSettings, load_settings


def _status(message: str) -> None:
    print(f"[findlocators] {message}", file=sys.stderr)


def _print_rect(rect: Rect) -> None:
    print(json.dumps({"rect": rect.to_dict()}), flush=True)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="findlocators",
        description="Synthesize and test CSS/XPath/link-text locators against a live page.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to a settings JSON file")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    subparsers = parser.add_subparsers(dest="command", required=True)

    find_parser = subparsers.add_parser("find", help="Print the locators of the element matched by --target")
    find_parser.add_argument("url", help="Page URL")
    find_parser.add_argument("--target", required=True, help="CSS selector picking the element to inspect")

    test_parser = subparsers.add_parser("test", help="Resolve a locator and highlight the element")
    test_parser.add_argument("url", help="Page URL")
    test_parser.add_argument("--strategy", required=True, help=f"One of: {', '.join(STRATEGIES)}")
    test_parser.add_argument("--locator", required=True, help="Locator value")

    subparsers.add_parser("doctor", help="Print interpreter and Playwright diagnostics")
    return parser.parse_args(argv)


def _doctor() -> int:
    print(f"[findlocators doctor] sys.executable={sys.executable}")
    print(f"[findlocators doctor] sys.version={sys.version}")
    try:
        version = metadata.version("playwright")
    except metadata.PackageNotFoundError:
        print("[findlocators doctor] playwright=not installed")
        return 1
    print(f"[findlocators doctor] playwright={version}")
    return 0


def _settings(args: argparse.Namespace) -> InspectorSettings:
    settings = load_settings(args.config)
    if args.headed:
        settings = replace(settings, headless=False)
    return settings


def _run_find(args: argparse.Namespace, settings: InspectorSettings) -> int:
    from .browser_manager import BrowserManager

    with BrowserManager(settings=settings, on_status=_status) as manager:
        if not manager.start() or not manager.open(args.url):
            return 1
        capture = manager.find_locators(args.target)
        if capture is None:
            return 1
        print(json.dumps(capture.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _run_test(args: argparse.Namespace, settings: InspectorSettings) -> int:
    from .browser_manager import BrowserManager
    from .resolver import normalize_strategy

    try:
        strategy = normalize_strategy(args.strategy)
    except ValueError as exc:
        _status(str(exc))
        return 2

    with BrowserManager(settings=settings, on_status=_status, on_rect=_print_rect) as manager:
        if not manager.start() or not manager.open(args.url):
            return 1
        outcome = manager.test_locator(strategy, args.locator)
        if not outcome.accepted:
            return 1
        if outcome.failure:
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    if sys.version_info < (3, 11):
        raise SystemExit(
            "findlocators requires Python 3.11+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )
    args = parse_args(argv)
    if args.command == "doctor":
        return _doctor()

    settings = _settings(args)
    build_logger(settings)
    if args.command == "find":
        return _run_find(args, settings)
    return _run_test(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
