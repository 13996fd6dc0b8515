from __future__ import annotations

from typing import Any, Callable, TYPE_CHECKING

from .models import UniquenessCheck

if TYPE_CHECKING:
    from playwright.sync_api import Page

UniquenessVerifier = Callable[[str], UniquenessCheck]

COUNT_CSS_MATCHES_SCRIPT = """
(selector) => {
  try {
    return { ok: true, count: document.querySelectorAll(selector).length, error: null };
  } catch (e) {
    return { ok: false, count: 0, error: String((e && e.message) || e) };
  }
}
"""


def count_css_matches(page: Page, selector: str) -> tuple[int, str | None]:
    payload: Any = page.evaluate(COUNT_CSS_MATCHES_SCRIPT, selector)
    if not isinstance(payload, dict):
        return 0, "Selector check returned no result."
    if not payload.get("ok"):
        return 0, str(payload.get("error") or "Invalid selector.")
    try:
        return max(0, int(payload.get("count", 0) or 0)), None
    except (TypeError, ValueError):
        return 0, "Selector check returned a malformed count."


def verify_unique_css(page: Page, selector: str) -> UniquenessCheck:
    text = selector.strip()
    if not text:
        return UniquenessCheck(False, 0, "empty selector")

    count, error = count_css_matches(page, text)
    if error:
        return UniquenessCheck(False, 0, f"invalid selector: {error}")
    if count == 0:
        return UniquenessCheck(False, 0, "no match")
    if count > 1:
        return UniquenessCheck(False, count, f"{count} matches")
    return UniquenessCheck(True, 1, None)


def is_unique_css(page: Page, selector: str) -> bool:
    return verify_unique_css(page, selector).ok


def page_verifier(page: Page) -> UniquenessVerifier:
    return lambda selector: verify_unique_css(page, selector)
