from __future__ import annotations

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)

_CLOSED_TARGET_HINTS = (
    "target page, context or browser has been closed",
    "browser has been closed",
    "target closed",
)

INSTALL_HINT = "Run `playwright install chromium` to download the browser build."


def is_missing_browser_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def is_closed_target_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _CLOSED_TARGET_HINTS)


def normalize_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if not url:
        return ""
    if url.startswith(("http://", "https://", "file://", "data:", "about:")):
        return url
    return f"https://{url}"
