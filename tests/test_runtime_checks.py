from findlocators.runtime_checks import is_closed_target_error, is_missing_browser_error, normalize_url


def test_is_missing_browser_error_matches_common_messages() -> None:
    errors = [
        RuntimeError("Executable doesn't exist at /path/to/chromium/chrome"),
        RuntimeError(
            "Please run the following command to download new browsers: playwright install"
        ),
        RuntimeError("Failed to launch chromium because executable does not exist"),
    ]

    for error in errors:
        assert is_missing_browser_error(error)


def test_is_missing_browser_error_ignores_unrelated_errors() -> None:
    error = RuntimeError("net::ERR_NAME_NOT_RESOLVED")
    assert not is_missing_browser_error(error)


def test_is_closed_target_error() -> None:
    assert is_closed_target_error(RuntimeError("Target page, context or browser has been closed"))
    assert not is_closed_target_error(RuntimeError("Timeout 30000ms exceeded."))


def test_normalize_url_adds_https_for_bare_hosts() -> None:
    assert normalize_url("  example.org/login ") == "https://example.org/login"
    assert normalize_url("http://localhost:8000") == "http://localhost:8000"
    assert normalize_url("file:///tmp/page.html") == "file:///tmp/page.html"
    assert normalize_url("data:text/html,<p>hi</p>") == "data:text/html,<p>hi</p>"
    assert normalize_url("   ") == ""
