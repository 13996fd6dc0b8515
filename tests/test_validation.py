from findlocators.validation import COUNT_CSS_MATCHES_SCRIPT, is_unique_css, verify_unique_css


class _FakePage:
    def __init__(self, results: dict[str, object]) -> None:
        self.results = results
        self.evaluated: list[str] = []

    def evaluate(self, script: str, selector: str) -> object:
        assert script == COUNT_CSS_MATCHES_SCRIPT
        self.evaluated.append(selector)
        return self.results.get(selector, {"ok": True, "count": 0, "error": None})


def test_single_match_is_unique() -> None:
    page = _FakePage({"#login": {"ok": True, "count": 1, "error": None}})

    check = verify_unique_css(page, "#login")

    assert check.ok
    assert check.match_count == 1
    assert check.reason is None
    assert is_unique_css(page, "#login")


def test_multiple_matches_are_not_unique() -> None:
    page = _FakePage({"li": {"ok": True, "count": 3, "error": None}})

    check = verify_unique_css(page, "li")

    assert not check.ok
    assert check.match_count == 3
    assert check.reason == "3 matches"


def test_zero_matches_are_not_unique() -> None:
    check = verify_unique_css(_FakePage({}), ".missing")
    assert not check.ok
    assert check.reason == "no match"


def test_invalid_selector_is_reported_as_not_unique() -> None:
    page = _FakePage({"div[": {"ok": False, "count": 0, "error": "'div[' is not a valid selector."}})

    check = verify_unique_css(page, "div[")

    assert not check.ok
    assert check.reason == "invalid selector: 'div[' is not a valid selector."
    assert not is_unique_css(page, "div[")


def test_empty_selector_never_reaches_the_page() -> None:
    page = _FakePage({})

    check = verify_unique_css(page, "   ")

    assert not check.ok
    assert check.reason == "empty selector"
    assert page.evaluated == []


def test_malformed_payload_is_not_unique() -> None:
    page = _FakePage({"div": None, "span": {"ok": True, "count": "many", "error": None}})

    assert not is_unique_css(page, "div")
    assert not is_unique_css(page, "span")
