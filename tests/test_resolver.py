import pytest

from findlocators.models import ResolutionFailure
from findlocators.resolver import RESOLVE_SCRIPT, normalize_strategy, resolve_locator


class _FakeHandle:
    def __init__(self, value: object = None, element: object = None) -> None:
        self.value = value
        self.element = element
        self.disposed = False

    def json_value(self) -> object:
        return self.value

    def as_element(self) -> object:
        return self.element

    def dispose(self) -> None:
        self.disposed = True


class _FakeResult(_FakeHandle):
    def __init__(self, node: object = None, error: str | None = None, non_element: bool = False) -> None:
        super().__init__()
        self.properties = {
            "node": _FakeHandle(element=node),
            "error": _FakeHandle(error),
            "nonElement": _FakeHandle(non_element),
        }

    def get_property(self, name: str) -> _FakeHandle:
        return self.properties[name]


class _FakePage:
    def __init__(self, result: _FakeResult) -> None:
        self.result = result
        self.args: list[dict] = []

    def evaluate_handle(self, script: str, arg: dict) -> _FakeResult:
        assert script == RESOLVE_SCRIPT
        self.args.append(arg)
        return self.result


def test_found_element_is_returned_and_result_handle_disposed() -> None:
    element = object()
    result = _FakeResult(node=element)
    page = _FakePage(result)

    assert resolve_locator(page, "css", "#login") is element
    assert page.args == [{"strategy": "css", "value": "#login"}]
    assert result.disposed
    assert not result.properties["node"].disposed


def test_missing_element_reports_not_found() -> None:
    result = _FakeResult()

    failure = resolve_locator(_FakePage(result), "css", ".nope")

    assert failure == ResolutionFailure("NotFound", "Element not found with css: .nope")
    assert result.properties["node"].disposed


def test_invalid_css_reports_invalid_selector() -> None:
    page = _FakePage(_FakeResult(error="'div[' is not a valid selector."))

    failure = resolve_locator(page, "css", "div[")

    assert isinstance(failure, ResolutionFailure)
    assert failure.kind == "InvalidSelector"
    assert failure.message == "Invalid CSS selector: 'div[' is not a valid selector."


def test_invalid_xpath_reports_invalid_expression() -> None:
    page = _FakePage(_FakeResult(error="The string '//div[' is not a valid XPath expression."))

    failure = resolve_locator(page, "xpath", "//div[")

    assert isinstance(failure, ResolutionFailure)
    assert failure.kind == "InvalidExpression"
    assert failure.message.startswith("Invalid XPath: ")


def test_xpath_selecting_text_node_is_not_found() -> None:
    page = _FakePage(_FakeResult(non_element=True))

    failure = resolve_locator(page, "xpath", "//p/text()")

    assert failure == ResolutionFailure(
        "NotFound",
        "Element not found with xpath: //p/text() (expression did not select an element)",
    )


def test_strategy_names_are_normalized_before_lookup() -> None:
    element = object()
    page = _FakePage(_FakeResult(node=element))

    assert resolve_locator(page, "Partial Link Text", "docs") is element
    assert page.args[0]["strategy"] == "partiallinktext"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("CSS", "css"),
        ("xpath", "xpath"),
        ("class_name", "classname"),
        ("link-text", "linktext"),
        ("partialLinkText", "partiallinktext"),
        ("tag name", "tagname"),
    ],
)
def test_normalize_strategy(raw: str, expected: str) -> None:
    assert normalize_strategy(raw) == expected


def test_unknown_strategy_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Unknown locator strategy"):
        normalize_strategy("id")
