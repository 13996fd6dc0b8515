from playwright.sync_api import Error as PlaywrightError

from findlocators.menu_reveal import (
    ANCESTOR_AT_DEPTH_SCRIPT,
    REVEAL_PROBE_SCRIPT,
    ensure_interactable,
    find_menu_ancestors,
    plan_reveal,
)


class _FakeAncestor:
    def __init__(self, name: str, events: list[tuple[str, str]], fail: bool = False) -> None:
        self.name = name
        self.events = events
        self.fail = fail
        self.disposed = False

    def dispatch_event(self, event_type: str) -> None:
        if self.fail:
            raise PlaywrightError("Element is not attached to the DOM")
        self.events.append((self.name, event_type))

    def dispose(self) -> None:
        self.disposed = True


class _DepthHandle:
    def __init__(self, element: object) -> None:
        self.element = element
        self.disposed = False

    def as_element(self) -> object:
        return self.element

    def dispose(self) -> None:
        self.disposed = True


class _FakeElement:
    def __init__(self, payload: object, ancestors: dict[int, object] | None = None) -> None:
        self.payload = payload
        self.ancestors = ancestors or {}

    def evaluate(self, script: str) -> object:
        assert script == REVEAL_PROBE_SCRIPT
        return self.payload

    def evaluate_handle(self, script: str, depth: int) -> _DepthHandle:
        assert script == ANCESTOR_AT_DEPTH_SCRIPT
        return _DepthHandle(self.ancestors.get(depth))


class _FakePage:
    def __init__(self, events: list[tuple[str, str]]) -> None:
        self.events = events

    def wait_for_timeout(self, timeout: int) -> None:
        self.events.append(("page", f"wait:{timeout}"))


def _ancestor(depth: int, classes: list[str] | None = None, role: str | None = None, popup: str | None = None) -> dict:
    return {"depth": depth, "classes": classes or [], "role": role, "aria_haspopup": popup}


def test_visible_element_needs_no_reveal() -> None:
    plan = plan_reveal({"hidden": False, "ancestors": [_ancestor(1, ["dropdown"])]})
    assert not plan.needed
    assert plan.depths == ()


def test_hidden_element_reveals_outermost_menu_first() -> None:
    payload = {
        "hidden": True,
        "ancestors": [
            _ancestor(1, ["submenu"]),
            _ancestor(2, ["list-wrapper"]),
            _ancestor(3, [], role="menu"),
            _ancestor(4, ["nav"], popup="true"),
            _ancestor(5, ["menu-wrap"]),
        ],
    }

    plan = plan_reveal(payload)

    assert plan.needed
    assert plan.depths == (4, 3, 1)


def test_hidden_element_without_menu_ancestors_is_left_alone() -> None:
    plan = plan_reveal({"hidden": True, "ancestors": [_ancestor(1, ["card"])]})
    assert plan.hidden
    assert not plan.needed


def test_malformed_reveal_payload_is_ignored() -> None:
    assert not plan_reveal(None).needed
    assert plan_reveal({"hidden": True, "ancestors": ["x", {"depth": "?", "classes": ["menu"]}]}).depths == ()


def test_find_menu_ancestors_resolves_handles_by_depth() -> None:
    events: list[tuple[str, str]] = []
    outer = _FakeAncestor("outer", events)
    inner = _FakeAncestor("inner", events)
    element = _FakeElement(
        {"hidden": True, "ancestors": [_ancestor(1, ["submenu"]), _ancestor(2, ["dropdown"])]},
        {1: inner, 2: outer},
    )

    assert find_menu_ancestors(element) == [outer, inner]


def test_ensure_interactable_hovers_dropdown_ancestor_and_pauses() -> None:
    events: list[tuple[str, str]] = []
    dropdown = _FakeAncestor("dropdown", events)
    element = _FakeElement({"hidden": True, "ancestors": [_ancestor(1, ["dropdown"])]}, {1: dropdown})

    ensure_interactable(_FakePage(events), element, pause_ms=300)

    assert events == [("dropdown", "mouseover"), ("page", "wait:300")]


def test_ensure_interactable_does_nothing_for_visible_element() -> None:
    events: list[tuple[str, str]] = []
    element = _FakeElement({"hidden": False, "ancestors": []})

    ensure_interactable(_FakePage(events), element)

    assert events == []


def test_ensure_interactable_keeps_going_when_a_hover_fails() -> None:
    events: list[tuple[str, str]] = []
    broken = _FakeAncestor("broken", events, fail=True)
    inner = _FakeAncestor("inner", events)
    element = _FakeElement(
        {"hidden": True, "ancestors": [_ancestor(1, ["submenu"]), _ancestor(2, ["dropdown"])]},
        {1: inner, 2: broken},
    )

    ensure_interactable(_FakePage(events), element, pause_ms=10)

    assert events == [("page", "wait:10"), ("inner", "mouseover"), ("page", "wait:10")]


class _InterruptedPage:
    def wait_for_timeout(self, timeout: int) -> None:
        raise PlaywrightError("Target page, context or browser has been closed")


def test_ensure_interactable_releases_ancestor_handles() -> None:
    events: list[tuple[str, str]] = []
    outer = _FakeAncestor("outer", events)
    inner = _FakeAncestor("inner", events)
    element = _FakeElement(
        {"hidden": True, "ancestors": [_ancestor(1, ["submenu"]), _ancestor(2, ["dropdown"])]},
        {1: inner, 2: outer},
    )

    ensure_interactable(_FakePage(events), element, pause_ms=10)

    assert outer.disposed and inner.disposed


def test_ensure_interactable_releases_handles_when_pause_is_interrupted() -> None:
    events: list[tuple[str, str]] = []
    outer = _FakeAncestor("outer", events)
    inner = _FakeAncestor("inner", events)
    element = _FakeElement(
        {"hidden": True, "ancestors": [_ancestor(1, ["submenu"]), _ancestor(2, ["dropdown"])]},
        {1: inner, 2: outer},
    )

    ensure_interactable(_InterruptedPage(), element, pause_ms=10)

    assert events == [("outer", "mouseover")]
    assert outer.disposed and inner.disposed
