from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal, TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from .dom_extractor import measure_element
from .injector import move_overlay, remove_overlay, scroll_into_view, show_overlay
from .latch import LocatorTestLatch
from .menu_reveal import find_menu_ancestors, hover_ancestor, release_handles
from .models import Rect, ResolutionFailure
from .resolver import resolve_locator
from .scheduler import ScheduledTask, TaskScheduler
from .settings import InspectorSettings

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, JSHandle, Page

SessionState = Literal["idle", "resolving", "revealing", "highlighting", "auto_dismiss", "error_reported"]

RectCallback = Callable[[Rect], None]
ErrorCallback = Callable[[str], None]


@dataclass(slots=True)
class HighlightSession:
    state: SessionState = "idle"
    latch: LocatorTestLatch = field(default_factory=LocatorTestLatch)
    target: ElementHandle | None = None
    overlay: JSHandle | None = None
    refresh_task: ScheduledTask | None = None
    dismiss_task: ScheduledTask | None = None
    reveal_tasks: list[ScheduledTask] = field(default_factory=list)
    reveal_handles: list[ElementHandle] = field(default_factory=list)
    last_failure: ResolutionFailure | None = None
    transitions: list[SessionState] = field(default_factory=list)

    @property
    def idle(self) -> bool:
        return self.state == "idle"


@dataclass(frozen=True, slots=True)
class LocatorTestOutcome:
    accepted: bool
    found: bool = False
    failure: ResolutionFailure | None = None


class LocatorTester:
    def __init__(
        self,
        page: Page,
        scheduler: TaskScheduler | None = None,
        settings: InspectorSettings | None = None,
        on_rect: RectCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.page = page
        self.scheduler = scheduler or TaskScheduler()
        self.settings = settings or InspectorSettings()
        self._on_rect = on_rect or (lambda _rect: None)
        self._on_error = on_error or (lambda _message: None)
        self.logger = logging.getLogger("findlocators.session")

    def test_locator(self, session: HighlightSession, strategy: str, value: str) -> LocatorTestOutcome:
        if not session.latch.acquire():
            self.logger.info("Locator test skipped because previous test is still running: %s=%s", strategy, value)
            return LocatorTestOutcome(accepted=False)

        session.last_failure = None
        try:
            self._transition(session, "resolving")
            remove_overlay(self.page)
            result = resolve_locator(self.page, strategy, value)
            if isinstance(result, ResolutionFailure):
                self._transition(session, "error_reported")
                session.last_failure = result
                self._on_error(result.message)
                self._teardown(session)
                return LocatorTestOutcome(accepted=True, failure=result)

            session.target = result
            self._begin_reveal(session)
        except Exception:
            self._teardown(session)
            raise
        return LocatorTestOutcome(accepted=True, found=True)

    def pump(self) -> int:
        return self.scheduler.run_pending()

    def wait_until_idle(self, session: HighlightSession, poll_ms: int = 50) -> SessionState:
        while not session.idle:
            next_delay = self.scheduler.next_delay_ms()
            if next_delay is None:
                self.logger.warning("Locator test stalled in state %s; tearing down.", session.state)
                self._teardown(session)
                break
            self.page.wait_for_timeout(max(1, min(poll_ms, next_delay)))
            self.pump()
        return session.state

    def _begin_reveal(self, session: HighlightSession) -> None:
        self._transition(session, "revealing")
        target = session.target
        if target is None:
            self._teardown(session)
            return

        try:
            ancestors = find_menu_ancestors(target)
        except PlaywrightError as exc:
            self.logger.warning("Menu reveal probe failed: %s", exc)
            ancestors = []
        session.reveal_handles = ancestors

        if not ancestors:
            self._begin_highlight(session)
            return

        self.logger.info("Revealing %s menu container(s) before highlight.", len(ancestors))
        delay = self.settings.reveal_delay_ms
        hover_ancestor(ancestors[0])
        for index, ancestor in enumerate(ancestors[1:], start=1):
            session.reveal_tasks.append(
                self.scheduler.call_later(index * delay, lambda a=ancestor: hover_ancestor(a), name="reveal")
            )
        session.reveal_tasks.append(
            self.scheduler.call_later(
                len(ancestors) * delay,
                lambda: self._guarded(session, self._begin_highlight),
                name="reveal-done",
            )
        )

    def _begin_highlight(self, session: HighlightSession) -> None:
        self._transition(session, "highlighting")
        session.reveal_tasks = []
        target = session.target
        if target is None:
            self._teardown(session)
            return

        scroll_into_view(target)
        rect = measure_element(target) or Rect(top=0.0, left=0.0, width=0.0, height=0.0)
        session.overlay = show_overlay(self.page, rect)
        self._on_rect(rect)

        session.refresh_task = self.scheduler.call_every(
            self.settings.highlight_refresh_ms,
            lambda: self._guarded(session, self._refresh),
            name="overlay-refresh",
        )
        session.dismiss_task = self.scheduler.call_later(
            self.settings.highlight_timeout_ms,
            lambda: self._guarded(session, self._auto_dismiss),
            name="overlay-dismiss",
        )

    def _refresh(self, session: HighlightSession) -> None:
        if session.target is None or session.overlay is None:
            return
        rect = measure_element(session.target)
        if rect is None:
            return
        if not move_overlay(session.overlay, rect):
            # Overlay was removed by the page; stop refreshing but keep the dismiss timer.
            if session.refresh_task:
                session.refresh_task.cancel()
            return
        self._on_rect(rect)

    def _auto_dismiss(self, session: HighlightSession) -> None:
        self._transition(session, "auto_dismiss")
        self._teardown(session)

    def _guarded(self, session: HighlightSession, step: Callable[[HighlightSession], None]) -> None:
        try:
            step(session)
        except PlaywrightError as exc:
            # Runs inside the scheduler; the rest of the batch must still run.
            self.logger.warning("Locator test step failed in state %s: %s", session.state, exc)
            self._teardown(session)
            self._on_error(f"Locator test failed: {exc}")
        except Exception:
            self.logger.exception("Locator test step failed in state %s.", session.state)
            self._teardown(session)
            raise

    def _teardown(self, session: HighlightSession) -> None:
        for task in (session.refresh_task, session.dismiss_task, *session.reveal_tasks):
            if task:
                task.cancel()
        session.refresh_task = None
        session.dismiss_task = None
        session.reveal_tasks = []

        try:
            remove_overlay(self.page)
        except PlaywrightError as exc:
            self.logger.warning("Could not remove highlight overlay: %s", exc)

        for handle in (session.overlay, session.target):
            if handle is None:
                continue
            try:
                handle.dispose()
            except PlaywrightError as exc:
                self.logger.debug("Handle dispose failed: %s", exc)
        release_handles(session.reveal_handles)
        session.reveal_handles = []
        session.overlay = None
        session.target = None

        self._transition(session, "idle")
        session.latch.release()

    def _transition(self, session: HighlightSession, state: SessionState) -> None:
        if session.state == state:
            return
        self.logger.info("Locator test state %s -> %s", session.state, state)
        session.state = state
        session.transitions.append(state)
