from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from .selector_rules import has_menu_marker

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("findlocators.reveal")

DEFAULT_REVEAL_DELAY_MS = 300

REVEAL_PROBE_SCRIPT = """
(el) => {
  const isConcealing = (style) =>
    style.display === 'none' || style.visibility === 'hidden' || style.opacity === '0';
  const own = window.getComputedStyle(el);
  let hidden = isConcealing(own);
  const ancestors = [];
  const root = document.documentElement;
  let parent = el.parentElement;
  let depth = 1;
  while (parent && parent !== root) {
    const style = window.getComputedStyle(parent);
    if (style.display === 'none' || style.opacity === '0') {
      hidden = true;
    }
    ancestors.push({
      depth,
      classes: Array.from(parent.classList || []),
      role: parent.getAttribute('role'),
      aria_haspopup: parent.getAttribute('aria-haspopup'),
    });
    parent = parent.parentElement;
    depth += 1;
  }
  return { hidden, ancestors };
}
"""

ANCESTOR_AT_DEPTH_SCRIPT = """
(el, depth) => {
  let node = el;
  for (let i = 0; i < depth && node; i += 1) {
    node = node.parentElement;
  }
  return node;
}
"""


@dataclass(frozen=True, slots=True)
class RevealPlan:
    hidden: bool
    depths: tuple[int, ...] = field(default_factory=tuple)

    @property
    def needed(self) -> bool:
        return self.hidden and bool(self.depths)


def plan_reveal(payload: Any) -> RevealPlan:
    if not isinstance(payload, dict):
        return RevealPlan(hidden=False)
    hidden = bool(payload.get("hidden"))
    if not hidden:
        return RevealPlan(hidden=False)

    depths: list[int] = []
    for item in payload.get("ancestors", []):
        if not isinstance(item, dict):
            continue
        classes = [str(cls) for cls in item.get("classes", []) or []]
        if not has_menu_marker(classes, item.get("role"), item.get("aria_haspopup")):
            continue
        try:
            depths.append(int(item.get("depth")))
        except (TypeError, ValueError):
            continue

    # Deepest ancestor is the outermost container; it has to open first.
    depths.sort(reverse=True)
    return RevealPlan(hidden=True, depths=tuple(depths))


def find_menu_ancestors(element: ElementHandle) -> list[ElementHandle]:
    plan = plan_reveal(element.evaluate(REVEAL_PROBE_SCRIPT))
    if not plan.needed:
        return []

    ancestors: list[ElementHandle] = []
    for depth in plan.depths:
        handle = element.evaluate_handle(ANCESTOR_AT_DEPTH_SCRIPT, depth)
        ancestor = handle.as_element()
        if ancestor is None:
            handle.dispose()
            continue
        ancestors.append(ancestor)
    return ancestors


def hover_ancestor(ancestor: ElementHandle) -> bool:
    try:
        ancestor.dispatch_event("mouseover")
        return True
    except PlaywrightError as exc:
        logger.warning("Reveal hover failed: %s", exc)
        return False


def ensure_interactable(page: Page, element: ElementHandle, pause_ms: int = DEFAULT_REVEAL_DELAY_MS) -> None:
    try:
        ancestors = find_menu_ancestors(element)
    except PlaywrightError as exc:
        logger.warning("Menu reveal probe failed: %s", exc)
        return

    if ancestors:
        logger.info("Revealing %s menu container(s) before highlight.", len(ancestors))
    try:
        for ancestor in ancestors:
            hover_ancestor(ancestor)
            try:
                page.wait_for_timeout(pause_ms)
            except PlaywrightError as exc:
                logger.warning("Reveal pause interrupted: %s", exc)
                return
    finally:
        release_handles(ancestors)


def release_handles(handles: list[ElementHandle]) -> None:
    for handle in handles:
        try:
            handle.dispose()
        except PlaywrightError as exc:
            logger.debug("Handle dispose failed: %s", exc)
