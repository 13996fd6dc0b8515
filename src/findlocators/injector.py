from __future__ import annotations

from typing import TYPE_CHECKING

from .models import Rect

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, JSHandle, Page

OVERLAY_ID = "element-locator-overlay"

SHOW_OVERLAY_SCRIPT = r"""
({ id, rect }) => {
  const existing = document.getElementById(id);
  if (existing && existing.parentNode) {
    existing.parentNode.removeChild(existing);
  }
  const overlay = document.createElement('div');
  overlay.id = id;
  overlay.style.position = 'absolute';
  overlay.style.top = `${rect.top}px`;
  overlay.style.left = `${rect.left}px`;
  overlay.style.width = `${rect.width}px`;
  overlay.style.height = `${rect.height}px`;
  overlay.style.border = '2px solid red';
  overlay.style.pointerEvents = 'none';
  overlay.style.zIndex = '2147483645';
  overlay.style.boxSizing = 'border-box';
  overlay.style.transition = 'all 0.2s ease';
  (document.body || document.documentElement).appendChild(overlay);
  return overlay;
}
"""

MOVE_OVERLAY_SCRIPT = r"""
(overlay, rect) => {
  if (!overlay || !overlay.parentNode) {
    return false;
  }
  overlay.style.top = `${rect.top}px`;
  overlay.style.left = `${rect.left}px`;
  overlay.style.width = `${rect.width}px`;
  overlay.style.height = `${rect.height}px`;
  return true;
}
"""

REMOVE_OVERLAY_SCRIPT = r"""
(id) => {
  const overlays = Array.from(document.querySelectorAll(`[id="${id}"]`));
  for (const overlay of overlays) {
    overlay.parentNode.removeChild(overlay);
  }
  return overlays.length;
}
"""

COUNT_OVERLAYS_SCRIPT = r"""
(id) => document.querySelectorAll(`[id="${id}"]`).length
"""

SCROLL_INTO_VIEW_SCRIPT = r"""
(el) => {
  if (el && el.scrollIntoView) {
    el.scrollIntoView({ block: 'center', inline: 'nearest' });
  }
}
"""


def show_overlay(page: Page, rect: Rect) -> JSHandle:
    return page.evaluate_handle(SHOW_OVERLAY_SCRIPT, {"id": OVERLAY_ID, "rect": rect.to_dict()})


def move_overlay(overlay: JSHandle, rect: Rect) -> bool:
    return bool(overlay.evaluate(MOVE_OVERLAY_SCRIPT, rect.to_dict()))


def remove_overlay(page: Page) -> int:
    return int(page.evaluate(REMOVE_OVERLAY_SCRIPT, OVERLAY_ID) or 0)


def count_overlays(page: Page) -> int:
    return int(page.evaluate(COUNT_OVERLAYS_SCRIPT, OVERLAY_ID) or 0)


def scroll_into_view(element: ElementHandle) -> None:
    element.evaluate(SCROLL_INTO_VIEW_SCRIPT)
