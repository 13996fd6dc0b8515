from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .models import NodeSnapshot, PathSegment, Rect
from .selector_rules import normalize_space

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle

SNAPSHOT_SCRIPT = """
(el) => {
  const attrs = {};
  for (const attr of Array.from(el.attributes || [])) {
    attrs[attr.name] = attr.value;
  }

  const sameType = (a, b) => a.localName === b.localName && a.namespaceURI === b.namespaceURI;
  const path = [];
  let current = el;
  while (current && current.nodeType === Node.ELEMENT_NODE) {
    const tag = current.localName || (current.tagName || '').toLowerCase();
    let nth = 1;
    let sibling = current;
    while ((sibling = sibling.previousElementSibling)) {
      if (sameType(sibling, current)) nth += 1;
    }
    const parent = current.parentNode;
    const siblings = parent && parent.children ? Array.from(parent.children) : [current];
    const sameTag = siblings.filter((child) => sameType(child, current)).length;
    path.push({
      tag,
      id: current.id || '',
      nth,
      same_tag_count: sameTag,
      namespace: current.namespaceURI || '',
    });
    if (tag === 'body') break;
    current = current.parentElement;
  }

  return {
    tag: el.localName || (el.tagName || '').toLowerCase(),
    id: el.id || '',
    classes: Array.from(el.classList || []),
    class_attr: el.getAttribute('class') || '',
    attributes: attrs,
    text: (el.textContent || '').trim(),
    path,
  };
}
"""

MEASURE_SCRIPT = """
(el) => {
  const rect = el.getBoundingClientRect();
  return {
    top: rect.top + window.scrollY,
    left: rect.left + window.scrollX,
    width: rect.width,
    height: rect.height,
  };
}
"""


def extract_node_snapshot(element: ElementHandle) -> NodeSnapshot:
    payload: dict[str, Any] = element.evaluate(SNAPSHOT_SCRIPT)
    return snapshot_from_payload(payload)


def snapshot_from_payload(payload: dict[str, Any]) -> NodeSnapshot:
    path: list[PathSegment] = []
    for item in payload.get("path", []):
        if not isinstance(item, dict):
            continue
        path.append(
            PathSegment(
                tag=str(item.get("tag", "") or ""),
                id=str(item.get("id", "") or ""),
                nth_of_type=_to_int(item.get("nth"), 1),
                same_tag_count=_to_int(item.get("same_tag_count"), 1),
                namespace=str(item.get("namespace", "") or ""),
            )
        )

    return NodeSnapshot(
        tag=str(payload.get("tag", "") or ""),
        id=str(payload.get("id", "") or ""),
        classes=[str(cls) for cls in payload.get("classes", []) if cls],
        class_attr=normalize_space(payload.get("class_attr")),
        attributes={str(k): str(v) for k, v in dict(payload.get("attributes", {})).items()},
        text=str(payload.get("text", "") or ""),
        path=path,
    )


def measure_element(element: ElementHandle) -> Rect | None:
    payload = element.evaluate(MEASURE_SCRIPT)
    return rect_from_payload(payload)


def rect_from_payload(payload: Any) -> Rect | None:
    if not isinstance(payload, dict):
        return None
    try:
        return Rect(
            top=float(payload["top"]),
            left=float(payload["left"]),
            width=float(payload["width"]),
            height=float(payload["height"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
