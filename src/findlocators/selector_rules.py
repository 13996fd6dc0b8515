from __future__ import annotations

import re
from typing import Iterable

TRANSIENT_STATE_CLASSES = frozenset(
    {
        "active",
        "selected",
        "hover",
        "open",
        "show",
        "hide",
        "hidden",
        "visible",
        "collapsed",
        "expanded",
    }
)

MIN_CLASS_LENGTH = 4

MENU_CLASS_MARKERS = ("menu", "dropdown", "submenu")


def normalize_space(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def is_transient_class(class_name: str) -> bool:
    return class_name in TRANSIENT_STATE_CLASSES


def qualifying_classes(classes: Iterable[str]) -> list[str]:
    return [
        cls
        for cls in classes
        if cls and not is_transient_class(cls) and len(cls) >= MIN_CLASS_LENGTH
    ]


def pick_longest_class(classes: Iterable[str]) -> str | None:
    picks = qualifying_classes(classes)
    if not picks:
        return None
    # max() keeps the first of equally long names, i.e. source order.
    return max(picks, key=len)


def escape_css_identifier(value: str) -> str:
    escaped: list[str] = []
    length = len(value)
    for index, char in enumerate(value):
        code = ord(char)
        if code == 0:
            escaped.append("\ufffd")
        elif 0x01 <= code <= 0x1F or code == 0x7F:
            escaped.append(f"\\{code:x} ")
        elif index == 0 and char.isdigit() and char.isascii():
            escaped.append(f"\\{code:x} ")
        elif index == 1 and char.isdigit() and char.isascii() and value[0] == "-":
            escaped.append(f"\\{code:x} ")
        elif index == 0 and char == "-" and length == 1:
            escaped.append("\\-")
        elif code >= 0x80 or char in "-_" or (char.isascii() and char.isalnum()):
            escaped.append(char)
        else:
            escaped.append(f"\\{char}")
    return "".join(escaped)


def escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def css_attribute_selector(tag: str, attr: str, value: str) -> str:
    return f'{tag}[{attr}="{escape_css_string(value)}"]'


def xpath_string_literal(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    quoted = [f'"{piece}"' for piece in pieces]
    return "concat(" + ", '\"', ".join(quoted) + ")"


def has_menu_marker(classes: Iterable[str], role: str | None, aria_haspopup: str | None) -> bool:
    class_set = set(classes)
    if any(marker in class_set for marker in MENU_CLASS_MARKERS):
        return True
    if (role or "") == "menu":
        return True
    return (aria_haspopup or "") == "true"
