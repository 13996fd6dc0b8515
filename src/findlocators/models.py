from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Strategy = Literal["css", "xpath", "classname", "linktext", "partiallinktext", "tagname"]
STRATEGIES: tuple[Strategy, ...] = ("css", "xpath", "classname", "linktext", "partiallinktext", "tagname")

FailureKind = Literal["NotFound", "InvalidSelector", "InvalidExpression"]

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"


@dataclass(frozen=True, slots=True)
class LocatorSet:
    css: str = ""
    xpath: str = ""
    className: str = ""
    linkText: str = ""
    partialLinkText: str = ""
    tagName: str = ""

    def get(self, strategy: Strategy) -> str:
        mapping = {
            "css": self.css,
            "xpath": self.xpath,
            "classname": self.className,
            "linktext": self.linkText,
            "partiallinktext": self.partialLinkText,
            "tagname": self.tagName,
        }
        return mapping[strategy]

    def available(self) -> list[tuple[Strategy, str]]:
        return [(strategy, self.get(strategy)) for strategy in STRATEGIES if self.get(strategy)]

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Rect:
    top: float
    left: float
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class PathSegment:
    tag: str
    id: str = ""
    nth_of_type: int = 1
    same_tag_count: int = 1
    namespace: str = ""

    @property
    def is_html(self) -> bool:
        return self.namespace in ("", XHTML_NAMESPACE)


@dataclass(slots=True)
class NodeSnapshot:
    tag: str
    id: str = ""
    classes: list[str] = field(default_factory=list)
    class_attr: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    path: list[PathSegment] = field(default_factory=list)

    def attr(self, key: str) -> str | None:
        return self.attributes.get(key) or None


@dataclass(frozen=True, slots=True)
class Candidate:
    selector: str
    is_unique: bool
    rule: str


@dataclass(frozen=True, slots=True)
class UniquenessCheck:
    ok: bool
    match_count: int
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    kind: FailureKind
    message: str


@dataclass(frozen=True, slots=True)
class LocatorCapture:
    locators: LocatorSet
    rect: Rect | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "locators": self.locators.to_dict(),
            "rect": self.rect.to_dict() if self.rect else None,
        }
