from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .dom_extractor import extract_node_snapshot, measure_element
from .models import Candidate, LocatorCapture, LocatorSet, NodeSnapshot, PathSegment
from .selector_rules import (
    css_attribute_selector,
    escape_css_identifier,
    normalize_space,
    pick_longest_class,
    xpath_string_literal,
)
from .validation import UniquenessVerifier, page_verifier

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("findlocators.synthesis")


def id_candidate(snapshot: NodeSnapshot) -> str | None:
    if not snapshot.id:
        return None
    return f"#{escape_css_identifier(snapshot.id)}"


def class_candidate(snapshot: NodeSnapshot) -> str | None:
    picked = pick_longest_class(snapshot.classes)
    if not picked:
        return None
    return f"{snapshot.tag}.{escape_css_identifier(picked)}"


def attribute_candidates(snapshot: NodeSnapshot) -> list[tuple[str, str]]:
    tag = snapshot.tag
    drafts: list[tuple[str, str]] = []

    if tag == "a":
        href = snapshot.attr("href")
        if href:
            drafts.append(("attr:href", css_attribute_selector("a", "href", href)))
    elif tag == "img":
        alt = snapshot.attr("alt")
        if alt:
            drafts.append(("attr:alt", css_attribute_selector("img", "alt", alt)))
    elif tag == "input":
        name = snapshot.attr("name")
        if name:
            drafts.append(("attr:name", css_attribute_selector("input", "name", name)))
        input_type = snapshot.attr("type")
        if input_type:
            drafts.append(("attr:type", css_attribute_selector("input", "type", input_type)))

    return drafts


def _css_segment(segment: PathSegment) -> str:
    if segment.id:
        return f"{segment.tag}#{escape_css_identifier(segment.id)}"
    if segment.same_tag_count > 1:
        return f"{segment.tag}:nth-of-type({segment.nth_of_type})"
    return segment.tag


def structural_css_path(snapshot: NodeSnapshot) -> str:
    parts: list[str] = []
    for segment in snapshot.path:
        parts.append(_css_segment(segment))
        if segment.id:
            break
    if not parts:
        return snapshot.tag or "*"
    return " > ".join(reversed(parts))


def xpath_id_candidate(snapshot: NodeSnapshot) -> str | None:
    if not snapshot.id:
        return None
    return f"//*[@id={xpath_string_literal(snapshot.id)}]"


def _xpath_step(segment: PathSegment) -> str:
    # Unprefixed name tests only match HTML elements; svg and math need local-name().
    if segment.is_html:
        step = segment.tag
    else:
        step = f"*[local-name()={xpath_string_literal(segment.tag)}]"
    if segment.same_tag_count > 1:
        step += f"[{segment.nth_of_type}]"
    return step


def structural_xpath(snapshot: NodeSnapshot) -> str:
    parts = [_xpath_step(segment) for segment in snapshot.path]
    if not parts:
        parts.append(snapshot.tag or "*")
    return "//" + "/".join(reversed(parts))


def _verify(selector: str, rule: str, verifier: UniquenessVerifier) -> Candidate:
    check = verifier(selector)
    if not check.ok:
        logger.debug("Rejected %s candidate %r: %s", rule, selector, check.reason or "not unique")
    return Candidate(selector=selector, is_unique=check.ok, rule=rule)


def synthesize_css_from_snapshot(snapshot: NodeSnapshot, verifier: UniquenessVerifier) -> str:
    by_id = id_candidate(snapshot)
    if by_id:
        return by_id

    drafts: list[tuple[str, str]] = []
    by_class = class_candidate(snapshot)
    if by_class:
        drafts.append(("class", by_class))
    drafts.extend(attribute_candidates(snapshot))

    for rule, selector in drafts:
        candidate = _verify(selector, rule, verifier)
        if candidate.is_unique:
            logger.debug("Accepted %s candidate %r", candidate.rule, candidate.selector)
            return candidate.selector

    fallback = structural_css_path(snapshot)
    logger.debug("Falling back to structural path %r", fallback)
    return fallback


def synthesize_xpath_from_snapshot(snapshot: NodeSnapshot) -> str:
    return xpath_id_candidate(snapshot) or structural_xpath(snapshot)


def synthesize_css(page: Page, element: ElementHandle) -> str:
    return synthesize_css_from_snapshot(extract_node_snapshot(element), page_verifier(page))


def synthesize_xpath(element: ElementHandle) -> str:
    return synthesize_xpath_from_snapshot(extract_node_snapshot(element))


def build_locator_set(snapshot: NodeSnapshot, verifier: UniquenessVerifier) -> LocatorSet:
    # Text is already trimmed in-page, the same way the resolver compares it.
    link_text = snapshot.text if snapshot.tag == "a" else ""

    return LocatorSet(
        css=synthesize_css_from_snapshot(snapshot, verifier),
        xpath=synthesize_xpath_from_snapshot(snapshot),
        className=normalize_space(snapshot.class_attr),
        linkText=link_text,
        partialLinkText=link_text,
        tagName=snapshot.tag,
    )


def find_locators(page: Page, element: ElementHandle) -> LocatorCapture:
    snapshot = extract_node_snapshot(element)
    locators = build_locator_set(snapshot, page_verifier(page))
    rect = measure_element(element)
    logger.info(
        "Locators found for <%s>: css=%s xpath=%s",
        snapshot.tag,
        locators.css,
        locators.xpath,
    )
    return LocatorCapture(locators=locators, rect=rect)
