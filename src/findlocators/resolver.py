from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, cast

from .models import STRATEGIES, ResolutionFailure, Strategy

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("findlocators.resolver")

RESOLVE_SCRIPT = """
({ strategy, value }) => {
  const result = { node: null, error: null, nonElement: false };
  try {
    switch (strategy) {
      case 'css':
        result.node = document.querySelector(value);
        break;
      case 'xpath': {
        const found = document.evaluate(
          value,
          document,
          null,
          XPathResult.FIRST_ORDERED_NODE_TYPE,
          null
        ).singleNodeValue;
        if (found && found.nodeType !== Node.ELEMENT_NODE) {
          result.nonElement = true;
        } else {
          result.node = found;
        }
        break;
      }
      case 'classname':
        result.node = document.getElementsByClassName(value)[0] || null;
        break;
      case 'linktext':
        result.node = Array.from(document.getElementsByTagName('a'))
          .find((a) => (a.textContent || '').trim() === value) || null;
        break;
      case 'partiallinktext':
        result.node = Array.from(document.getElementsByTagName('a'))
          .find((a) => (a.textContent || '').trim().includes(value)) || null;
        break;
      case 'tagname':
        result.node = document.getElementsByTagName(value)[0] || null;
        break;
    }
  } catch (e) {
    result.error = String((e && e.message) || e);
  }
  return result;
}
"""

_STRATEGY_SEPARATORS = re.compile(r"[\s_-]+")


def normalize_strategy(raw: str) -> Strategy:
    key = _STRATEGY_SEPARATORS.sub("", str(raw or "")).lower()
    if key not in STRATEGIES:
        raise ValueError(f"Unknown locator strategy: {raw!r}. Expected one of: {', '.join(STRATEGIES)}")
    return cast(Strategy, key)


def resolve_locator(page: Page, strategy: str, value: str) -> ElementHandle | ResolutionFailure:
    normalized = normalize_strategy(strategy)
    handle = page.evaluate_handle(RESOLVE_SCRIPT, {"strategy": normalized, "value": value})
    try:
        error = handle.get_property("error").json_value()
        non_element = bool(handle.get_property("nonElement").json_value())
        node = handle.get_property("node")
        element = node.as_element()
        if element is None:
            node.dispose()
    finally:
        handle.dispose()

    if error:
        failure = _failure_for_engine_error(normalized, str(error))
        logger.info("Locator rejected by engine: %s", failure.message)
        return failure

    if element is None:
        if non_element:
            message = f"Element not found with {normalized}: {value} (expression did not select an element)"
        else:
            message = f"Element not found with {normalized}: {value}"
        logger.info(message)
        return ResolutionFailure("NotFound", message)

    logger.info("Locator resolved: %s=%s", normalized, value)
    return element


def _failure_for_engine_error(strategy: Strategy, error: str) -> ResolutionFailure:
    if strategy == "xpath":
        return ResolutionFailure("InvalidExpression", f"Invalid XPath: {error}")
    if strategy == "css":
        return ResolutionFailure("InvalidSelector", f"Invalid CSS selector: {error}")
    # DOM lookups by class or tag name do not throw on malformed input.
    return ResolutionFailure("InvalidSelector", f"Invalid {strategy} locator: {error}")
