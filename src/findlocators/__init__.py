from __future__ import annotations

from .locator_generator import build_locator_set, find_locators, synthesize_css, synthesize_xpath
from .menu_reveal import ensure_interactable
from .models import LocatorCapture, LocatorSet, Rect, ResolutionFailure, STRATEGIES
from .resolver import resolve_locator
from .validation import is_unique_css, verify_unique_css

__version__ = "0.1.0"

__all__ = [
    "LocatorCapture",
    "LocatorSet",
    "Rect",
    "ResolutionFailure",
    "STRATEGIES",
    "build_locator_set",
    "ensure_interactable",
    "find_locators",
    "is_unique_css",
    "resolve_locator",
    "synthesize_css",
    "synthesize_xpath",
    "verify_unique_css",
]
