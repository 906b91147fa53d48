"""
Selector dialect used across the framework.

Selectors are plain strings; the prefixes below are translated into the
matching Playwright locator API, everything else goes to `page.locator()`:

    text=/Sign in/i            -> page.get_by_text(re.compile("Sign in", re.I))
    text="Sign in"             -> page.get_by_text("Sign in", exact=True)
    text=Sign in               -> page.get_by_text("Sign in")
    role=button[name="Save"]   -> page.get_by_role("button", name="Save")
    #id / .class / //xpath     -> page.locator(selector)
"""

from __future__ import annotations

import re
from typing import Union

from loguru import logger
from playwright.async_api import Locator, Page

from .strategy_generator import LocatorStrategy


TEXT_PREFIX = "text="
ROLE_PREFIX = "role="

REGEX_TEXT_PATTERN = re.compile(r"^/(.*)/([a-z]*)$", re.DOTALL)
QUOTED_TEXT_PATTERN = re.compile(r"^([\"'])(.*)\1$", re.DOTALL)
ROLE_PATTERN = re.compile(r"^role=([\w-]+)(?:\[name=[\"']([^\"']+)[\"']\])?$")

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


def build_locator(page: Page, selector: Union[str, LocatorStrategy]) -> Locator:
    """
    Translate a selector into a Playwright Locator.

    Building a locator never waits; lookup failures only surface when the
    caller waits on the returned Locator.

    Args:
        page: Playwright page to build the locator on
        selector: Selector string or a LocatorStrategy

    Returns:
        Playwright Locator
    """
    if isinstance(selector, LocatorStrategy):
        selector = selector.selector

    if selector.startswith(TEXT_PREFIX):
        return _text_locator(page, selector[len(TEXT_PREFIX):])

    if selector.startswith(ROLE_PREFIX):
        match = ROLE_PATTERN.match(selector)
        if match:
            role, name = match.group(1), match.group(2)
            if name:
                return page.get_by_role(role, name=name)
            return page.get_by_role(role)

    return page.locator(selector)


def _text_locator(page: Page, body: str) -> Locator:
    regex_match = REGEX_TEXT_PATTERN.match(body)
    if regex_match:
        pattern, flag_chars = regex_match.groups()
        flags = 0
        for char in flag_chars:
            flags |= _REGEX_FLAGS.get(char, 0)
        try:
            return page.get_by_text(re.compile(pattern, flags))
        except re.error as e:
            logger.debug(f"Invalid text regex /{pattern}/ ({e}), matching as plain text")
            return page.get_by_text(pattern)

    quoted_match = QUOTED_TEXT_PATTERN.match(body)
    if quoted_match:
        return page.get_by_text(quoted_match.group(2), exact=True)

    return page.get_by_text(body)


__all__ = [
    "build_locator",
]
