"""
================================================================================
Locator Strategy Generator
================================================================================

Derives alternative selectors for a selector that no longer resolves.

Candidates are produced purely from the text of the failing selector; nothing
here touches the page. The SmartLocator validates each candidate with a real
lookup.

Candidate order (each strategy only if enabled and its fragment matched):
    1. text    - exact text, then case-insensitive regex text
    2. testId  - [data-testid="..."], then [data-test="..."]
    3. role    - ARIA role inferred from the leading tag name
    4. css     - class selector
    5. xpath   - contains-text XPath

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class StrategyType(str, Enum):
    """Named technique used to derive a locator. Values are the wire tags."""

    TEXT = "text"
    ROLE = "role"
    TEST_ID = "testId"
    XPATH = "xpath"
    CSS = "css"
    VISUAL = "visual"

    @classmethod
    def parse(cls, value: Any) -> "StrategyType":
        """
        Parse a strategy tag, accepting snake/lower-case spellings.

        Raises:
            ValueError: For unknown tags
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(
            f"Unknown locator strategy '{value}'. "
            f"Expected one of {[m.value for m in cls]}"
        )


@dataclass(frozen=True)
class LocatorStrategy:
    """
    A concrete selector tagged with the strategy that produced it.

    Attributes:
        type: Strategy tag
        selector: Selector string in the page dialect (text=, role=, CSS, XPath)
        confidence: Optional score in [0, 1]
    """
    type: StrategyType
    selector: str
    confidence: Optional[float] = None

    def __post_init__(self) -> None:
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "selector": self.selector}
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocatorStrategy":
        confidence = data.get("confidence")
        return cls(
            type=StrategyType.parse(data["type"]),
            selector=str(data["selector"]),
            confidence=float(confidence) if confidence is not None else None,
        )


# =============================================================================
# Fragment extraction
# =============================================================================

TEXT_PATTERN = re.compile(r"text=['\"]?([^'\"]+)['\"]?")
ID_ATTR_PATTERN = re.compile(r"id=['\"]?([^'\"\]\s]+)['\"]?")
ID_LEADING_PATTERN = re.compile(r"^[A-Za-z][\w-]*#([\w-]+)|^#([\w-]+)")
CLASS_ATTR_PATTERN = re.compile(r"class=['\"]?([^'\"\]\s]+)['\"]?")
CLASS_LEADING_PATTERN = re.compile(r"^[A-Za-z][\w-]*\.([\w-]+)|^\.([\w-]+)")
TAG_PATTERN = re.compile(r"^([A-Za-z][\w-]*)")

# Leading tag -> ARIA role
TAG_ROLE_MAP: Dict[str, str] = {
    "button": "button",
    "a": "link",
    "input": "textbox",
    "select": "combobox",
    "textarea": "textbox",
}


def _first_group(match: Optional[re.Match]) -> Optional[str]:
    if not match:
        return None
    for group in match.groups():
        if group:
            return group
    return None


def extract_text(selector: str) -> Optional[str]:
    """Text inside a `text=` selector, quoted or not."""
    return _first_group(TEXT_PATTERN.search(selector))


def extract_identifier(selector: str) -> Optional[str]:
    """Value of an `id=` attribute or a leading `#id`."""
    return _first_group(ID_ATTR_PATTERN.search(selector)) or _first_group(
        ID_LEADING_PATTERN.match(selector)
    )


def extract_class(selector: str) -> Optional[str]:
    """Value of a `class=` attribute or a leading `.class`."""
    return _first_group(CLASS_ATTR_PATTERN.search(selector)) or _first_group(
        CLASS_LEADING_PATTERN.match(selector)
    )


def extract_tag(selector: str) -> Optional[str]:
    """First word-like token at the start of the selector."""
    return _first_group(TAG_PATTERN.match(selector))


def _xpath_literal(text: str) -> str:
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


# =============================================================================
# Generator
# =============================================================================

def generate_fallbacks(
    original_selector: str,
    enabled_strategies: Iterable[StrategyType],
) -> List[LocatorStrategy]:
    """
    Derive ordered candidate selectors for a failing selector.

    Args:
        original_selector: The selector that failed to resolve
        enabled_strategies: Strategies allowed to contribute

    Returns:
        Ordered candidates, possibly empty
    """
    enabled = {StrategyType.parse(s) for s in enabled_strategies}
    fallbacks: List[LocatorStrategy] = []

    text = extract_text(original_selector)
    identifier = extract_identifier(original_selector)
    class_name = extract_class(original_selector)
    tag = extract_tag(original_selector)

    if StrategyType.TEXT in enabled and text:
        fallbacks.append(LocatorStrategy(StrategyType.TEXT, f'text="{text}"'))
        fallbacks.append(LocatorStrategy(StrategyType.TEXT, f"text=/{re.escape(text)}/i"))

    if StrategyType.TEST_ID in enabled and identifier:
        fallbacks.append(LocatorStrategy(StrategyType.TEST_ID, f'[data-testid="{identifier}"]'))
        fallbacks.append(LocatorStrategy(StrategyType.TEST_ID, f'[data-test="{identifier}"]'))

    if StrategyType.ROLE in enabled and tag:
        role = TAG_ROLE_MAP.get(tag.lower())
        if role:
            fallbacks.append(LocatorStrategy(StrategyType.ROLE, f"role={role}"))

    if StrategyType.CSS in enabled and class_name:
        fallbacks.append(LocatorStrategy(StrategyType.CSS, f".{class_name}"))

    if StrategyType.XPATH in enabled and text:
        fallbacks.append(
            LocatorStrategy(
                StrategyType.XPATH,
                f"//*[contains(text(), {_xpath_literal(text)})]",
            )
        )

    return fallbacks


__all__ = [
    "LocatorStrategy",
    "StrategyType",
    "TAG_ROLE_MAP",
    "extract_class",
    "extract_identifier",
    "extract_tag",
    "extract_text",
    "generate_fallbacks",
]
