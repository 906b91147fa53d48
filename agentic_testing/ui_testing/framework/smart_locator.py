"""
================================================================================
Smart Locator with Self-Healing Resolution
================================================================================

Resolves a selector to a live element, healing it when it no longer matches:
    - Reuses heals recorded earlier in this run or loaded from disk
    - Asks the AI provider for alternative selectors
    - Falls back to deterministic alternatives derived from the selector
    - Records every successful heal in the healing ledger

Resolution order (stops at the first element that becomes visible):
    1. Cached healed selector     (locate timeout, evicted on failure)
    2. Original selector          (locate timeout)
    3. AI suggestions             (heal timeout each, first N only)
    4. Generated fallbacks        (heal timeout each, first max_attempts only)

Steps 3 and 4 only run when self-healing is enabled. Total failure is
reported as None, never as an exception.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional, Union

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from agentic_tools.report_tools.allure_utils import attach_json, attach_text

from .ai_provider import AiProvider, DisabledAiProvider
from .config_loader import SelfHealingConfig, TimeoutConfig
from .healing_ledger import HealedLocator, HealingLedger
from .selector_dialect import build_locator
from .strategy_generator import LocatorStrategy, StrategyType, generate_fallbacks


# Confidence recorded for heals that came from AI suggestions
AI_SUGGESTION_CONFIDENCE = 0.9


class ElementNotFoundError(Exception):
    """Raised by page actions when a selector cannot be resolved or healed."""
    pass


class SmartLocator:
    """
    Self-healing element resolver.

    One instance is shared by every page object in a process; each
    resolve() call runs its fallback ladder to completion before returning.

    Usage:
        >>> smart = SmartLocator(config.self_healing, ledger, ai_provider)
        >>> locator = await smart.resolve(page, "#login-btn", "Login button")
        >>> if locator:
        ...     await locator.click()
    """

    def __init__(
        self,
        config: SelfHealingConfig,
        ledger: HealingLedger,
        ai_provider: Optional[AiProvider] = None,
        timeouts: Optional[TimeoutConfig] = None,
    ):
        """
        Initialize SmartLocator.

        Args:
            config: Self-healing settings (read once, here)
            ledger: Healing ledger that owns the heal cache
            ai_provider: Suggestion provider; disabled if None
            timeouts: Locate/heal timeouts in milliseconds
        """
        self.config = config
        self.ledger = ledger
        self.ai_provider = ai_provider or DisabledAiProvider()
        timeouts = timeouts or TimeoutConfig()
        self.locate_timeout = timeouts.locate
        self.heal_timeout = timeouts.heal

    async def resolve(
        self,
        page: Page,
        selector: str,
        description: str = "",
    ) -> Optional[Locator]:
        """
        Resolve a selector, healing it if necessary.

        Args:
            page: Playwright page to search
            selector: Selector in the framework dialect
            description: Human-readable element description (used by AI)

        Returns:
            Locator for a visible element, or None when nothing resolved
        """
        cached = self.ledger.cached_selector(selector)
        if cached:
            locator = await self._attempt(page, cached, self.locate_timeout)
            if locator is not None:
                logger.info(f"♻️ Using cached healed locator: {cached}")
                return locator
            self.ledger.evict(selector)

        locator = await self._attempt(page, selector, self.locate_timeout)
        if locator is not None:
            logger.debug(f"✅ Element found: {selector}")
            return locator

        logger.warning(f"⚠️ Original selector failed: {selector}, attempting self-healing")
        return await self._heal(page, selector, description or selector)

    async def _heal(
        self,
        page: Page,
        original: str,
        description: str,
    ) -> Optional[Locator]:
        if not self.config.enabled:
            logger.info("Self-healing disabled, returning no element")
            return None

        with allure.step(f"Self-heal locator: {original}"):
            locator = await self._heal_with_ai(page, original, description)
            if locator is not None:
                return locator

            candidates = generate_fallbacks(original, self.config.strategies)
            tried = candidates[: self.config.max_attempts]
            for strategy in tried:
                locator = await self._attempt(page, strategy.selector, self.heal_timeout)
                if locator is not None:
                    logger.info(
                        f"🩹 Healed locator found using {strategy.type.value}: "
                        f"{strategy.selector}"
                    )
                    self._record(original, strategy)
                    return locator

            attach_text(
                "\n".join(f"{s.type.value}: {s.selector}" for s in tried) or "(no candidates)",
                name=f"Unresolved locator: {original}",
            )

        logger.error(f"❌ Failed to heal locator: {original}")
        return None

    async def _heal_with_ai(
        self,
        page: Page,
        original: str,
        description: str,
    ) -> Optional[Locator]:
        if not self.ai_provider.is_available():
            return None

        try:
            page_content = await page.content()
        except PlaywrightError as e:
            logger.warning(f"Could not read page content for AI suggestions: {e}")
            return None

        suggestions = await self.ai_provider.suggest_locators(
            description, page_content, original
        )
        logger.info(f"AI suggested {len(suggestions)} alternative locators")

        for suggestion in suggestions[: self.config.ai_suggestion_limit]:
            locator = await self._attempt(page, suggestion, self.heal_timeout)
            if locator is not None:
                logger.info(f"🤖 Healed locator found using AI suggestion: {suggestion}")
                self._record(
                    original,
                    LocatorStrategy(
                        StrategyType.CSS, suggestion, confidence=AI_SUGGESTION_CONFIDENCE
                    ),
                )
                return locator
        return None

    async def _attempt(
        self,
        page: Page,
        selector: Union[str, LocatorStrategy],
        timeout: int,
    ) -> Optional[Locator]:
        """Single wait for a candidate; a miss returns None."""
        try:
            locator = build_locator(page, selector)
            await locator.wait_for(state="visible", timeout=timeout)
            return locator
        except PlaywrightError as e:
            logger.debug(f"Selector did not resolve: {selector} -> {str(e)[:80]}")
            return None

    def _record(self, original: str, strategy: LocatorStrategy) -> HealedLocator:
        record = HealedLocator(
            original=original,
            healed=strategy.selector,
            strategy=strategy,
        )
        self.ledger.append(record)
        attach_json(record.to_dict(), name=f"Healed locator: {original}")
        return record

    def get_health_report(self) -> str:
        """
        Summarize heals recorded so far.

        Returns:
            Formatted report listing selectors worth updating
        """
        records = self.ledger.get_healed_locators()
        if not records:
            return "✅ No locators needed healing. No maintenance needed."

        report_lines = [
            "⚠️ Locator Health Report - Healed Locators:",
            "",
            "The following selectors failed and were healed.",
            "Consider updating them in the page objects:",
            "",
        ]
        for record in records:
            report_lines.extend([
                f"  [{record.original}]",
                f"    Healed to: {record.healed} ({record.strategy.type.value})",
                "",
            ])
        return "\n".join(report_lines)


__all__ = [
    "AI_SUGGESTION_CONFIDENCE",
    "ElementNotFoundError",
    "SmartLocator",
]
