"""
================================================================================
Agentic Base Page
================================================================================

Foundation class for Page Object Model implementation on top of the
self-healing SmartLocator.

Provides:
    - Navigation helpers
    - Element interactions that resolve selectors with healing
    - Screenshot and debugging utilities
    - Wait strategies

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from .config_loader import TimeoutConfig
from .smart_locator import ElementNotFoundError, SmartLocator


# Default output directory for screenshots
SCREENSHOT_DIR = Path("test-results") / "screenshots"


class AgenticPage:
    """
    Base class for all page objects.

    Every selector passed to an interaction method is resolved through the
    SmartLocator, so renamed ids or classes are healed transparently and
    recorded in the healing ledger.

    Usage:
        class LoginPage(AgenticPage):
            URL_PATH = "/login"

            async def login(self, username: str, password: str):
                await self.fill("#username", username, "Username field")
                await self.fill("#password", password, "Password field")
                await self.click("button[type='submit']", "Login button")
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(
        self,
        page: Page,
        smart: SmartLocator,
        base_url: str = "",
        timeouts: Optional[TimeoutConfig] = None,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            smart: Shared SmartLocator
            base_url: Base URL for the application
            timeouts: Navigation/action timeouts
        """
        self.page = page
        self.smart = smart
        if not base_url:
            # Demo-safe default. Real deployments should override via config/env.
            base_url = os.getenv("UI_BASE_URL", "http://localhost:3000")
        self.base_url = base_url.rstrip("/")
        self.timeouts = timeouts or TimeoutConfig()

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, wait_until: str = "load") -> None:
        """Navigate to this page's URL_PATH."""
        await self.goto(self.url, wait_until=wait_until)

    async def goto(self, url: str, wait_until: str = "load") -> None:
        """
        Navigate to a URL (absolute, or relative to base_url).

        Args:
            url: Target URL or path
            wait_until: 'load', 'domcontentloaded' or 'networkidle'
        """
        if url.startswith("/"):
            url = f"{self.base_url}{url}"
        with allure.step(f"Navigate to {url}"):
            try:
                await self.page.goto(
                    url, wait_until=wait_until, timeout=self.timeouts.navigation
                )
            except Exception as e:
                logger.error(f"Failed to navigate to {url}: {e}")
                raise
            logger.info(f"Navigated to: {url}")

    async def reload(self) -> None:
        await self.page.reload()
        logger.info("Page reloaded")

    async def go_back(self) -> None:
        await self.page.go_back()
        logger.info("Navigated back")

    async def go_forward(self) -> None:
        await self.page.go_forward()
        logger.info("Navigated forward")

    async def wait_for_navigation(
        self,
        state: str = "load",
        timeout: Optional[int] = None,
    ) -> None:
        """
        Wait for the page to reach a load state.

        Args:
            state: 'load', 'domcontentloaded' or 'networkidle'
            timeout: Timeout in milliseconds (navigation timeout by default)
        """
        await self.page.wait_for_load_state(
            state, timeout=timeout or self.timeouts.navigation
        )
        logger.info("Navigation completed")

    @property
    def current_url(self) -> str:
        return self.page.url

    async def title(self) -> str:
        return await self.page.title()

    # =========================================================================
    # Smart Element Interactions
    # =========================================================================

    async def find_element(
        self,
        selector: str,
        description: Optional[str] = None,
    ) -> Optional[Locator]:
        """
        Resolve a selector with self-healing.

        Returns:
            Locator, or None when the element could not be found or healed
        """
        return await self.smart.resolve(self.page, selector, description or selector)

    async def _require(self, selector: str, description: str, action: str) -> Locator:
        locator = await self.find_element(selector, description)
        if locator is None:
            raise ElementNotFoundError(
                f"Could not find element to {action}: {selector}"
            )
        return locator

    async def click(self, selector: str, description: Optional[str] = None, **kwargs: Any) -> None:
        """
        Click element.

        Raises:
            ElementNotFoundError: When the selector cannot be resolved
        """
        label = description or selector
        with allure.step(f"Click: {label}"):
            locator = await self._require(selector, description or f"Click {selector}", "click")
            await locator.click(timeout=self.timeouts.action, **kwargs)
            logger.info(f"Clicked: {label}")

    async def fill(
        self,
        selector: str,
        value: str,
        description: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Fill input element. Values of password-like fields are masked in logs.

        Raises:
            ElementNotFoundError: When the selector cannot be resolved
        """
        label = description or selector
        shown = "*" * len(value) if "password" in label.lower() else value
        with allure.step(f"Fill {label}: {shown}"):
            locator = await self._require(selector, description or f"Fill {selector}", "fill")
            await locator.fill(value, timeout=self.timeouts.action, **kwargs)
            logger.info(f"Filled {label} with: {shown}")

    async def get_text(self, selector: str, description: Optional[str] = None) -> str:
        """
        Get text content of element.

        Raises:
            ElementNotFoundError: When the selector cannot be resolved
        """
        locator = await self._require(
            selector, description or f"Get text from {selector}", "get text"
        )
        text = await locator.text_content() or ""
        logger.info(f"Got text from {description or selector}: {text}")
        return text

    async def is_visible(self, selector: str, description: Optional[str] = None) -> bool:
        """
        Check if element is visible.

        Returns:
            False when the element cannot be resolved
        """
        locator = await self.find_element(
            selector, description or f"Check visibility {selector}"
        )
        if locator is None:
            return False
        visible = await locator.is_visible()
        logger.info(f"Element {description or selector} visible: {visible}")
        return visible

    async def wait_for_element(
        self,
        selector: str,
        description: Optional[str] = None,
        state: str = "visible",
        timeout: Optional[int] = None,
    ) -> Optional[Locator]:
        """
        Resolve an element, then wait for it to reach a state.

        Args:
            selector: Selector in the framework dialect
            description: Human-readable element name
            state: 'visible', 'hidden', 'attached' or 'detached'
            timeout: Timeout in milliseconds (default timeout if omitted)

        Returns:
            Locator, or None when the element could not be resolved
        """
        locator = await self.find_element(selector, description or f"Wait for {selector}")
        if locator is not None:
            await locator.wait_for(state=state, timeout=timeout or self.timeouts.default)
            logger.info(f"Element found and ready: {description or selector}")
        return locator

    async def select_option(
        self,
        selector: str,
        value: Union[str, List[str]],
        description: Optional[str] = None,
    ) -> None:
        """
        Select option(s) in a <select>.

        Raises:
            ElementNotFoundError: When the selector cannot be resolved
        """
        with allure.step(f"Select {value} in {description or selector}"):
            locator = await self._require(
                selector, description or f"Select {selector}", "select option"
            )
            await locator.select_option(value, timeout=self.timeouts.action)
            logger.info(f"Selected option in {description or selector}: {value}")

    async def check(self, selector: str, description: Optional[str] = None) -> None:
        with allure.step(f"Check: {description or selector}"):
            locator = await self._require(selector, description or f"Check {selector}", "check")
            await locator.check(timeout=self.timeouts.action)
            logger.info(f"Checked: {description or selector}")

    async def uncheck(self, selector: str, description: Optional[str] = None) -> None:
        with allure.step(f"Uncheck: {description or selector}"):
            locator = await self._require(
                selector, description or f"Uncheck {selector}", "uncheck"
            )
            await locator.uncheck(timeout=self.timeouts.action)
            logger.info(f"Unchecked: {description or selector}")

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Evaluate JavaScript in the page."""
        return await self.page.evaluate(expression, arg)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: Optional[str] = None,
        full_page: bool = True,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        name = name or "screenshot"
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        image = await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach(
                image,
                name=name,
                attachment_type=allure.attachment_type.PNG
            )

        logger.info(f"Screenshot saved: {filepath}")
        return filepath

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "AgenticPage",
]
