"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, the framework services and page objects.

Key Features:
- Browser and page lifecycle management
- Framework services built per test with an isolated healing ledger
- Page Object fixtures

Browser tests are skipped when no Playwright browser is installed
(`playwright install chromium`).

================================================================================
"""

import os
from dataclasses import replace
from pathlib import Path
from typing import AsyncGenerator

import pytest
from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, Page, async_playwright

from agentic_testing.ui_testing.framework import (
    AgenticPage,
    DisabledAiProvider,
    HealingFramework,
    build_framework,
    load_config,
)
from agentic_testing.ui_testing.pages.login_page import LoginPage


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser() -> AsyncGenerator[Browser, None]:
    """
    Browser fixture.

    Launches the browser named by UI_BROWSER (chromium by default). Headed
    mode is used when UI_HEADLESS is "false".
    """
    browser_name = os.getenv("UI_BROWSER", "chromium")
    headless = os.getenv("UI_HEADLESS", "true").lower() != "false"

    async with async_playwright() as playwright:
        try:
            browser = await getattr(playwright, browser_name).launch(headless=headless)
        except PlaywrightError as e:
            pytest.skip(f"Playwright browser '{browser_name}' is not available: {e}")
        yield browser
        await browser.close()


@pytest.fixture
async def context(browser: Browser) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Creates a new browser context for each test, providing isolation.
    """
    context = await browser.new_context(
        viewport={"width": 1280, "height": 800},
        ignore_https_errors=True,
    )
    yield context
    await context.close()


@pytest.fixture
async def page(context: BrowserContext) -> AsyncGenerator[Page, None]:
    """Function-scoped page fixture."""
    page = await context.new_page()
    yield page
    await page.close()


# ================================================================================
# Framework Fixtures
# ================================================================================

@pytest.fixture
def framework(tmp_path: Path) -> HealingFramework:
    """
    Framework services with the healing ledger redirected to tmp_path.

    AI is disabled so healing relies on generated fallbacks only, and the
    lookup timeouts are shortened to keep failing lookups quick.
    """
    config = load_config()
    config = replace(
        config,
        reporting=replace(config.reporting, output_path=str(tmp_path)),
        timeouts=replace(config.timeouts, locate=1000, heal=1000),
    )
    return build_framework(config, ai_provider=DisabledAiProvider(), configure_logging=False)


@pytest.fixture
def agentic_page(page: Page, framework: HealingFramework) -> AgenticPage:
    return framework.page(page)


@pytest.fixture
def login_page(page: Page, framework: HealingFramework) -> LoginPage:
    """Provides LoginPage instance sharing the framework SmartLocator."""
    return LoginPage(page, framework.smart, timeouts=framework.config.timeouts)
