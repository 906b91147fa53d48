"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Example page object built on AgenticPage.

Design goals:
  - Selectors are declared as plain strings in the framework dialect
  - Every interaction goes through the self-healing SmartLocator, so a
    renamed id or class is healed and recorded instead of failing the test

NOTE:
  Selectors mirror a typical demo login form.
  Real projects should prefer stable `data-testid` attributes.

================================================================================
"""

from __future__ import annotations

import os
from typing import Optional

import allure

from agentic_testing.ui_testing.framework.agentic_page import AgenticPage


class LoginPage(AgenticPage):
    """Login page object (async)."""

    URL_PATH = "/books"

    USERNAME_INPUT = "#username"
    PASSWORD_INPUT = "#password"
    LOGIN_BUTTON = 'button[type="submit"]'
    ERROR_MESSAGE = ".error-message"
    SUCCESS_MESSAGE = ".success-message"
    LOGIN_LINK = '//a[text()="Log in"]'

    @allure.step("Open books page")
    async def open(self) -> "LoginPage":
        await self.navigate()
        return self

    @allure.step("Open login form")
    async def open_login(self) -> None:
        await self.click(self.LOGIN_LINK, "Login link")

    @allure.step("Login (username={username})")
    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Fill and submit the login form.

        Args:
            username: Defaults to `UI_USERNAME` env var (demo-safe).
            password: Defaults to `UI_PASSWORD` env var (demo-safe).
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "demo_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "demo_password")

        await self.fill(self.USERNAME_INPUT, username, "Username field")
        await self.fill(self.PASSWORD_INPUT, password, "Password field")
        await self.click(self.LOGIN_BUTTON, "Login button")

    async def get_error_message(self) -> str:
        return await self.get_text(self.ERROR_MESSAGE, "Error message")

    async def is_logged_in(self) -> bool:
        return await self.is_visible(self.SUCCESS_MESSAGE, "Success message")

    async def wait_for_login_complete(self) -> None:
        await self.wait_for_element(self.SUCCESS_MESSAGE, "Success message", timeout=10000)
