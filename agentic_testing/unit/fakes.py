"""
Fakes shared by the framework unit tests.

FakePage answers the Playwright calls the selector dialect makes and
rebuilds the dialect string from them, so tests declare which selectors
are "on the page" as plain strings.
"""

import re
from typing import Iterable, List, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agentic_testing.ui_testing.framework.ai_provider import (
    AIAnalysisResult,
    AiProvider,
    TestFailure,
    no_analysis,
)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None) -> None:
        self.page.attempts.append((self.selector, timeout))
        if self.selector not in self.page.visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def click(self, **kwargs) -> None:
        self.page.actions.append(("click", self.selector, None))

    async def fill(self, value: str, **kwargs) -> None:
        self.page.actions.append(("fill", self.selector, value))

    async def text_content(self) -> str:
        return self.page.texts.get(self.selector, "")

    async def is_visible(self) -> bool:
        return self.selector in self.page.visible


class FakePage:
    def __init__(self, visible: Iterable[str] = (), html: str = "<html></html>"):
        self.visible = set(visible)
        self.html = html
        self.content_error: Optional[str] = None
        self.texts = {}
        self.attempts: List[Tuple[str, Optional[int]]] = []
        self.actions: List[Tuple[str, str, Optional[str]]] = []
        self.visited: List[str] = []
        self.url = "about:blank"

    @property
    def attempted(self) -> List[str]:
        return [selector for selector, _ in self.attempts]

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_text(self, text, exact: bool = False) -> FakeLocator:
        if isinstance(text, re.Pattern):
            flags = "i" if text.flags & re.IGNORECASE else ""
            return FakeLocator(self, f"text=/{text.pattern}/{flags}")
        if exact:
            return FakeLocator(self, f'text="{text}"')
        return FakeLocator(self, f"text={text}")

    def get_by_role(self, role: str, name: Optional[str] = None) -> FakeLocator:
        if name:
            return FakeLocator(self, f'role={role}[name="{name}"]')
        return FakeLocator(self, f"role={role}")

    async def content(self) -> str:
        if self.content_error:
            raise PlaywrightError(self.content_error)
        return self.html

    async def goto(self, url: str, **kwargs) -> None:
        self.visited.append(url)
        self.url = url


class FakeAiProvider(AiProvider):
    name = "fake"

    def __init__(self, suggestions: Iterable[str] = (), available: bool = True, analysis=None):
        self.suggestions = list(suggestions)
        self.available = available
        self.analysis = analysis
        self.suggest_calls: List[Tuple[str, str, str]] = []
        self.analyze_calls: List[List[TestFailure]] = []

    def is_available(self) -> bool:
        return self.available

    async def suggest_locators(self, description, page_content, failed_selector):
        self.suggest_calls.append((description, page_content, failed_selector))
        return list(self.suggestions)

    async def analyze_failures(self, failures) -> AIAnalysisResult:
        self.analyze_calls.append(list(failures))
        return self.analysis or no_analysis()
