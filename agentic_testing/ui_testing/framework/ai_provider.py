"""
================================================================================
AI Provider
================================================================================

Language-model backed helpers used by the framework:
    - Alternative selector suggestions for a locator that failed
    - Root-cause analysis of failed tests after a run

Providers talk to the vendor REST APIs over httpx. Every failure (network,
HTTP status, malformed response) is logged and degraded to an empty result;
nothing raised inside a provider reaches the SmartLocator or the report
analyzer.

Providers:
    - DisabledAiProvider: AI turned off or no API key
    - OpenAIProvider: OpenAI chat completions (also OpenAI-compatible `custom`)
    - GeminiProvider: Google Gemini generateContent

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from .config_loader import AiConfig


# Characters of page markup included in the suggestion prompt
PAGE_CONTENT_LIMIT = 2000

# Exponential backoff base for retried AI calls (seconds)
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_RETRY_MAX_WAIT = 5.0

RETRYABLE_STATUS = {429, 500, 502, 503, 504}

OPENAI_BASE_URL = "https://api.openai.com/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

SUGGESTION_PROMPT = """You are an expert in web automation and Playwright selectors.
A test failed because the selector "{failed_selector}" could not find the element.

Element description: {description}

Page HTML snippet:
{page_content}

Please suggest 3-5 alternative Playwright selectors that might work better. Focus on:
1. Text-based selectors
2. Role-based selectors (getByRole)
3. Test IDs
4. Robust CSS selectors
5. XPath as last resort

Return ONLY the selectors, one per line, without explanation."""

ANALYSIS_PROMPT = """You are an expert test automation analyst. Analyze these test failures and provide insights:

{failure_details}

Provide:
1. A concise summary of the failures
2. The likely root cause
3. 3-5 actionable suggestions to fix the issues
4. Your confidence level (0-1)

Format your response as JSON:
{{
  "summary": "brief summary",
  "rootCause": "likely root cause",
  "suggestions": ["suggestion 1", "suggestion 2", ...],
  "confidence": 0.85
}}"""


class AiProviderError(Exception):
    """Raised inside providers for unusable responses. Never leaves a provider."""
    pass


@dataclass
class TestFailure:
    """A failed test as read from the run results."""
    __test__ = False

    test_name: str
    error: str
    screenshot: Optional[str] = None
    trace: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AIAnalysisResult:
    summary: str
    suggestions: List[str] = field(default_factory=list)
    confidence: float = 0.0
    root_cause: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "rootCause": self.root_cause,
            "suggestions": list(self.suggestions),
            "confidence": self.confidence,
        }


def no_analysis() -> AIAnalysisResult:
    return AIAnalysisResult(summary="No AI analysis available")


def default_analysis() -> AIAnalysisResult:
    """Analysis returned when the provider call fails."""
    return AIAnalysisResult(
        summary="Multiple test failures detected",
        root_cause="Unable to determine root cause",
        suggestions=[
            "Review test logs for detailed error messages",
            "Check if application changes broke the tests",
            "Verify test environment is properly configured",
        ],
        confidence=0.3,
    )


# =============================================================================
# Response parsing
# =============================================================================

_CODE_FENCE = re.compile(r"^```[\w-]*$")
_LIST_PREFIX = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")


def parse_suggestions(text: str) -> List[str]:
    """
    Turn a model reply into selector candidates.

    One selector per line; bullets, numbering, wrapping backticks and code
    fences are stripped, duplicates dropped, order kept.
    """
    suggestions: List[str] = []
    for line in (text or "").splitlines():
        candidate = line.strip()
        if not candidate or _CODE_FENCE.match(candidate):
            continue
        candidate = _LIST_PREFIX.sub("", candidate).strip()
        if len(candidate) > 1 and candidate[0] == candidate[-1] == "`":
            candidate = candidate[1:-1].strip()
        if candidate and candidate not in suggestions:
            suggestions.append(candidate)
    return suggestions


def parse_analysis(text: str) -> AIAnalysisResult:
    """
    Parse the JSON analysis reply.

    Raises:
        AiProviderError: When the reply is not the expected JSON object
    """
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = "\n".join(
            line for line in cleaned.splitlines() if not _CODE_FENCE.match(line.strip())
        )
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AiProviderError(f"Analysis is not valid JSON: {e}") from e
    if not isinstance(data, dict) or "summary" not in data:
        raise AiProviderError("Analysis JSON lacks a summary")

    try:
        confidence = float(data.get("confidence", 0.0))
    except (TypeError, ValueError):
        confidence = 0.0

    suggestions = data.get("suggestions") or []
    if not isinstance(suggestions, list):
        suggestions = [str(suggestions)]

    return AIAnalysisResult(
        summary=str(data["summary"]),
        root_cause=data.get("rootCause") or data.get("root_cause"),
        suggestions=[str(item) for item in suggestions],
        confidence=min(max(confidence, 0.0), 1.0),
    )


def format_failures(failures: List[TestFailure]) -> str:
    return "\n\n".join(
        f"Test {index}: {failure.test_name}\n"
        f"Error: {failure.error}\n"
        f"Time: {failure.timestamp.isoformat()}"
        for index, failure in enumerate(failures, start=1)
    )


# =============================================================================
# Providers
# =============================================================================

class AiProvider(ABC):
    """Capability interface consumed by SmartLocator and ReportAnalyzer."""

    name: str = "abstract"

    @abstractmethod
    def is_available(self) -> bool:
        """Whether suggestions can be requested at all."""

    @abstractmethod
    async def suggest_locators(
        self,
        description: str,
        page_content: str,
        failed_selector: str,
    ) -> List[str]:
        """Ranked selector suggestions, possibly empty. Never raises."""

    @abstractmethod
    async def analyze_failures(self, failures: List[TestFailure]) -> AIAnalysisResult:
        """Root-cause analysis of failed tests. Never raises."""


class DisabledAiProvider(AiProvider):
    """Used when AI is disabled or not configured."""

    name = "disabled"

    def is_available(self) -> bool:
        return False

    async def suggest_locators(
        self,
        description: str,
        page_content: str,
        failed_selector: str,
    ) -> List[str]:
        return []

    async def analyze_failures(self, failures: List[TestFailure]) -> AIAnalysisResult:
        return no_analysis()


class HttpAiProvider(AiProvider):
    """
    Shared request/retry handling for REST-based providers.

    Subclasses describe the vendor wire format: endpoint, headers, payload
    and where the generated text lives in the response.
    """

    def __init__(
        self,
        config: AiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            config: AI configuration (model, key, timeout, retries)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self._transport = transport

    def is_available(self) -> bool:
        return bool(self.config.api_key)

    async def suggest_locators(
        self,
        description: str,
        page_content: str,
        failed_selector: str,
    ) -> List[str]:
        if not self.is_available():
            return []

        prompt = SUGGESTION_PROMPT.format(
            failed_selector=failed_selector,
            description=description or failed_selector,
            page_content=(page_content or "")[:PAGE_CONTENT_LIMIT],
        )
        try:
            text = await self._complete(prompt, temperature=0.3, max_tokens=500)
        except (httpx.HTTPError, AiProviderError) as e:
            logger.error(f"AI locator suggestion failed ({self.name}): {e}")
            return []

        suggestions = parse_suggestions(text)
        logger.debug(f"AI ({self.name}) suggested: {suggestions}")
        return suggestions

    async def analyze_failures(self, failures: List[TestFailure]) -> AIAnalysisResult:
        if not self.is_available() or not failures:
            return no_analysis()

        prompt = ANALYSIS_PROMPT.format(failure_details=format_failures(failures))
        try:
            text = await self._complete(
                prompt, temperature=0.5, max_tokens=1000, json_mode=True
            )
            return parse_analysis(text)
        except (httpx.HTTPError, AiProviderError) as e:
            logger.error(f"AI failure analysis failed ({self.name}): {e}")
            return default_analysis()

    async def _complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        """
        Send one prompt and return the generated text.

        Transport errors, 429 and 5xx responses are retried with exponential
        backoff up to `max_retries` times.
        """
        url = self._endpoint()
        headers = self._headers()
        payload = self._payload(prompt, temperature, max_tokens, json_mode)
        attempts = self.config.max_retries + 1
        delay = DEFAULT_RETRY_BACKOFF

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            transport=self._transport,
        ) as client:
            for attempt in range(1, attempts + 1):
                try:
                    response = await client.post(url, headers=headers, json=payload)
                except httpx.TransportError as e:
                    if attempt == attempts:
                        raise
                    logger.warning(
                        f"AI request failed ({e}), retry {attempt}/{attempts - 1} in {delay}s"
                    )
                else:
                    if response.status_code not in RETRYABLE_STATUS or attempt == attempts:
                        response.raise_for_status()
                        try:
                            return self._extract_text(response.json())
                        except ValueError as e:
                            raise AiProviderError(f"Response is not JSON: {e}") from e
                    logger.warning(
                        f"AI request returned {response.status_code}, "
                        f"retry {attempt}/{attempts - 1} in {delay}s"
                    )
                await asyncio.sleep(delay)
                delay = min(delay * 2, DEFAULT_RETRY_MAX_WAIT)

        raise AiProviderError("AI request retries exhausted")

    @abstractmethod
    def _endpoint(self) -> str:
        ...

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def _payload(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    def _extract_text(self, data: Dict[str, Any]) -> str:
        ...


class OpenAIProvider(HttpAiProvider):
    """OpenAI chat completions (and OpenAI-compatible endpoints)."""

    name = "openai"

    def _endpoint(self) -> str:
        base_url = (self.config.base_url or OPENAI_BASE_URL).rstrip("/")
        return f"{base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model or "gpt-3.5-turbo",
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _extract_text(self, data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AiProviderError(f"Unexpected OpenAI response shape: {e}") from e
        if not content:
            raise AiProviderError("OpenAI response has no content")
        return content


class GeminiProvider(HttpAiProvider):
    """Google Gemini generateContent."""

    name = "gemini"

    def _endpoint(self) -> str:
        base_url = (self.config.base_url or GEMINI_BASE_URL).rstrip("/")
        return f"{base_url}/models/{self.config.model}:generateContent"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.config.api_key or "",
            "Content-Type": "application/json",
        }

    def _payload(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise AiProviderError(f"Unexpected Gemini response shape: {e}") from e
        if not text:
            raise AiProviderError("Gemini response has no text")
        return text


def build_ai_provider(
    config: AiConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AiProvider:
    """
    Select the provider for the given configuration.

    Args:
        config: AI configuration
        transport: Optional httpx transport passed to HTTP providers

    Returns:
        A ready AiProvider; DisabledAiProvider when AI cannot be used
    """
    if not config.enabled:
        logger.info("AI provider disabled by configuration")
        return DisabledAiProvider()

    if not config.api_key:
        logger.warning(f"AI provider '{config.provider}' has no API key, AI disabled")
        return DisabledAiProvider()

    if config.provider == "openai":
        provider: AiProvider = OpenAIProvider(config, transport=transport)
    elif config.provider == "gemini":
        provider = GeminiProvider(config, transport=transport)
    elif config.provider == "custom" and config.base_url:
        provider = OpenAIProvider(config, transport=transport)
    else:
        logger.warning(
            f"AI provider '{config.provider}' needs ai.base_url to be set, AI disabled"
        )
        return DisabledAiProvider()

    logger.info(f"AI provider initialized: {config.provider} ({config.model})")
    return provider


__all__ = [
    "AIAnalysisResult",
    "AiProvider",
    "AiProviderError",
    "DisabledAiProvider",
    "GeminiProvider",
    "HttpAiProvider",
    "OpenAIProvider",
    "TestFailure",
    "build_ai_provider",
    "default_analysis",
    "no_analysis",
    "parse_analysis",
    "parse_suggestions",
]
