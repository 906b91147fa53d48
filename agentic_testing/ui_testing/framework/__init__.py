"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework with self-healing locators and
AI-assisted failure analysis.

Components:
    - strategy_generator: Fallback selectors derived from a failing selector
    - healing_ledger: Persisted record of successful heals + heal cache
    - smart_locator: Self-healing resolution (cache, literal, AI, fallbacks)
    - ai_provider: OpenAI / Gemini suggestion and analysis providers
    - agentic_page: Base page object using the SmartLocator
    - report_analyzer: Post-run markdown report with AI insights
    - bootstrap: Composition root

Author: Automation Team
License: MIT
================================================================================
"""

from .agentic_page import AgenticPage
from .ai_provider import (
    AIAnalysisResult,
    AiProvider,
    DisabledAiProvider,
    GeminiProvider,
    OpenAIProvider,
    TestFailure,
    build_ai_provider,
)
from .bootstrap import HealingFramework, build_framework
from .config_loader import ConfigLoader, ConfigurationError, FrameworkConfig, load_config
from .healing_ledger import HealedLocator, HealingLedger
from .report_analyzer import ReportAnalysis, ReportAnalyzer
from .smart_locator import ElementNotFoundError, SmartLocator
from .strategy_generator import LocatorStrategy, StrategyType, generate_fallbacks

__all__ = [
    "AIAnalysisResult",
    "AgenticPage",
    "AiProvider",
    "ConfigLoader",
    "ConfigurationError",
    "DisabledAiProvider",
    "ElementNotFoundError",
    "FrameworkConfig",
    "GeminiProvider",
    "HealedLocator",
    "HealingFramework",
    "HealingLedger",
    "LocatorStrategy",
    "OpenAIProvider",
    "ReportAnalysis",
    "ReportAnalyzer",
    "SmartLocator",
    "StrategyType",
    "TestFailure",
    "build_ai_provider",
    "build_framework",
    "generate_fallbacks",
    "load_config",
]
