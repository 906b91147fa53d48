"""
Composition root.

Builds one configuration, one AI provider, one healing ledger, one
SmartLocator and one ReportAnalyzer, and hands them out together. Runners
and pytest fixtures call build_framework() once per process.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from playwright.async_api import Page

from agentic_tools.common import init_logger

from .agentic_page import AgenticPage
from .ai_provider import AiProvider, build_ai_provider
from .config_loader import FrameworkConfig, load_config
from .healing_ledger import HealingLedger
from .report_analyzer import ReportAnalyzer
from .smart_locator import SmartLocator


@dataclass
class HealingFramework:
    config: FrameworkConfig
    ai_provider: AiProvider
    ledger: HealingLedger
    smart: SmartLocator
    analyzer: ReportAnalyzer

    def page(self, page: Page, base_url: str = "") -> AgenticPage:
        """Wrap a Playwright page with the shared SmartLocator."""
        return AgenticPage(page, self.smart, base_url=base_url, timeouts=self.config.timeouts)


def build_framework(
    config: Optional[FrameworkConfig] = None,
    ai_provider: Optional[AiProvider] = None,
    configure_logging: bool = True,
) -> HealingFramework:
    """
    Build the framework services.

    Args:
        config: Configuration; loaded from config/config.yaml + env if None
        ai_provider: Provider override (tests pass fakes)
        configure_logging: Whether to initialize loguru sinks from config

    Returns:
        HealingFramework holding the shared services
    """
    config = config or load_config()

    if configure_logging:
        init_logger(
            level=config.logging.level,
            log_file=config.logging.file,
            rotation=config.logging.rotation,
            retention=config.logging.retention,
        )

    ai_provider = ai_provider or build_ai_provider(config.ai)
    ledger = HealingLedger.in_directory(
        Path(config.reporting.output_path),
        persist=config.self_healing.save_healed_locators,
    )
    smart = SmartLocator(
        config.self_healing,
        ledger,
        ai_provider=ai_provider,
        timeouts=config.timeouts,
    )
    analyzer = ReportAnalyzer(config, ai_provider, ledger)

    return HealingFramework(
        config=config,
        ai_provider=ai_provider,
        ledger=ledger,
        smart=smart,
        analyzer=analyzer,
    )


__all__ = [
    "HealingFramework",
    "build_framework",
]
