"""
================================================================================
Report Analyzer
================================================================================

Post-run analysis of a test session:
    - Reads Allure result files and counts outcomes
    - Collects failures (message, screenshot, trace)
    - Asks the AI provider for a root-cause analysis
    - Lists the locators healed during the run
    - Writes a markdown report to the output directory

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from agentic_tools.report_tools.allure_utils import FAILED_STATUSES, AllureResults

from .ai_provider import AIAnalysisResult, AiProvider, TestFailure
from .config_loader import FrameworkConfig
from .healing_ledger import HealedLocator, HealingLedger


REPORT_FILE = "ai-analysis-report.md"


@dataclass
class ReportAnalysis:
    total_tests: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    failures: List[TestFailure] = field(default_factory=list)
    ai_insights: Optional[AIAnalysisResult] = None
    healed_locators: List[HealedLocator] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total_tests == 0:
            return 0.0
        return self.passed / self.total_tests * 100


class ReportAnalyzer:
    """
    Builds the post-run analysis and markdown report.

    Usage:
        >>> analyzer = ReportAnalyzer(config, ai_provider, ledger)
        >>> analysis = await analyzer.analyze_results()
        >>> analysis.failed, len(analysis.healed_locators)
        (1, 2)
    """

    def __init__(
        self,
        config: FrameworkConfig,
        ai_provider: AiProvider,
        ledger: HealingLedger,
    ):
        self.config = config
        self.ai_provider = ai_provider
        self.ledger = ledger
        self.output_dir = Path(config.reporting.output_path)

    async def analyze_results(
        self,
        results_dir: Optional[Union[str, Path]] = None,
    ) -> ReportAnalysis:
        """
        Analyze the Allure results of the last run.

        Args:
            results_dir: Allure results directory (config value by default)

        Returns:
            ReportAnalysis; empty when no results exist
        """
        results_path = Path(results_dir or self.config.reporting.results_dir)
        results = AllureResults(results_path)
        if not results.exists():
            logger.warning(f"Results directory not found: {results_path}")
            return ReportAnalysis()

        analysis = self.parse_results(results.read())

        if self.config.reporting.ai_analysis and analysis.failures:
            logger.info("Performing AI analysis of test failures...")
            analysis.ai_insights = await self.ai_provider.analyze_failures(analysis.failures)

        analysis.healed_locators = self.ledger.get_healed_locators()

        if self.config.reporting.generate_insights:
            self.write_report(analysis)

        return analysis

    def parse_results(self, results: List[Dict[str, Any]]) -> ReportAnalysis:
        """Count outcomes and collect failures from Allure result dicts."""
        analysis = ReportAnalysis()

        for result in results:
            analysis.total_tests += 1
            status = result.get("status")

            if status == "passed":
                analysis.passed += 1
            elif status == "skipped":
                analysis.skipped += 1
            elif status in FAILED_STATUSES:
                analysis.failed += 1
                start = result.get("start")
                timestamp = (
                    datetime.fromtimestamp(start / 1000, tz=timezone.utc)
                    if start
                    else datetime.now(timezone.utc)
                )
                analysis.failures.append(
                    TestFailure(
                        test_name=result.get("name") or result.get("fullName") or "Unknown test",
                        error=AllureResults.failure_message(result) or "Unknown error",
                        screenshot=AllureResults.attachment_source(result, "screenshot"),
                        trace=AllureResults.attachment_source(result, "trace"),
                        timestamp=timestamp,
                    )
                )

        return analysis

    def write_report(self, analysis: ReportAnalysis) -> Optional[Path]:
        """
        Write the markdown report.

        Returns:
            Report path, or None when writing failed
        """
        report_path = self.output_dir / REPORT_FILE
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(self.format_report(analysis), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to generate report: {e}")
            return None
        logger.info(f"AI analysis report generated: {report_path}")
        return report_path

    def format_report(self, analysis: ReportAnalysis) -> str:
        lines = [
            "# Test Execution Analysis Report",
            "",
            f"**Generated:** {datetime.now(timezone.utc).isoformat()}",
            "",
            "## Summary",
            "",
            f"- **Total Tests:** {analysis.total_tests}",
            f"- **Passed:** {analysis.passed} ✅",
            f"- **Failed:** {analysis.failed} ❌",
            f"- **Skipped:** {analysis.skipped} ⏭️",
            f"- **Success Rate:** {analysis.success_rate:.2f}%",
            "",
        ]

        if analysis.failures:
            lines.extend(["## Test Failures", ""])
            for index, failure in enumerate(analysis.failures, start=1):
                lines.extend([f"### {index}. {failure.test_name}", "", f"**Error:** `{failure.error}`", ""])
                if failure.screenshot:
                    lines.extend([f"**Screenshot:** {failure.screenshot}", ""])
                if failure.trace:
                    lines.extend([f"**Trace:** {failure.trace}", ""])

        insights = analysis.ai_insights
        if insights:
            lines.extend(["## AI Analysis Insights", "", f"**Summary:** {insights.summary}", ""])
            if insights.root_cause:
                lines.extend([f"**Root Cause:** {insights.root_cause}", ""])
            lines.extend([f"**Confidence:** {insights.confidence * 100:.0f}%", ""])
            if insights.suggestions:
                lines.extend(["### Recommendations", ""])
                lines.extend(
                    f"{index}. {suggestion}"
                    for index, suggestion in enumerate(insights.suggestions, start=1)
                )
                lines.append("")

        if analysis.healed_locators:
            lines.extend([
                "## Self-Healed Locators",
                "",
                f"The framework automatically healed {len(analysis.healed_locators)} locator(s):",
                "",
            ])
            for index, record in enumerate(analysis.healed_locators, start=1):
                lines.extend([
                    f"{index}. **Original:** `{record.original}`",
                    f"   **Healed:** `{record.healed}`",
                    f"   **Strategy:** {record.strategy.type.value}",
                    f"   **Time:** {record.timestamp.isoformat()}",
                    "",
                ])

        return "\n".join(lines)


__all__ = [
    "REPORT_FILE",
    "ReportAnalysis",
    "ReportAnalyzer",
]
