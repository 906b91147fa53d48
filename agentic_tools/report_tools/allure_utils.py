"""
================================================================================
Allure Report Utilities
================================================================================

Allure glue for the self-healing framework.

During a run:
    - attach_json / attach_text put healed-locator records and unresolved
      candidate lists on the current Allure step

After a run:
    - AllureResults reads `*-result.json` files, counts outcomes and finds
      screenshot / trace attachments of failed tests
    - generate_allure_report renders the HTML report with the Allure CLI,
      carrying the trend history of the previous report over

================================================================================
"""

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import allure
from loguru import logger

from agentic_tools.common import safe_json_serialize


FAILED_STATUSES = ("failed", "broken")
COUNTED_STATUSES = ("passed", "failed", "broken", "skipped")

ATTACHMENT_KINDS = {
    "screenshot": ("screenshot", "image/"),
    "trace": ("trace", "application/zip"),
}


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to the current Allure step.

    Framework objects (enums, datetimes, LocatorStrategy) are serialized via
    safe_json_serialize. Outside an Allure run this is a no-op.
    """
    allure.attach(
        json.dumps(data, indent=2, ensure_ascii=False, default=safe_json_serialize),
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """Attach plain text to the current Allure step."""
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


# ================================================================================
# Result Reading
# ================================================================================

@dataclass
class TestResultSummary:
    """Outcome counts of one run."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class AllureResults:
    """
    Reader for an `allure-results` directory.

    Usage:
        >>> results = AllureResults(Path("reports/allure-results"))
        >>> results.summary().pass_rate
        75.0
        >>> for result in results.read():
        ...     print(result["name"], AllureResults.attachment_source(result, "screenshot"))
    """

    def __init__(self, results_dir: Path):
        self.results_dir = Path(results_dir)

    def exists(self) -> bool:
        return self.results_dir.is_dir()

    def read(self) -> List[Dict[str, Any]]:
        """
        Load every result file, oldest test first.

        Unreadable files are logged and skipped.
        """
        results = []
        for result_file in sorted(self.results_dir.glob("*-result.json")):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable Allure result {result_file.name}: {e}")

        results.sort(key=lambda r: r.get("start", 0))
        return results

    def summary(self) -> TestResultSummary:
        summary = TestResultSummary()
        for result in self.read():
            summary.total += 1
            status = result.get("status", "unknown")
            if status in COUNTED_STATUSES:
                setattr(summary, status, getattr(summary, status) + 1)
            else:
                summary.unknown += 1
            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)
        return summary

    @staticmethod
    def failure_message(result: Dict[str, Any]) -> Optional[str]:
        details = result.get("statusDetails") or {}
        return details.get("message")

    @staticmethod
    def attachment_source(result: Dict[str, Any], kind: str) -> Optional[str]:
        """
        Source file of the first attachment of a kind, searching nested steps.

        Args:
            result: One Allure result dict
            kind: "screenshot" or "trace"

        Returns:
            Attachment file name inside the results directory, or None
        """
        name_hint, mime_hint = ATTACHMENT_KINDS[kind]
        for attachment in _walk_attachments(result):
            name = str(attachment.get("name", "")).lower()
            mime = str(attachment.get("type", "")).lower()
            if name_hint in name or mime.startswith(mime_hint):
                return attachment.get("source")
        return None


def _walk_attachments(node: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    yield from node.get("attachments") or []
    for step in node.get("steps") or []:
        yield from _walk_attachments(step)


# ================================================================================
# HTML Report
# ================================================================================

def generate_allure_report(
    results_dir: str,
    report_dir: Optional[str] = None,
) -> bool:
    """
    Render the HTML report with the Allure CLI.

    The `history` folder of the previous report is copied into the results
    first so trend graphs continue across runs.

    Args:
        results_dir: Path to allure-results directory
        report_dir: Output directory (sibling `allure-report` by default)

    Returns:
        True if the report was generated
    """
    results_path = Path(results_dir)
    report_path = Path(report_dir) if report_dir else results_path.parent / "allure-report"

    history_source = report_path / "history"
    if history_source.is_dir():
        history_dest = results_path / "history"
        shutil.rmtree(history_dest, ignore_errors=True)
        shutil.copytree(history_source, history_dest)
        logger.debug("Copied history from previous report")

    cmd = ["allure", "generate", str(results_path), "-o", str(report_path), "--clean"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        logger.warning("Allure CLI not found. Install allure-commandline to generate reports.")
        return False
    except OSError as e:
        logger.error(f"Report generation error: {e}")
        return False

    if result.returncode != 0:
        logger.error(f"Report generation failed: {result.stderr}")
        return False

    logger.info(f"📊 Allure report generated at {report_path}")
    return True


__all__ = [
    "AllureResults",
    "TestResultSummary",
    "attach_json",
    "attach_text",
    "generate_allure_report",
]
