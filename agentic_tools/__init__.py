"""
================================================================================
Agentic Tools
================================================================================

Shared utilities for the agentic UI testing framework.

Modules:
    - common: Logging setup and JSON serialization helpers
    - report_tools: Allure attachments and result processing

Example:
    from agentic_tools.common import init_logger
    from agentic_tools.report_tools.allure_utils import AllureResults

    init_logger(level="DEBUG")
    summary = AllureResults(Path("reports/allure-results")).summary()

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
