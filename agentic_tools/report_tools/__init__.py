"""Allure reporting helpers."""

from .allure_utils import (
    AllureResults,
    TestResultSummary,
    attach_json,
    attach_text,
    generate_allure_report,
)

__all__ = [
    "AllureResults",
    "TestResultSummary",
    "attach_json",
    "attach_text",
    "generate_allure_report",
]
