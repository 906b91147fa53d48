"""
================================================================================
Suite Pytest Configuration
================================================================================

Markers for the framework suites, directory-based tagging, and a report
header showing which self-healing settings the run picked up.

================================================================================
"""

from pathlib import Path

import pytest

from agentic_testing.ui_testing.framework import ConfigurationError, load_config


MARKERS = {
    "P0": "Critical priority tests - must pass for deployment",
    "P1": "High priority tests - important functionality",
    "P2": "Medium priority tests - edge cases and minor features",
    "smoke": "Quick verification tests",
    "regression": "Full regression test suite",
    "e2e": "End-to-end tests simulating user flows",
    "unit": "Framework unit tests (no browser, no network)",
    "ui": "Browser-driven UI tests",
    "healing": "Tests exercising self-healing locators",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    """Tag each test with the suite its directory belongs to."""
    for item in items:
        parts = Path(str(item.fspath)).parts
        if "unit" in parts:
            item.add_marker(pytest.mark.unit)
        if "ui_testing" in parts:
            item.add_marker(pytest.mark.ui)


def pytest_report_header(config):
    lines = ["Agentic UI Testing Framework (self-healing locators)"]
    try:
        framework_config = load_config()
    except ConfigurationError as e:
        return lines + [f"configuration error: {e}"]

    healing = framework_config.self_healing
    ai = framework_config.ai
    ai_state = ai.provider if ai.enabled and ai.api_key else f"{ai.provider} (disabled)"
    lines.append(
        f"self-healing: {'on' if healing.enabled else 'off'}, "
        f"max_attempts={healing.max_attempts}, ai={ai_state}"
    )
    return lines
