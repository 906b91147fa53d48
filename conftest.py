"""
Repository-level pytest configuration.

  - Demo-safe environment defaults for the login page object (no secrets)
  - Terminal summary of the locators healed during the session

AI keys are never defaulted here. Without one the framework runs with the
AI provider disabled and heals from generated fallbacks only.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """Set environment defaults if not already provided by the user/CI."""
    defaults = {
        "UI_BASE_URL": "http://localhost:3000",
        "UI_USERNAME": "demo_user",
        "UI_PASSWORD": "demo_password",
        "LOG_LEVEL": "INFO",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """List the healed locators persisted in the configured output directory."""
    from agentic_testing.ui_testing.framework import ConfigurationError, HealingLedger, load_config

    try:
        output_path = load_config().reporting.output_path
    except ConfigurationError:
        return

    ledger = HealingLedger.in_directory(output_path, persist=False)
    if not len(ledger):
        return

    terminalreporter.section("healed locators")
    for record in ledger.get_healed_locators():
        terminalreporter.write_line(
            f"{record.original} -> {record.healed} ({record.strategy.type.value})"
        )
