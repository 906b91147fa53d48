from typing import List

import pytest
from loguru import logger

from agentic_testing.ui_testing.framework.config_loader import SelfHealingConfig, TimeoutConfig
from agentic_testing.ui_testing.framework.healing_ledger import HealingLedger
from agentic_testing.ui_testing.framework.smart_locator import SmartLocator


@pytest.fixture
def ledger(tmp_path) -> HealingLedger:
    return HealingLedger.in_directory(tmp_path)


@pytest.fixture
def make_smart(ledger):
    def _make(ai_provider=None, **overrides) -> SmartLocator:
        return SmartLocator(
            SelfHealingConfig(**overrides),
            ledger,
            ai_provider=ai_provider,
            timeouts=TimeoutConfig(),
        )

    return _make


@pytest.fixture
def log_messages():
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
