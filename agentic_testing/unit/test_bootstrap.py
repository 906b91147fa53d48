from dataclasses import replace

from agentic_testing.ui_testing.framework.agentic_page import AgenticPage
from agentic_testing.ui_testing.framework.ai_provider import DisabledAiProvider
from agentic_testing.ui_testing.framework.bootstrap import build_framework
from agentic_testing.ui_testing.framework.config_loader import AiConfig, FrameworkConfig, ReportingConfig
from agentic_testing.ui_testing.framework.healing_ledger import HEALED_LOCATORS_FILE

from .fakes import FakeAiProvider, FakePage


def make_config(tmp_path, **ai):
    return replace(
        FrameworkConfig(),
        ai=AiConfig(**ai),
        reporting=ReportingConfig(output_path=str(tmp_path)),
    )


def test_services_are_wired_together(tmp_path):
    framework = build_framework(make_config(tmp_path, enabled=False), configure_logging=False)

    assert isinstance(framework.ai_provider, DisabledAiProvider)
    assert framework.ledger.path == tmp_path / HEALED_LOCATORS_FILE
    assert framework.smart.ledger is framework.ledger
    assert framework.smart.ai_provider is framework.ai_provider
    assert framework.analyzer.ledger is framework.ledger
    assert framework.smart.locate_timeout == 5000
    assert framework.smart.heal_timeout == 3000


def test_provider_override(tmp_path):
    ai = FakeAiProvider()

    framework = build_framework(make_config(tmp_path, api_key="k"), ai_provider=ai, configure_logging=False)

    assert framework.smart.ai_provider is ai
    assert framework.analyzer.ai_provider is ai


def test_pages_share_one_smart_locator(tmp_path):
    framework = build_framework(make_config(tmp_path, enabled=False), configure_logging=False)

    first = framework.page(FakePage(), base_url="http://app.local")
    second = framework.page(FakePage(), base_url="http://app.local")

    assert isinstance(first, AgenticPage)
    assert first.smart is second.smart is framework.smart


def test_persistence_follows_config(tmp_path):
    config = make_config(tmp_path, enabled=False)
    config = replace(config, self_healing=replace(config.self_healing, save_healed_locators=False))

    assert build_framework(config, configure_logging=False).ledger.persist is False
