import pytest

from agentic_testing.ui_testing.framework import smart_locator as smart_locator_module
from agentic_testing.ui_testing.framework.healing_ledger import HealedLocator
from agentic_testing.ui_testing.framework.smart_locator import AI_SUGGESTION_CONFIDENCE
from agentic_testing.ui_testing.framework.strategy_generator import LocatorStrategy, StrategyType

from .fakes import FakeAiProvider, FakePage


@pytest.mark.asyncio
async def test_resolving_selector_is_returned_without_healing(make_smart, ledger):
    ai = FakeAiProvider(suggestions=["#never"])
    page = FakePage(visible={"#submit"})

    locator = await make_smart(ai_provider=ai).resolve(page, "#submit", "Submit button")

    assert locator.selector == "#submit"
    assert page.attempts == [("#submit", 5000)]
    assert ai.suggest_calls == []
    assert len(ledger) == 0


@pytest.mark.asyncio
async def test_renamed_id_heals_to_test_id(make_smart, ledger):
    page = FakePage(visible={'[data-testid="login-btn"]'})

    locator = await make_smart().resolve(page, "#login-btn", "Login button")

    assert locator.selector == '[data-testid="login-btn"]'
    assert page.attempts == [("#login-btn", 5000), ('[data-testid="login-btn"]', 3000)]
    [record] = ledger.get_healed_locators()
    assert record.original == "#login-btn"
    assert record.healed == '[data-testid="login-btn"]'
    assert record.strategy.type is StrategyType.TEST_ID
    assert record.success is True
    assert ledger.path.exists()


@pytest.mark.asyncio
async def test_healing_disabled_returns_none_after_one_attempt(make_smart, ledger):
    ai = FakeAiProvider(suggestions=['[data-testid="login-btn"]'])
    page = FakePage(visible={'[data-testid="login-btn"]'})

    locator = await make_smart(ai_provider=ai, enabled=False).resolve(page, "#login-btn")

    assert locator is None
    assert page.attempted == ["#login-btn"]
    assert ai.suggest_calls == []
    assert len(ledger) == 0


@pytest.mark.asyncio
async def test_ai_suggestion_is_recorded_as_css(make_smart, ledger):
    ai = FakeAiProvider(suggestions=["#a", "button.primary"])
    page = FakePage(visible={"button.primary"}, html="<button class='primary'>Go</button>")

    locator = await make_smart(ai_provider=ai).resolve(page, "#go", "Go button")

    assert locator.selector == "button.primary"
    assert ai.suggest_calls == [("Go button", "<button class='primary'>Go</button>", "#go")]
    [record] = ledger.get_healed_locators()
    assert record.strategy.type is StrategyType.CSS
    assert record.strategy.confidence == AI_SUGGESTION_CONFIDENCE
    assert page.attempts[1:] == [("#a", 3000), ("button.primary", 3000)]


@pytest.mark.asyncio
async def test_only_first_ai_suggestions_are_tried(make_smart, ledger):
    ai = FakeAiProvider(suggestions=["#s1", "#s2", "#s3", "#s4"])
    page = FakePage(visible={"#s4"})

    locator = await make_smart(ai_provider=ai).resolve(page, "#x")

    assert locator is None
    assert "#s4" not in page.attempted
    assert page.attempted == [
        "#x",
        "#s1",
        "#s2",
        "#s3",
        '[data-testid="x"]',
        '[data-test="x"]',
    ]


@pytest.mark.asyncio
async def test_unavailable_ai_is_not_asked(make_smart):
    ai = FakeAiProvider(suggestions=["#found"], available=False)
    page = FakePage(visible={"#found"})

    assert await make_smart(ai_provider=ai).resolve(page, "#missing") is None
    assert ai.suggest_calls == []


@pytest.mark.asyncio
async def test_page_content_failure_skips_ai_only(make_smart, ledger):
    ai = FakeAiProvider(suggestions=["#found"])
    page = FakePage(visible={'[data-testid="login-btn"]', "#found"})
    page.content_error = "Target page, context or browser has been closed"

    locator = await make_smart(ai_provider=ai).resolve(page, "#login-btn")

    assert locator.selector == '[data-testid="login-btn"]'
    assert ai.suggest_calls == []


@pytest.mark.asyncio
async def test_fallbacks_are_capped_by_max_attempts(make_smart, monkeypatch):
    candidates = [LocatorStrategy(StrategyType.CSS, f".c{i}") for i in range(7)]
    monkeypatch.setattr(smart_locator_module, "generate_fallbacks", lambda original, enabled: candidates)
    page = FakePage(visible={".c6"})

    locator = await make_smart(max_attempts=2).resolve(page, "#x")

    assert locator is None
    assert page.attempted == ["#x", ".c0", ".c1"]


@pytest.mark.asyncio
async def test_zero_max_attempts_skips_fallbacks(make_smart):
    page = FakePage(visible={'[data-testid="login-btn"]'})

    assert await make_smart(max_attempts=0).resolve(page, "#login-btn") is None
    assert page.attempted == ["#login-btn"]


@pytest.mark.asyncio
async def test_enabled_strategies_are_passed_to_generator(make_smart):
    page = FakePage(visible={"role=button", ".submit"})

    locator = await make_smart(strategies=frozenset({StrategyType.CSS})).resolve(page, "button.submit")

    assert locator.selector == ".submit"
    assert "role=button" not in page.attempted


@pytest.mark.asyncio
async def test_cached_heal_is_tried_first(make_smart, ledger):
    ledger.append(
        HealedLocator(
            original="#old",
            healed="#new",
            strategy=LocatorStrategy(StrategyType.CSS, "#new"),
        )
    )
    page = FakePage(visible={"#new", "#old"})

    locator = await make_smart().resolve(page, "#old")

    assert locator.selector == "#new"
    assert page.attempted == ["#new"]
    assert len(ledger) == 1


@pytest.mark.asyncio
async def test_stale_cache_entry_is_evicted(make_smart, ledger):
    ledger.append(
        HealedLocator(
            original="#old",
            healed="#gone",
            strategy=LocatorStrategy(StrategyType.CSS, "#gone"),
        )
    )
    page = FakePage(visible={"#old"})

    locator = await make_smart().resolve(page, "#old")

    assert locator.selector == "#old"
    assert page.attempted == ["#gone", "#old"]
    assert ledger.cached_selector("#old") is None
    assert len(ledger) == 1


@pytest.mark.asyncio
async def test_second_resolution_reuses_heal(make_smart, ledger):
    smart = make_smart()
    page = FakePage(visible={'[data-testid="login-btn"]'})

    await smart.resolve(page, "#login-btn")
    page.attempts.clear()
    locator = await smart.resolve(page, "#login-btn")

    assert locator.selector == '[data-testid="login-btn"]'
    assert page.attempted == ['[data-testid="login-btn"]']
    assert len(ledger) == 1


@pytest.mark.asyncio
async def test_exhausted_ladder_logs_and_returns_none(make_smart, ledger, log_messages):
    page = FakePage()

    assert await make_smart().resolve(page, "text=Nothing here") is None
    assert len(ledger) == 0
    assert any("Failed to heal locator: text=Nothing here" in m for m in log_messages)


def test_health_report(make_smart, ledger):
    smart = make_smart()
    assert "No locators needed healing" in smart.get_health_report()

    ledger.append(
        HealedLocator(
            original="#login-btn",
            healed='[data-testid="login-btn"]',
            strategy=LocatorStrategy(StrategyType.TEST_ID, '[data-testid="login-btn"]'),
        )
    )

    report = smart.get_health_report()
    assert "[#login-btn]" in report
    assert 'Healed to: [data-testid="login-btn"] (testId)' in report
