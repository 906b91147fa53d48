import pytest

from agentic_testing.ui_testing.framework.strategy_generator import (
    LocatorStrategy,
    StrategyType,
    _xpath_literal,
    extract_class,
    extract_identifier,
    generate_fallbacks,
)


ALL = list(StrategyType)


def selectors(candidates):
    return [c.selector for c in candidates]


def test_hyphenated_id_yields_test_id_candidates():
    candidates = generate_fallbacks("#login-btn", ALL)

    assert selectors(candidates) == ['[data-testid="login-btn"]', '[data-test="login-btn"]']
    assert {c.type for c in candidates} == {StrategyType.TEST_ID}


def test_text_selector_candidates_in_order():
    candidates = generate_fallbacks("text=Submit", ALL)

    assert selectors(candidates) == [
        'text="Submit"',
        "text=/Submit/i",
        '//*[contains(text(), "Submit")]',
    ]
    assert [c.type for c in candidates] == [StrategyType.TEXT, StrategyType.TEXT, StrategyType.XPATH]


def test_quoted_text_is_unwrapped():
    assert selectors(generate_fallbacks('text="Log in"', [StrategyType.TEXT]))[0] == 'text="Log in"'


def test_tag_with_class_yields_role_then_class():
    candidates = generate_fallbacks("button.submit", ALL)

    assert selectors(candidates) == ["role=button", ".submit"]
    assert [c.type for c in candidates] == [StrategyType.ROLE, StrategyType.CSS]


def test_attribute_id_and_class_are_extracted():
    assert extract_identifier('div[id="main"]') == "main"
    assert extract_identifier("input#email") == "email"
    assert extract_class("[class=card]") == "card"
    assert extract_class(".error-message") == "error-message"


def test_anchor_maps_to_link_role():
    assert "role=link" in selectors(generate_fallbacks("a.nav", ALL))


def test_unknown_tag_has_no_role():
    assert selectors(generate_fallbacks("div.card", ALL)) == [".card"]


def test_strategies_are_gated():
    assert selectors(generate_fallbacks("button.submit", [StrategyType.CSS])) == [".submit"]
    assert generate_fallbacks("#login-btn", [StrategyType.TEXT, StrategyType.ROLE]) == []
    assert generate_fallbacks("text=Submit", []) == []


def test_strategy_names_are_accepted():
    assert selectors(generate_fallbacks("#save", ["testId"]))[0] == '[data-testid="save"]'


@pytest.mark.parametrize("selector", ["", "   ", "///", "[[[", "//div[@x='1']", "text="])
def test_odd_selectors_never_raise(selector):
    assert isinstance(generate_fallbacks(selector, ALL), list)


def test_visual_strategy_adds_nothing():
    assert generate_fallbacks("button.submit", [StrategyType.VISUAL]) == []


def test_xpath_literal_quoting():
    assert _xpath_literal("plain") == '"plain"'
    assert _xpath_literal('say "hi"') == "'say \"hi\"'"
    assert _xpath_literal("it's \"x\"") == "concat(\"it's \", '\"', \"x\", '\"', \"\")"


def test_strategy_type_parse():
    assert StrategyType.parse("test_id") is StrategyType.TEST_ID
    assert StrategyType.parse("TESTID") is StrategyType.TEST_ID
    assert StrategyType.parse(StrategyType.CSS) is StrategyType.CSS
    with pytest.raises(ValueError):
        StrategyType.parse("visionary")


def test_locator_strategy_confidence_bounds():
    assert LocatorStrategy(StrategyType.CSS, ".a", confidence=0.9).confidence == 0.9
    with pytest.raises(ValueError):
        LocatorStrategy(StrategyType.CSS, ".a", confidence=1.5)


def test_locator_strategy_dict_form():
    strategy = LocatorStrategy(StrategyType.TEST_ID, '[data-testid="x"]')

    assert strategy.to_dict() == {"type": "testId", "selector": '[data-testid="x"]'}
    assert LocatorStrategy.from_dict(strategy.to_dict()) == strategy
