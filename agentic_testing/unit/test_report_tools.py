import json
from datetime import datetime, timezone

from loguru import logger

from agentic_testing.ui_testing.framework.strategy_generator import LocatorStrategy, StrategyType
from agentic_tools.common import init_logger, reset_logger, safe_json_serialize
from agentic_tools.report_tools.allure_utils import AllureResults, attach_json, generate_allure_report


def test_safe_json_serialize_handles_framework_types():
    moment = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    assert safe_json_serialize(moment) == "2024-05-01T10:00:00+00:00"
    assert safe_json_serialize(StrategyType.TEST_ID) == "testId"
    assert safe_json_serialize(b"abc") == "abc"
    assert safe_json_serialize(LocatorStrategy(StrategyType.CSS, ".a")) == {"type": "css", "selector": ".a"}


def test_attach_json_outside_allure_run_is_harmless():
    attach_json({"strategy": LocatorStrategy(StrategyType.CSS, ".a")}, name="Healed locator")


def test_summary_counts_statuses(tmp_path):
    results = [
        {"status": "passed", "start": 0, "stop": 10},
        {"status": "failed", "start": 10, "stop": 30},
        {"status": "broken", "start": 30, "stop": 35},
        {"status": "skipped", "start": 35, "stop": 35},
    ]
    for index, result in enumerate(results):
        (tmp_path / f"{index}-result.json").write_text(json.dumps(result), encoding="utf-8")

    summary = AllureResults(tmp_path).summary()

    assert (summary.total, summary.passed, summary.failed, summary.broken, summary.skipped) == (4, 1, 1, 1, 1)
    assert summary.duration_ms == 35
    assert summary.to_dict()["pass_rate"] == "25.00%"


def test_missing_allure_cli_is_reported(tmp_path, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("allure")

    monkeypatch.setattr("agentic_tools.report_tools.allure_utils.subprocess.run", missing)

    assert generate_allure_report(str(tmp_path / "results")) is False


def test_init_logger_adds_file_sink_once(tmp_path):
    log_file = tmp_path / "logs" / "framework.log"
    reset_logger()
    try:
        init_logger(level="DEBUG", log_file=str(log_file))
        init_logger(level="ERROR", log_file=str(tmp_path / "ignored.log"))

        assert log_file.exists()
        assert not (tmp_path / "ignored.log").exists()
    finally:
        logger.remove()
        reset_logger()
