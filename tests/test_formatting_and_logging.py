import json
import logging

from dashboard.formatting import (
    confidence_tone,
    format_currency,
    format_mileage,
    format_percent,
    format_price_range,
)
from dashboard.logging_config import JSONFormatter, configure_logging, request_id


def test_format_currency():
    assert format_currency(28500) == "$28,500"
    assert format_currency(28526.67) == "$28,527"
    assert format_currency(-1200) == "-$1,200"


def test_format_percent():
    assert format_percent(2.8) == "+2.8%"
    assert format_percent(-3.2) == "-3.2%"
    assert format_percent(0.0) == "+0.0%"
    assert format_percent(None) == "n/a"


def test_format_mileage_and_range():
    assert format_mileage(15000) == "15,000 mi"
    assert format_price_range((25674, 31379)) == "$25,674 - $31,379"


def test_confidence_tone():
    assert confidence_tone("High") == "success"
    assert confidence_tone("Medium") == "warning"
    assert confidence_tone("Low") == "destructive"


def test_json_formatter():
    formatter = JSONFormatter()
    request_id.set("req-42")
    record = logging.LogRecord("test", logging.INFO, "", 0, "estimate for %s", ("Toyota",), None)
    record.context = {"make": "Toyota"}
    parsed = json.loads(formatter.format(record))
    assert parsed["message"] == "estimate for Toyota"
    assert parsed["level"] == "INFO"
    assert parsed["request_id"] == "req-42"
    assert parsed["context"] == {"make": "Toyota"}
    assert "timestamp" in parsed
    request_id.set("")


def test_configure_logging():
    configure_logging(level="DEBUG", fmt="text")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not isinstance(root.handlers[-1].formatter, JSONFormatter)
