import json
import logging

import pytest
import structlog

from embedded_chromedriver.logging import (
    PACKAGE_LOGGER,
    EventLineRenderer,
    add_timestamp,
    build_processors,
    configure_logging,
    get_logger,
    level_filter,
)


def test_event_line_renderer():
    """Test events render as one JSON line with header keys first"""
    output = EventLineRenderer()(None, "info", {
        "port": 9515,
        "event": "chromedriver_started",
        "level": "info",
        "timestamp": "2024-01-01T00:00:00",
        "logger": "embedded_chromedriver.supervisor",
        "binary": "/cache/chromedriver-2.27",
    })

    assert "\n" not in output
    data = json.loads(output)
    assert list(data) == [
        "timestamp", "level", "logger", "event", "binary", "port",
    ]
    assert data["event"] == "chromedriver_started"
    assert data["port"] == 9515


def test_event_line_renderer_fills_missing_header():
    data = json.loads(EventLineRenderer()(None, "info", {"event": "started"}))
    assert data["timestamp"] is None
    assert data["logger"] is None


def test_add_timestamp_keeps_existing():
    assert add_timestamp(None, "info", {"timestamp": "t0"}) == {"timestamp": "t0"}
    assert "timestamp" in add_timestamp(None, "info", {})


@pytest.mark.parametrize(
    "logger_name,method,dropped",
    [
        ("embedded_chromedriver.supervisor", "info", False),
        ("embedded_chromedriver.supervisor", "debug", True),
        ("aiohttp.client", "error", True),
        ("asyncio", "warning", True),
    ],
)
def test_level_filter(logger_name, method, dropped):
    """Test debug events and noisy third-party loggers are dropped"""
    logger = logging.getLogger(logger_name)
    if dropped:
        with pytest.raises(structlog.DropEvent):
            level_filter(logger, method, {"event": "x"})
    else:
        assert level_filter(logger, method, {"event": "x"}) == {"event": "x"}


def test_build_processors_picks_renderer():
    assert isinstance(build_processors(json_output=True)[-1], EventLineRenderer)
    assert isinstance(
        build_processors(json_output=False)[-1], structlog.dev.ConsoleRenderer
    )


def test_get_logger():
    """Test logger retrieval"""
    logger = get_logger("embedded_chromedriver.test_module")
    assert hasattr(logger, "info")
    assert hasattr(logger, "critical")


def test_configure_logging():
    """Test the package logger gets its own stderr handler"""
    configure_logging("DEBUG", json_output=True)
    try:
        config = structlog.get_config()
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)
        assert isinstance(config["processors"][-1], EventLineRenderer)

        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False
        assert len(package_logger.handlers) == 1
    finally:
        configure_logging("INFO")


def test_configure_logging_is_repeatable():
    """Test reconfiguring replaces the handler instead of stacking another"""
    configure_logging("INFO")
    configure_logging("INFO")
    assert len(logging.getLogger(PACKAGE_LOGGER).handlers) == 1
