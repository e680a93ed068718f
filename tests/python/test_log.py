"""Tests for logging setup."""

from glmbench.log import configure_logging, logger


def test_configure_logging_filters_by_level():
    messages = []
    configure_logging("WARNING", sink=messages.append)
    
    logger.info("hidden")
    logger.warning("shown {}", 1)
    
    assert len(messages) == 1
    assert "WARNING" in messages[0]
    assert "shown 1" in messages[0]


def test_configure_logging_replaces_sinks():
    first, second = [], []
    configure_logging("INFO", sink=first.append)
    configure_logging("INFO", sink=second.append)
    
    logger.info("once")
    
    assert first == []
    assert len(second) == 1
