"""Tests for correlation-aware logging."""

import logging

from xml_json_transcoder.shared.logging import CorrelationLogger, get_logger


class TestCorrelationLogger:
    """Test correlation info on log records."""

    def test_get_logger_defaults_component(self) -> None:
        """Test the component defaults to the last dotted name part."""
        logger = get_logger("xml_json_transcoder.tree.builder")

        assert isinstance(logger, CorrelationLogger)
        assert logger.component == "builder"
        assert logger.correlation_id is None

    def test_records_carry_correlation(self, caplog) -> None:
        """Test emitted records include component and correlation ID."""
        logger = get_logger("xml_json_transcoder.test", "corr-1", "unit")

        with caplog.at_level(logging.INFO, logger="xml_json_transcoder.test"):
            logger.info("hello", extra={"element_count": 3})

        record = caplog.records[-1]
        assert record.getMessage() == "hello"
        assert record.component == "unit"
        assert record.correlation_id == "corr-1"
        assert record.element_count == 3

    def test_with_correlation(self) -> None:
        """Test binding a new correlation ID keeps name and component."""
        logger = get_logger("xml_json_transcoder.test", "a", "unit")

        bound = logger.with_correlation("b")

        assert bound.correlation_id == "b"
        assert bound.component == "unit"
        assert bound.logger is logger.logger

    def test_is_enabled_for(self) -> None:
        """Test level checks delegate to the stdlib logger."""
        logger = get_logger("xml_json_transcoder.test.levels")
        logger.logger.setLevel(logging.WARNING)

        assert logger.is_enabled_for(logging.ERROR)
        assert not logger.is_enabled_for(logging.DEBUG)
