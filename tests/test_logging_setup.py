"""Tests for structlog/stdlib logging configuration."""

import logging

import structlog

from hourscan.logging import get_logger, setup_logging


class TestSetupLogging:
    def test_root_level_and_single_handler(self) -> None:
        setup_logging("debug", "json")
        setup_logging("debug", "json")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_third_party_loggers_quieted(self) -> None:
        setup_logging("DEBUG")
        assert logging.getLogger("ccxt").level == logging.WARNING

        setup_logging("ERROR")
        assert logging.getLogger("ccxt").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_get_logger_emits(self, capsys) -> None:
        setup_logging("INFO", "json")
        get_logger("hourscan.test").info("probe_event", answer=42)

        err = capsys.readouterr().err
        assert "probe_event" in err
        assert '"answer": 42' in err
