"""Tests for logging configuration."""

import io
import logging

from focus_timer.app_logging import configure_logging


def test_configure_logging_installs_one_package_handler() -> None:
    logger = logging.getLogger("focus_timer")
    logger.handlers.clear()

    configure_logging()
    configure_logging()

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert logger.propagate is False


def test_module_loggers_write_through_package_handler() -> None:
    logger = logging.getLogger("focus_timer")
    logger.handlers.clear()
    configure_logging()
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)

    logging.getLogger("focus_timer.services.sessions").info(
        "Closed active session before starting a new one",
        extra={"owner_id": "owner-1"},
    )
    logging.getLogger("focus_timer.client.countdown").debug("tick")

    assert stream.getvalue() == (
        "INFO: focus_timer.services.sessions: "
        "Closed active session before starting a new one\n"
    )
    logger.handlers.clear()


def test_configure_logging_sets_level() -> None:
    logger = logging.getLogger("focus_timer")

    configure_logging(logging.DEBUG)

    assert logger.level == logging.DEBUG
    configure_logging()
