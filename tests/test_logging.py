"""Tests for package logging setup."""

import logging

import pytest

from vaultlinks import apply_wikilinks
from vaultlinks._logging import HANDLER_NAME, configure_logging, set_quiet_mode


@pytest.fixture
def package_logger(restore_package_logger):
    logger = restore_package_logger
    logger.handlers.clear()
    return logger


def own_handlers(logger):
    return [h for h in logger.handlers if h.get_name() == HANDLER_NAME]


class TestConfigureLogging:
    def test_level_from_env(self, package_logger, monkeypatch):
        monkeypatch.setenv("VAULTLINKS_LOG_LEVEL", "debug")

        configure_logging()

        assert package_logger.level == logging.DEBUG
        assert len(own_handlers(package_logger)) == 1
        assert package_logger.propagate is False

    def test_repeat_calls_keep_one_handler(self, package_logger):
        configure_logging()
        configure_logging("WARNING")

        assert len(own_handlers(package_logger)) == 1
        assert package_logger.level == logging.WARNING

    def test_installs_handler_beside_foreign_handler(self, package_logger):
        foreign = logging.NullHandler()
        package_logger.addHandler(foreign)

        configure_logging()

        assert foreign in package_logger.handlers
        assert len(own_handlers(package_logger)) == 1
        assert isinstance(own_handlers(package_logger)[0], logging.StreamHandler)
        assert package_logger.propagate is False

    def test_unknown_level_falls_back_to_info(self, package_logger):
        configure_logging("chatty")

        assert package_logger.level == logging.INFO

    def test_quiet_mode(self, package_logger):
        configure_logging()

        set_quiet_mode(True)
        assert package_logger.level == logging.ERROR

        set_quiet_mode(False)
        assert package_logger.level == logging.INFO


def test_session_id_tags_debug_records(caplog):
    core_logger = logging.getLogger("vaultlinks.core")
    core_logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.DEBUG, logger="vaultlinks.core"):
            apply_wikilinks("React", ["React"], session_id="s-42")
    finally:
        core_logger.removeHandler(caplog.handler)

    assert any("session=s-42" in record.getMessage() for record in caplog.records)
