"""Tests for logging setup helpers."""

import logging

import pytest

from common import logging_utils
from common.logging_utils import Timer, configure_logging, extra_context, is_debug_enabled
from constants import Constants


@pytest.fixture(autouse=True)
def reset_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    while logging_utils._installed_handlers:
        handler = logging_utils._installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


class TestConfigureLogging:
    """Test handler and level setup."""

    def test_explicit_level(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "WARNING")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv(Constants.ENV_LOG_LEVEL, raising=False)
        configure_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_repeated_calls_do_not_stack(self):
        root = logging.getLogger()
        before = len(root.handlers)
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(root.handlers) == before + 1

    def test_diagnostics_on_stderr(self, capsys):
        configure_logging("INFO")
        logging.getLogger("tree.report").info("Scanned 3 packages.")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[INFO] Scanned 3 packages." in captured.err

    def test_log_file(self, tmp_path):
        target = tmp_path / "audit.log"
        configure_logging("INFO", str(target))
        logging.getLogger("treeaudit").warning("missing license")
        for handler in logging_utils._installed_handlers:
            handler.flush()
        assert "WARNING treeaudit missing license" in target.read_text()


class TestHelpers:
    """Test the structured logging helpers."""

    def test_extra_context_drops_none(self):
        assert extra_context(event="wave", size=3, target=None) == {"event": "wave", "size": 3}

    def test_is_debug_enabled(self):
        logger = logging.getLogger("treeaudit.test")
        logger.setLevel(logging.DEBUG)
        assert is_debug_enabled(logger)
        logger.setLevel(logging.INFO)
        assert not is_debug_enabled(logger)
        logger.setLevel(logging.NOTSET)

    def test_timer(self):
        with Timer() as timer:
            pass
        assert timer.duration_ms() >= 0
