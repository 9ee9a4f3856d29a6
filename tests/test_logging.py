"""Tests for the two-handler logging system (terminal + log file)."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from phraseboard.logging import file_log_level, log_path_for, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Reset root logger handlers after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    logging.basicConfig(level=logging.WARNING, force=True)


class TestSetupLogging:
    def test_terminal_only_without_data_dir(self) -> None:
        setup_logging(data_dir=None, verbose=False)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING

    def test_verbose_sets_debug(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger().handlers[0].level == logging.DEBUG

    def test_file_handler_in_dot_dir(self, tmp_path: Path) -> None:
        setup_logging(data_dir=tmp_path)

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_path_for(tmp_path)
        assert log_path_for(tmp_path) == tmp_path / ".phraseboard" / "phraseboard.log"

    def test_messages_reach_log_file(self, tmp_path: Path) -> None:
        setup_logging(data_dir=tmp_path)
        logging.getLogger("phraseboard.test").info("stored analysis #7")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "stored analysis #7" in log_path_for(tmp_path).read_text(encoding="utf-8")

    def test_file_level_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHRASEBOARD_LOG_LEVEL", "debug")
        setup_logging(data_dir=tmp_path)
        (fh,) = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert fh.level == logging.DEBUG

    def test_calling_twice_does_not_stack(self, tmp_path: Path) -> None:
        setup_logging(data_dir=tmp_path)
        setup_logging(data_dir=tmp_path)
        assert len(logging.getLogger().handlers) == 2

    def test_noisy_loggers_suppressed(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("anthropic").level == logging.WARNING

    def test_file_records_more_than_terminal(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("PHRASEBOARD_LOG_LEVEL", raising=False)
        setup_logging(data_dir=tmp_path)
        levels = {type(h): h.level for h in logging.getLogger().handlers}
        assert levels == {
            logging.StreamHandler: logging.WARNING,
            RotatingFileHandler: logging.INFO,
        }


class TestFileLogLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("nonsense", logging.INFO),
        ],
    )
    def test_from_env(
        self, value: str, expected: int, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PHRASEBOARD_LOG_LEVEL", value)
        assert file_log_level() == expected

    def test_unset_is_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PHRASEBOARD_LOG_LEVEL", raising=False)
        assert file_log_level() == logging.INFO
