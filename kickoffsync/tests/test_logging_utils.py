import logging

import pytest

from kickoffsync.utils.logging_utils import ROOT_LOGGER, configure_logging, setup_logger


@pytest.fixture
def run_logs(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    configure_logging(tmp_path, force=True)
    yield tmp_path
    configure_logging(tmp_path, force=True)


def test_module_loggers_share_the_run_file(run_logs):
    setup_logger("reconciler").info("planned %d channel(s)", 3)
    setup_logger("panel_store").warning("bouquet 4 unreadable")

    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.flush()

    files = list(run_logs.glob(f"{ROOT_LOGGER}_*.log"))
    assert len(files) == 1
    text = files[0].read_text(encoding="utf-8")
    assert "INFO     | kickoffsync.reconciler | planned 3 channel(s)" in text
    assert "WARNING  | kickoffsync.panel_store | bouquet 4 unreadable" in text


def test_setup_logger_adds_no_handlers(run_logs):
    root = logging.getLogger(ROOT_LOGGER)
    before = list(root.handlers)

    logger = setup_logger("main")
    setup_logger("main")

    assert logger.name == f"{ROOT_LOGGER}.main"
    assert logger.handlers == []
    assert root.handlers == before
    assert len(before) == 2


@pytest.mark.parametrize(
    "value,expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("loud", logging.INFO)],
)
def test_log_level_from_env(tmp_path, monkeypatch, value, expected):
    monkeypatch.setenv("LOG_LEVEL", value)
    try:
        assert configure_logging(tmp_path, force=True).level == expected
    finally:
        monkeypatch.delenv("LOG_LEVEL")
        configure_logging(tmp_path, force=True)
