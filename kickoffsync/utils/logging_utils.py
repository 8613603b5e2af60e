# ==============================================================================
# logging_utils.py  –  One log stream per sync run
#
#   kickoffsync             console + logs/kickoffsync_<timestamp>.log
#     ├── kickoffsync.main
#     ├── kickoffsync.run_sync
#     └── …                 module loggers, no handlers of their own
#
#   LOG_DIR    directory for the run file   (default <repo>/logs)
#   LOG_LEVEL  DEBUG / INFO / WARNING / …   (default INFO)
# ==============================================================================

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "kickoffsync"

_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _logs_dir() -> Path:
    override = os.getenv("LOG_DIR")
    return Path(override) if override else Path(__file__).resolve().parents[2] / "logs"


def _level() -> int:
    level = logging.getLevelName((os.getenv("LOG_LEVEL") or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _run_file_handler(logs_dir: Path) -> Optional[logging.Handler]:
    """File handler for this run, or None when the directory is not writable."""
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        return logging.FileHandler(logs_dir / f"{ROOT_LOGGER}_{stamp}.log", encoding="utf-8")
    except OSError:
        logging.getLogger().warning("Cannot write logs to %s", logs_dir)
        return None


def configure_logging(
    logs_dir: Union[str, Path, None] = None, force: bool = False
) -> logging.Logger:
    """
    Attach console and run-file handlers to the ``kickoffsync`` logger.

    Only the first call does anything unless ``force`` is set, which drops
    the existing handlers and starts a new run file.
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER)
    if _configured and not force:
        return root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(_level())
    formatter = logging.Formatter(_FMT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    file_handler = _run_file_handler(Path(logs_dir) if logs_dir else _logs_dir())
    if file_handler:
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _configured = True
    return root


def setup_logger(name: str) -> logging.Logger:
    """Module logger under ``kickoffsync``; configures output on first use."""
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
