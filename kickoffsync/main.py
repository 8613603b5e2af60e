#!/usr/bin/env python3
# ==============================================================================
#  kickoffsync - main.py
#  Purpose: one-shot runner for the daily game-channel sync
#           (config → catalog + schedule → panel database)
# ==============================================================================

from __future__ import annotations

import sys
from typing import Callable, TypeVar

from kickoffsync.db.panel_store import PanelStore
from kickoffsync.pipeline.run_sync import run_sync
from kickoffsync.utils.config import load_config
from kickoffsync.utils.db_utils import create_db_engine
from kickoffsync.utils.errors import KickoffSyncError
from kickoffsync.utils.logging_utils import setup_logger

T = TypeVar("T")

logger = setup_logger("main")

# ------------------------------------------------------------------------------
# Stage Wrapper
# ------------------------------------------------------------------------------


def _stage(title: str, fn: Callable[[], T]) -> T:
    """
    Run a stage with start → finish logging and full stacktrace on error.
    """
    logger.info("%s – started", title)
    try:
        result = fn()
        logger.info("%s – finished", title)
        return result
    except Exception:
        logger.exception("%s – failed", title)
        raise


def main() -> int:
    """Run one sync. Returns the process exit status."""
    try:
        config = _stage("Load configuration", load_config)
    except KickoffSyncError:
        return 1

    try:
        store = _stage(
            "Open panel database",
            lambda: PanelStore(create_db_engine(config.database_url)),
        )
    except Exception:
        return 1

    try:
        _stage("Game channel sync", lambda: run_sync(config, store))
    except Exception:
        return 1
    finally:
        store.close()
        logger.info("Connection pool closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
