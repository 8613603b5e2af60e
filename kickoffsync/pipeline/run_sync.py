#!/usr/bin/env python3
# ==============================================================================
# run_sync.py  –  One sync pass
#
#   1. Load the source catalog          (fatal on error)
#   2. Fetch today's events             (ON_FETCH_FAILURE decides)
#   3. Resolve channel entries
#   4. Replace the destination category + patch bouquets (one transaction)
# ==============================================================================

from __future__ import annotations

from typing import Optional

from kickoffsync.db.panel_store import PanelStore
from kickoffsync.ingestion.schedule_provider import ScheduleProvider
from kickoffsync.ingestion.source_catalog import load_catalog
from kickoffsync.sync.channel_names import BROADCASTER_TYPES, resolve
from kickoffsync.sync.reconciler import sync_category
from kickoffsync.sync.types import SyncReport
from kickoffsync.utils.config import FETCH_FAILURE_KEEP, SyncConfig
from kickoffsync.utils.errors import ProviderFetchError
from kickoffsync.utils.logging_utils import setup_logger

LOGGER = setup_logger("run_sync")


def run_sync(
    config: SyncConfig,
    store: PanelStore,
    provider: Optional[ScheduleProvider] = None,
) -> SyncReport:
    """Run the whole pass against ``store``."""
    catalog = load_catalog(config.sources_file)

    provider = provider or ScheduleProvider(config.schedule_url, config.http_timeout)
    try:
        events = provider.fetch_events()
    except ProviderFetchError as exc:
        LOGGER.error("Error fetching today's games – %s", exc)
        if config.on_fetch_failure == FETCH_FAILURE_KEEP:
            LOGGER.warning(
                "Keeping existing channels in '%s' (ON_FETCH_FAILURE=keep)",
                config.category_name,
            )
            return SyncReport(skipped=True)
        LOGGER.warning(
            "Continuing with no events – '%s' will be emptied", config.category_name
        )
        events = []

    channels = resolve(
        events,
        catalog,
        config.daily_feed_url,
        logo_url=config.logo_url,
        broadcaster_types={**BROADCASTER_TYPES, **config.broadcaster_map},
    )
    LOGGER.info("Resolved %d game channel(s) to add", len(channels))

    report = sync_category(store, channels, config.category_name, config.server_id)
    LOGGER.info(
        "Sync complete – category %s: %d removed, %d added, %d bouquet(s) updated",
        report.category_id,
        report.deleted,
        len(report.inserted_ids),
        report.groups_rewritten,
    )
    return report
