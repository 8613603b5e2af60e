# ==============================================================================
# channel_names.py  –  Expand today's events into named channel entries
# ------------------------------------------------------------------------------
# For every event and every known broadcaster, one channel per matching
# catalog source:
#
#   "<home> x <away> - <kickoff> - <quality[ n]> (<TYPE>)"
#
# Sources of the same type sharing a quality are numbered from the second
# one on ("FHD", "FHD 2", "FHD 3"). An optional "EVENTS OF THE DAY" entry
# always comes first.
# ==============================================================================

from __future__ import annotations

from collections import Counter
from typing import Dict, Final, Iterable, List, Mapping, Optional, Sequence

from kickoffsync.sync.types import CatalogEntry, ChannelEntry, Event
from kickoffsync.utils.config import DEFAULT_LOGO_URL

DAILY_FEED_NAME: Final[str] = "EVENTS OF THE DAY"

# Broadcaster name (as published by the schedule) → catalog type
BROADCASTER_TYPES: Final[Mapping[str, str]] = {
    "Disney+": "disney",
    "ESPN": "espn",
    "ESPN 4": "espn4",
    "CazéTV": "cazetv",
    "RedeTV": "redetv",
}


def quality_labels(entries: Sequence[CatalogEntry]) -> List[str]:
    """
    Label each entry by quality, numbering repeated qualities.

    The ordinal is the entry's position among entries of the same quality,
    so ``[FHD, HD, FHD]`` becomes ``["FHD", "HD", "FHD 2"]``.
    """
    seen: Counter = Counter()
    labels = []
    for entry in entries:
        seen[entry.quality] += 1
        n = seen[entry.quality]
        labels.append(entry.quality if n == 1 else f"{entry.quality} {n}")
    return labels


def _index_catalog(catalog: Iterable[CatalogEntry]) -> Dict[str, List[CatalogEntry]]:
    by_type: Dict[str, List[CatalogEntry]] = {}
    for entry in catalog:
        by_type.setdefault(entry.type, []).append(entry)
    return by_type


def resolve(
    events: Sequence[Event],
    catalog: Sequence[CatalogEntry],
    daily_feed_url: Optional[str] = "",
    logo_url: str = DEFAULT_LOGO_URL,
    broadcaster_types: Optional[Mapping[str, str]] = None,
) -> List[ChannelEntry]:
    """
    Build the ordered channel list for one run.

    Broadcasters missing from ``broadcaster_types`` (defaults to
    :data:`BROADCASTER_TYPES`) are skipped, as are types with no catalog
    sources.
    """
    table = BROADCASTER_TYPES if broadcaster_types is None else broadcaster_types
    by_type = _index_catalog(catalog)

    channels: List[ChannelEntry] = []
    if daily_feed_url:
        channels.append(ChannelEntry(DAILY_FEED_NAME, daily_feed_url, logo_url))

    for event in events:
        for broadcaster in event.broadcasters:
            source_type = table.get(broadcaster)
            if not source_type:
                continue

            options = by_type.get(source_type, [])
            for entry, label in zip(options, quality_labels(options)):
                name = (
                    f"{event.team_home} x {event.team_away} - {event.kickoff}"
                    f" - {label} ({source_type.upper()})"
                )
                channels.append(ChannelEntry(name, entry.url, logo_url))

    return channels
