# ==============================================================================
# source_catalog.py  –  Load the static stream source catalog
#
# File format (JSON):
#   [
#     {"type": "espn", "quality": "FHD", "url": "http://…"},
#     …
#   ]
# ==============================================================================

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

from kickoffsync.sync.types import CatalogEntry
from kickoffsync.utils.errors import CatalogLoadError
from kickoffsync.utils.logging_utils import setup_logger

LOGGER = setup_logger("source_catalog")

_FIELDS = ("type", "quality", "url")


def _to_entry(index: int, item: Any) -> CatalogEntry:
    if not isinstance(item, dict):
        raise CatalogLoadError(f"Catalog entry #{index} is not an object")

    missing = [f for f in _FIELDS if not isinstance(item.get(f), str) or not item[f]]
    if missing:
        raise CatalogLoadError(
            f"Catalog entry #{index} is missing {', '.join(missing)}"
        )
    return CatalogEntry(type=item["type"], quality=item["quality"], url=item["url"])


def load_catalog(path: Union[str, Path]) -> List[CatalogEntry]:
    """
    Read the catalog file.

    Raises
    ------
    CatalogLoadError
        If the file is missing, unreadable, not JSON, or holds a bad entry.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Cannot read catalog {path}: {exc}") from exc

    try:
        decoded = json.loads(raw)
    except ValueError as exc:
        raise CatalogLoadError(f"Catalog {path} is not valid JSON: {exc}") from exc

    if not isinstance(decoded, list):
        raise CatalogLoadError(f"Catalog {path} must contain a JSON array")

    entries = [_to_entry(i, item) for i, item in enumerate(decoded)]
    LOGGER.info("Loaded %d catalog source(s) from %s", len(entries), path)
    return entries
