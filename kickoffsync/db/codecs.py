# ==============================================================================
# codecs.py  –  String-encoded columns of the panel schema
#
#   streams.category_id        "[7]"                 bracketed id list
#   streams.stream_source      '["http://…"]'        JSON list of URLs
#   bouquets.bouquet_channels  "[1010, 1515]"        JSON list of stream ids
# ==============================================================================

from __future__ import annotations

import json
from typing import Iterable, List, Optional

from kickoffsync.utils.errors import MembershipParseError


def parse_id_list(raw: Optional[str]) -> List[int]:
    """
    Decode a JSON id list.

    ``None`` and blank strings decode to an empty list. Anything else that is
    not a JSON array of integers raises :class:`MembershipParseError`.
    Numeric strings (``"12"``) are accepted, as some panels store them.
    """
    if raw is None or not str(raw).strip():
        return []

    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MembershipParseError(f"not JSON: {raw!r}") from exc

    if not isinstance(decoded, list):
        raise MembershipParseError(f"not a list: {raw!r}")

    ids: List[int] = []
    for item in decoded:
        if isinstance(item, bool):
            raise MembershipParseError(f"non-integer id {item!r}")
        if isinstance(item, int):
            ids.append(item)
        elif isinstance(item, str) and item.strip().isascii() and item.strip().isdecimal():
            ids.append(int(item))
        else:
            raise MembershipParseError(f"non-integer id {item!r}")
    return ids


def encode_id_list(ids: Iterable[int]) -> str:
    return json.dumps([int(i) for i in ids], separators=(",", ":"))


def encode_category_ref(category_id: int) -> str:
    return f"[{int(category_id)}]"


def encode_source_list(url: str) -> str:
    return json.dumps([url])
