# ==============================================================================
# types.py  –  Domain records shared by resolver, reconciler and gateway
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """One candidate stream source for a broadcaster type."""

    type: str
    quality: str
    url: str


@dataclass(frozen=True)
class Event:
    """A match on today's schedule."""

    team_home: str
    team_away: str
    kickoff: str
    broadcasters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChannelEntry:
    """A resolved channel, ready to be persisted."""

    display_name: str
    url: str
    logo_url: str


@dataclass(frozen=True)
class Group:
    """
    A bouquet as read from storage.

    ``membership_error`` is set when the stored member list could not be
    decoded; ``member_channel_ids`` is then empty.
    """

    id: int
    name: str
    member_channel_ids: Tuple[int, ...] = ()
    membership_error: Optional[str] = None


@dataclass(frozen=True)
class NewChannel:
    """A channel row to insert into the destination category."""

    display_name: str
    url: str
    logo_url: str
    order: int


@dataclass
class WritePlan:
    """
    Everything a run will change.

    ``group_updates`` holds, per group, the members that survive the delete;
    the ids of freshly inserted channels are appended at execution time
    (see :meth:`members_for`).
    """

    category_name: str
    category_id: Optional[int]
    delete_channel_ids: FrozenSet[int]
    insert_channels: List[NewChannel]
    group_updates: Dict[int, Tuple[int, ...]]
    current_members: Dict[int, Optional[Tuple[int, ...]]] = field(default_factory=dict)

    def members_for(self, group_id: int, new_channel_ids: List[int]) -> List[int]:
        """Retained members followed by new ids, first occurrence wins."""
        return list(dict.fromkeys([*self.group_updates[group_id], *new_channel_ids]))

    def is_unchanged(self, group_id: int, new_channel_ids: List[int]) -> bool:
        """True when the stored membership already equals the computed one."""
        current = self.current_members.get(group_id)
        if current is None:
            return False
        return list(current) == self.members_for(group_id, new_channel_ids)


@dataclass
class SyncReport:
    """Outcome of one sync pass."""

    category_id: Optional[int] = None
    deleted: int = 0
    inserted_ids: List[int] = field(default_factory=list)
    groups_rewritten: int = 0
    groups_unchanged: int = 0
    skipped: bool = False
