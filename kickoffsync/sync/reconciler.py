# ==============================================================================
# reconciler.py  –  Replace the destination category and patch bouquets
# ------------------------------------------------------------------------------
# Execution flow (single transaction, see `sync_category`):
#   1. Look up the destination category and the ids currently in it
#   2. Read every bouquet
#   3. Compute the write plan (`reconcile`)
#   4. Delete the old channels, create the category if needed
#   5. Insert the new channels in order and link each to the delivery server
#   6. Rewrite bouquet memberships: (members − old ids) + new ids
#
# The store passed in is any object exposing the gateway primitives of
# `kickoffsync.db.panel_store.PanelSession`.
# ==============================================================================

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple

from kickoffsync.sync.types import (
    ChannelEntry,
    Group,
    NewChannel,
    SyncReport,
    WritePlan,
)
from kickoffsync.utils.logging_utils import setup_logger

LOGGER = setup_logger("reconciler")

CATEGORY_ORDER = 1


# ------------------------------------------------------------------------------
# Planning
# ------------------------------------------------------------------------------


def _retained_members(group: Group, prior_ids: AbstractSet[int]) -> Tuple[int, ...]:
    """Members of ``group`` that survive the delete."""
    if group.membership_error is not None:
        # Unreadable membership is treated as empty and rewritten
        LOGGER.warning(
            "Bouquet %s (%s) has an unreadable channel list (%s) – treating as empty",
            group.id,
            group.name,
            group.membership_error,
        )
        return ()
    return tuple(m for m in group.member_channel_ids if m not in prior_ids)


def reconcile(
    new_channels: Sequence[ChannelEntry],
    prior_channel_ids: Iterable[int],
    groups: Sequence[Group],
    category_name: str = "",
    category_id: Optional[int] = None,
) -> WritePlan:
    """
    Compute the write plan for one run.

    Every prior channel is deleted, every new channel inserted with a 1-based
    ``order``, and every group gets an entry in ``group_updates``.
    """
    prior = frozenset(prior_channel_ids)

    inserts = [
        NewChannel(ch.display_name, ch.url, ch.logo_url, order)
        for order, ch in enumerate(new_channels, start=1)
    ]

    group_updates = {}
    current = {}
    for group in groups:
        group_updates[group.id] = _retained_members(group, prior)
        current[group.id] = (
            None if group.membership_error is not None else group.member_channel_ids
        )

    return WritePlan(
        category_name=category_name,
        category_id=category_id,
        delete_channel_ids=prior,
        insert_channels=inserts,
        group_updates=group_updates,
        current_members=current,
    )


# ------------------------------------------------------------------------------
# Execution
# ------------------------------------------------------------------------------


def execute_plan(store, plan: WritePlan, server_id: int) -> SyncReport:
    """Apply ``plan`` through ``store``. Must run inside a transaction."""
    report = SyncReport()

    if plan.delete_channel_ids:
        store.delete_channels(plan.delete_channel_ids)
        LOGGER.info("Deleted %d old channel(s)", len(plan.delete_channel_ids))
    report.deleted = len(plan.delete_channel_ids)

    category_id = plan.category_id
    if category_id is None:
        category_id = store.create_category(plan.category_name, CATEGORY_ORDER)
        LOGGER.info("Created category '%s' (id %s)", plan.category_name, category_id)
    report.category_id = category_id

    new_ids: List[int] = []
    for channel in plan.insert_channels:
        channel_id = store.insert_channel(
            category_id,
            channel.display_name,
            channel.url,
            channel.logo_url,
            channel.order,
        )
        store.link_channel_to_server(channel_id, server_id)
        new_ids.append(channel_id)
    report.inserted_ids = new_ids
    LOGGER.info("Inserted %d channel(s)", len(new_ids))

    for group_id in plan.group_updates:
        if plan.is_unchanged(group_id, new_ids):
            report.groups_unchanged += 1
            continue
        store.update_group_members(group_id, plan.members_for(group_id, new_ids))
        report.groups_rewritten += 1

    LOGGER.info(
        "Bouquets: %d rewritten, %d unchanged",
        report.groups_rewritten,
        report.groups_unchanged,
    )
    return report


def sync_category(
    store, channels: Sequence[ChannelEntry], category_name: str, server_id: int
) -> SyncReport:
    """Read current state, plan and apply, all in one transaction."""

    def _work(tx) -> SyncReport:
        category_id = tx.find_category_id_by_name(category_name)
        prior = (
            tx.list_channel_ids_by_category(category_id)
            if category_id is not None
            else set()
        )
        groups = tx.list_groups()
        LOGGER.info(
            "Category '%s': %d existing channel(s), %d bouquet(s)",
            category_name,
            len(prior),
            len(groups),
        )

        plan = reconcile(channels, prior, groups, category_name, category_id)
        return execute_plan(tx, plan, server_id)

    return store.run_in_transaction(_work)
