# ==============================================================================
# test_reconciler.py  –  Write plan computation and execution
#   Execution is checked against an in-memory recording store.
# ==============================================================================

import pytest

from kickoffsync.sync.reconciler import CATEGORY_ORDER, execute_plan, reconcile
from kickoffsync.sync.types import ChannelEntry, Group, NewChannel

LOGO = "http://logo.png"


def _channels(n):
    return [ChannelEntry(f"Game {i}", f"http://s/{i}", LOGO) for i in range(1, n + 1)]


# ------------------------------------------------------------------------------
# Recording store
# ------------------------------------------------------------------------------
class RecordingStore:
    def __init__(self, first_id=21):
        self.calls = []
        self.next_id = first_id
        self.groups = {}

    def delete_channels(self, ids):
        self.calls.append(("delete", sorted(ids)))

    def create_category(self, name, order):
        self.calls.append(("create_category", name, order))
        return 7

    def insert_channel(self, category_id, display_name, url, logo_url, order):
        channel_id = self.next_id
        self.next_id += 1
        self.calls.append(("insert", category_id, display_name, order))
        return channel_id

    def link_channel_to_server(self, channel_id, server_id):
        self.calls.append(("link", channel_id, server_id))

    def update_group_members(self, group_id, member_ids):
        self.groups[group_id] = list(member_ids)


# ------------------------------------------------------------------------------
# reconcile
# ------------------------------------------------------------------------------
def test_plan_deletes_every_prior_channel():
    plan = reconcile(_channels(1), {3, 4}, [])
    assert plan.delete_channel_ids == frozenset({3, 4})


def test_plan_orders_inserts_from_one():
    plan = reconcile(_channels(3), set(), [])
    assert plan.insert_channels == [
        NewChannel("Game 1", "http://s/1", LOGO, 1),
        NewChannel("Game 2", "http://s/2", LOGO, 2),
        NewChannel("Game 3", "http://s/3", LOGO, 3),
    ]


def test_plan_preserves_unrelated_members():
    group = Group(1, "Full", (5, 9))
    plan = reconcile(_channels(2), {9}, [group])

    assert plan.group_updates == {1: (5,)}
    assert plan.members_for(1, [21, 22]) == [5, 21, 22]


def test_plan_deduplicates_members():
    group = Group(1, "Full", (5, 21))
    plan = reconcile(_channels(2), set(), [group])
    assert plan.members_for(1, [21, 22]) == [5, 21, 22]


def test_plan_records_every_group():
    groups = [Group(1, "A", (1,)), Group(2, "B", ()), Group(3, "C", (2, 3))]
    plan = reconcile([], {2}, groups)
    assert plan.group_updates == {1: (1,), 2: (), 3: (3,)}


def test_unreadable_membership_is_treated_as_empty():
    group = Group(4, "Broken", (), membership_error="not JSON")
    plan = reconcile(_channels(1), {9}, [group])

    assert plan.group_updates[4] == ()
    assert plan.members_for(4, [21]) == [21]
    assert plan.is_unchanged(4, []) is False


@pytest.mark.parametrize(
    "members,prior,new_ids,unchanged",
    [
        ((5,), set(), [], True),
        ((5, 21), {21}, [21], True),
        ((5,), {9}, [21], False),
        ((5, 9), {9}, [], False),
        ((21, 5), {21}, [21], False),
    ],
)
def test_is_unchanged(members, prior, new_ids, unchanged):
    plan = reconcile([], prior, [Group(1, "A", members)])
    assert plan.is_unchanged(1, new_ids) is unchanged


# ------------------------------------------------------------------------------
# execute_plan
# ------------------------------------------------------------------------------
def test_execute_creates_missing_category_and_links_channels():
    store = RecordingStore()
    plan = reconcile(_channels(2), set(), [], category_name="Jogos", category_id=None)

    report = execute_plan(store, plan, server_id=3)

    assert store.calls == [
        ("create_category", "Jogos", CATEGORY_ORDER),
        ("insert", 7, "Game 1", 1),
        ("link", 21, 3),
        ("insert", 7, "Game 2", 2),
        ("link", 22, 3),
    ]
    assert report.category_id == 7
    assert report.inserted_ids == [21, 22]
    assert report.deleted == 0


def test_execute_reuses_category_and_deletes_first():
    store = RecordingStore()
    plan = reconcile(_channels(1), {9, 8}, [], category_name="Jogos", category_id=2)

    report = execute_plan(store, plan, server_id=1)

    assert store.calls[0] == ("delete", [8, 9])
    assert ("insert", 2, "Game 1", 1) in store.calls
    assert not any(c[0] == "create_category" for c in store.calls)
    assert report.deleted == 2


def test_execute_rewrites_groups():
    store = RecordingStore()
    groups = [
        Group(1, "Full", (5, 9)),
        Group(2, "Untouched", ()),
        Group(3, "Broken", (), membership_error="bad"),
    ]
    plan = reconcile(_channels(2), {9}, groups, category_name="Jogos", category_id=2)

    report = execute_plan(store, plan, server_id=1)

    assert store.groups == {1: [5, 21, 22], 2: [21, 22], 3: [21, 22]}
    assert report.groups_rewritten == 3
    assert report.groups_unchanged == 0


def test_execute_skips_unchanged_groups():
    store = RecordingStore()
    groups = [Group(1, "Other", (5,)), Group(2, "Stale", (5, 9))]
    plan = reconcile([], {9}, groups, category_name="Jogos", category_id=2)

    report = execute_plan(store, plan, server_id=1)

    assert store.groups == {2: [5]}
    assert report.groups_unchanged == 1
    assert report.groups_rewritten == 1
