# ==============================================================================
# panel_store.py  –  SQLAlchemy gateway to the IPTV panel tables
# ------------------------------------------------------------------------------
# Responsibilities:
#   • Table models for streams_categories, streams, streams_servers, bouquets
#   • Gateway primitives used by the reconciler (`PanelSession`)
#   • Scoped transactions: commit on success, rollback on any error,
#     connection always returned to the pool (`PanelStore.run_in_transaction`)
#
# Encoded columns are converted in `kickoffsync.db.codecs`; callers only see
# ints, lists and sets.
# ==============================================================================

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Set, TypeVar

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kickoffsync.db.codecs import (
    encode_category_ref,
    encode_id_list,
    encode_source_list,
    parse_id_list,
)
from kickoffsync.sync.types import Group
from kickoffsync.utils.errors import MembershipParseError, StorageError
from kickoffsync.utils.logging_utils import setup_logger

LOGGER = setup_logger("panel_store")

T = TypeVar("T")

STREAM_TYPE_LIVE = 1
CATEGORY_TYPE_LIVE = "live"
PROBESIZE_ON_DEMAND = 542000

# ------------------------------------------------------------------------------
# Table Models
# ------------------------------------------------------------------------------

METADATA = MetaData()

CATEGORIES = Table(
    "streams_categories",
    METADATA,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("category_type", String(255)),
    Column("category_name", String(255)),
    Column("cat_order", Integer),
)

STREAMS = Table(
    "streams",
    METADATA,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", Integer),
    Column("category_id", String(255)),
    Column("stream_display_name", Text),
    Column("stream_source", Text),
    Column("stream_icon", Text),
    Column("read_native", Boolean),
    Column("order", Integer),
    Column("added", Integer),
    Column("gen_timestamps", Boolean),
    Column("direct_source", Boolean),
    Column("allow_record", Boolean),
    Column("probesize_ondemand", Integer),
)

STREAMS_SERVERS = Table(
    "streams_servers",
    METADATA,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("stream_id", Integer),
    Column("server_id", Integer),
    Column("on_demand", Boolean),
)

BOUQUETS = Table(
    "bouquets",
    METADATA,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("bouquet_name", Text),
    Column("bouquet_channels", Text),
)


# ------------------------------------------------------------------------------
# Gateway primitives (bound to one transaction)
# ------------------------------------------------------------------------------


class PanelSession:
    """Read/write primitives over a session that already has a transaction open."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- categories ------------------------------------------------------------

    def find_category_id_by_name(self, name: str) -> Optional[int]:
        row = self.session.execute(
            select(CATEGORIES.c.id)
            .where(CATEGORIES.c.category_name == name)
            .order_by(CATEGORIES.c.id)
        ).first()
        return row.id if row else None

    def create_category(self, name: str, order: int) -> int:
        result = self.session.execute(
            insert(CATEGORIES).values(
                category_type=CATEGORY_TYPE_LIVE,
                category_name=name,
                cat_order=order,
            )
        )
        return result.inserted_primary_key[0]

    # -- streams ---------------------------------------------------------------

    def list_channel_ids_by_category(self, category_id: int) -> Set[int]:
        rows = self.session.execute(
            select(STREAMS.c.id).where(
                STREAMS.c.category_id == encode_category_ref(category_id)
            )
        )
        return {row.id for row in rows}

    def delete_channels(self, ids: Iterable[int]) -> None:
        """Delete streams and their server links."""
        ids = sorted(ids)
        if not ids:
            return
        self.session.execute(
            delete(STREAMS_SERVERS).where(STREAMS_SERVERS.c.stream_id.in_(ids))
        )
        self.session.execute(delete(STREAMS).where(STREAMS.c.id.in_(ids)))

    def insert_channel(
        self,
        category_id: int,
        display_name: str,
        url: str,
        logo_url: str,
        order: int,
    ) -> int:
        result = self.session.execute(
            insert(STREAMS).values(
                {
                    "type": STREAM_TYPE_LIVE,
                    "category_id": encode_category_ref(category_id),
                    "stream_display_name": display_name,
                    "stream_source": encode_source_list(url),
                    "stream_icon": logo_url,
                    "read_native": False,
                    "order": order,
                    "added": int(time.time()),
                    "gen_timestamps": False,
                    "direct_source": False,
                    "allow_record": False,
                    "probesize_ondemand": PROBESIZE_ON_DEMAND,
                }
            )
        )
        return result.inserted_primary_key[0]

    def link_channel_to_server(self, channel_id: int, server_id: int) -> None:
        self.session.execute(
            insert(STREAMS_SERVERS).values(
                stream_id=channel_id, server_id=server_id, on_demand=True
            )
        )

    # -- bouquets --------------------------------------------------------------

    def list_groups(self) -> List[Group]:
        rows = self.session.execute(
            select(BOUQUETS.c.id, BOUQUETS.c.bouquet_name, BOUQUETS.c.bouquet_channels)
            .order_by(BOUQUETS.c.id)
        )
        groups = []
        for row in rows:
            try:
                members = tuple(parse_id_list(row.bouquet_channels))
            except MembershipParseError as exc:
                groups.append(Group(row.id, row.bouquet_name or "", (), str(exc)))
                continue
            groups.append(Group(row.id, row.bouquet_name or "", members))
        return groups

    def update_group_members(self, group_id: int, member_ids: Iterable[int]) -> None:
        self.session.execute(
            update(BOUQUETS)
            .where(BOUQUETS.c.id == group_id)
            .values(bouquet_channels=encode_id_list(member_ids))
        )


# ------------------------------------------------------------------------------
# Store (owns the engine)
# ------------------------------------------------------------------------------


class PanelStore:
    """Entry point to the panel database."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine)

    def run_in_transaction(self, fn: Callable[[PanelSession], T]) -> T:
        """
        Run ``fn`` inside one transaction.

        Commits when ``fn`` returns, rolls back when it raises. Database
        errors surface as :class:`StorageError`; anything else propagates
        unchanged after the rollback.
        """
        try:
            with self._sessions() as session, session.begin():
                return fn(PanelSession(session))
        except SQLAlchemyError as exc:
            LOGGER.error("Transaction rolled back – %s", exc)
            raise StorageError(str(exc)) from exc

    def close(self) -> None:
        """Dispose of the connection pool."""
        self.engine.dispose()
