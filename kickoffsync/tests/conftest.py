# ==============================================================================
# conftest.py  –  Shared fixtures
#   A throw-away SQLite panel database built from the gateway's table models.
# ==============================================================================

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, insert, select

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kickoffsync.db.panel_store import (
    BOUQUETS,
    CATEGORIES,
    METADATA,
    STREAMS,
    STREAMS_SERVERS,
    PanelStore,
)


# ------------------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------------------
@pytest.fixture
def panel_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'panel.db'}")
    METADATA.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(panel_engine):
    return PanelStore(panel_engine)


@pytest.fixture
def seeded(panel_engine):
    """
    Category "Jogos" (2 streams) + an unrelated category (1 stream) and
    three bouquets, one of which holds unreadable JSON.
    """
    with panel_engine.begin() as conn:
        cat_id = conn.execute(
            insert(CATEGORIES).values(
                category_type="live", category_name="Jogos", cat_order=1
            )
        ).inserted_primary_key[0]
        other_cat = conn.execute(
            insert(CATEGORIES).values(
                category_type="live", category_name="News", cat_order=2
            )
        ).inserted_primary_key[0]

        def _stream(category, name):
            sid = conn.execute(
                insert(STREAMS).values(
                    type=1,
                    category_id=f"[{category}]",
                    stream_display_name=name,
                    stream_source='["http://old"]',
                    order=1,
                )
            ).inserted_primary_key[0]
            conn.execute(
                insert(STREAMS_SERVERS).values(stream_id=sid, server_id=1, on_demand=True)
            )
            return sid

        old_a = _stream(cat_id, "old A")
        old_b = _stream(cat_id, "old B")
        keep = _stream(other_cat, "News 24")

        conn.execute(
            insert(BOUQUETS),
            [
                {"bouquet_name": "Full", "bouquet_channels": f"[{keep}, {old_a}]"},
                {"bouquet_name": "Sports", "bouquet_channels": f"[{old_b}]"},
                {"bouquet_name": "Broken", "bouquet_channels": "{not json"},
            ],
        )

    return {"category_id": cat_id, "old": {old_a, old_b}, "keep": keep}


@pytest.fixture
def rows(panel_engine):
    """Return every row of a table as dicts."""

    def _rows(table, *order_by):
        stmt = select(table).order_by(*(order_by or table.primary_key.columns))
        with panel_engine.connect() as conn:
            return [dict(r._mapping) for r in conn.execute(stmt)]

    return _rows
