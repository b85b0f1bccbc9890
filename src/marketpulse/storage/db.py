"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Sequences for auto-increment IDs
CREATE SEQUENCE IF NOT EXISTS snapshot_seq START 1;
CREATE SEQUENCE IF NOT EXISTS signal_seq START 1;

-- Tracked market identity, (source, external_id) is the natural key
CREATE TABLE IF NOT EXISTS markets (
    id              VARCHAR PRIMARY KEY,
    source          VARCHAR NOT NULL,
    external_id     VARCHAR NOT NULL,
    title           VARCHAR,
    url             VARCHAR,
    category        VARCHAR,
    status          VARCHAR NOT NULL,
    created_at      BIGINT NOT NULL,
    updated_at      BIGINT NOT NULL,
    UNIQUE (source, external_id)
);

-- Append-only observations, duplicate (market_id, ts) rows are allowed
CREATE TABLE IF NOT EXISTS market_snapshots (
    id              BIGINT PRIMARY KEY DEFAULT nextval('snapshot_seq'),
    market_id       VARCHAR NOT NULL,
    ts              BIGINT NOT NULL,
    probability     DOUBLE,
    price_yes       DOUBLE,
    price_no        DOUBLE,
    volume          DOUBLE,
    liquidity       DOUBLE,
    spread          DOUBLE,
    raw             JSON
);

CREATE INDEX IF NOT EXISTS idx_market_snapshots_market_ts ON market_snapshots (market_id, ts);

-- Scoring results, immutable once written
CREATE TABLE IF NOT EXISTS market_signals (
    id              BIGINT PRIMARY KEY DEFAULT nextval('signal_seq'),
    market_id       VARCHAR NOT NULL,
    ts              BIGINT NOT NULL,
    score           INTEGER NOT NULL,
    confidence      VARCHAR NOT NULL,
    explanation     VARCHAR NOT NULL,
    features        JSON
);

CREATE INDEX IF NOT EXISTS idx_market_signals_market_ts ON market_signals (market_id, ts);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables, sequences and indexes if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
