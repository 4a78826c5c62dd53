"""SQLite-backed festival repository.

Festivals are stored whole as JSON documents (camelCase wire form) keyed by
their deterministic id, so saving the same festival twice replaces it.  A
few scalar columns are kept beside the document for listing order only.
Uses ``aiosqlite`` with one connection per operation.
"""

from __future__ import annotations

import json
from pathlib import Path

import aiosqlite
import structlog

from festival_scout.interfaces.repository import IFestivalRepository
from festival_scout.models.festival import Festival
from festival_scout.utils.errors import RepositoryError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/festival_scout.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS festivals (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    start_date  TEXT,
    document    TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO festivals (id, name, start_date, document)
VALUES (?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET name       = excluded.name,
              start_date = excluded.start_date,
              document   = excluded.document,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""


class SQLiteFestivalRepository(IFestivalRepository):
    """Durable festival store in a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the festivals table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Could not initialise festival store: {exc}", "sqlite") from exc
        logger.info("festival_db_initialized", path=str(self._db_path))

    async def get_festival_by_id(self, festival_id: str) -> Festival | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "SELECT document FROM festivals WHERE id = ?", (festival_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Festival lookup failed: {exc}", "sqlite") from exc
        if row is None:
            return None
        return Festival.model_validate(json.loads(row[0]))

    async def get_all_festivals(self) -> list[Festival]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "SELECT document FROM festivals ORDER BY start_date IS NULL, start_date, name"
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Festival listing failed: {exc}", "sqlite") from exc
        return [Festival.model_validate(json.loads(r[0])) for r in rows]

    async def save_festival(self, festival: Festival) -> Festival:
        if not festival.id:
            raise RepositoryError("Festival must have an id before it is stored", "sqlite")
        document = festival.model_dump_json(by_alias=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_UPSERT_SQL, (festival.id, festival.name, festival.start_date, document))
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Festival save failed: {exc}", "sqlite") from exc
        logger.info("festival_saved", festival_id=festival.id, acts=len(festival.lineup))
        return festival

    async def delete_festival(self, festival_id: str) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute("DELETE FROM festivals WHERE id = ?", (festival_id,))
                await db.commit()
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Festival delete failed: {exc}", "sqlite") from exc
        logger.info("festival_deleted", festival_id=festival_id, deleted=deleted)
        return deleted
