"""SQLite-backed artist repository.

Artists are stored as JSON documents beside a ``normalized_name`` column.
Name search tries the exact normalized key first, then falls back to a
rapidfuzz token-sort match over stored names so word-order variants
("Cox Carl") still find the record.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import aiosqlite
import structlog

from festival_scout.interfaces.repository import IArtistRepository
from festival_scout.models.artist import Artist
from festival_scout.utils.errors import RepositoryError
from festival_scout.utils.text_normalizer import fuzzy_match, normalize_name

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/festival_scout.db")
_FUZZY_THRESHOLD = 0.92
_SOURCE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS artists (
    id               TEXT PRIMARY KEY,
    name             TEXT NOT NULL,
    normalized_name  TEXT NOT NULL,
    document         TEXT NOT NULL,
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_artists_normalized_name ON artists(normalized_name);",
]

_UPSERT_SQL = """\
INSERT INTO artists (id, name, normalized_name, document)
VALUES (?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET name            = excluded.name,
              normalized_name = excluded.normalized_name,
              document        = excluded.document,
              updated_at      = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""


class SQLiteArtistRepository(IArtistRepository):
    """Durable artist store in a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the artists table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Could not initialise artist store: {exc}", "sqlite") from exc
        logger.info("artist_db_initialized", path=str(self._db_path))

    async def get_artist_by_id(self, artist_id: str) -> Artist | None:
        rows = await self._fetch("SELECT document FROM artists WHERE id = ?", (artist_id,))
        return self._to_artist(rows[0]) if rows else None

    async def search_artist_by_name(self, name: str) -> Artist | None:
        key = normalize_name(name)
        if not key:
            return None
        rows = await self._fetch(
            "SELECT document FROM artists WHERE normalized_name = ? ORDER BY updated_at DESC LIMIT 1",
            (key,),
        )
        if rows:
            return self._to_artist(rows[0])

        name_rows = await self._fetch("SELECT id, name FROM artists", ())
        if not name_rows:
            return None
        ids_by_name = {row[1]: row[0] for row in name_rows}
        match = fuzzy_match(name, list(ids_by_name), threshold=_FUZZY_THRESHOLD)
        if match is None:
            return None
        logger.debug("artist_fuzzy_match", query=name, matched=match[0], score=match[1])
        return await self.get_artist_by_id(ids_by_name[match[0]])

    async def get_artist_by_mapping_id(self, source: str, external_id: str) -> Artist | None:
        if not external_id or not _SOURCE_NAME_RE.match(source):
            return None
        rows = await self._fetch(
            "SELECT document FROM artists WHERE json_extract(document, ?) = ? LIMIT 1",
            (f"$.mappingIds.{source}", external_id),
        )
        return self._to_artist(rows[0]) if rows else None

    async def get_all_artists(self) -> list[Artist]:
        rows = await self._fetch("SELECT document FROM artists ORDER BY normalized_name", ())
        return [self._to_artist(r) for r in rows]

    async def save_artist(self, artist: Artist) -> Artist:
        if not artist.id:
            raise RepositoryError("Artist must have an id before it is stored", "sqlite")
        document = artist.model_dump_json(by_alias=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(
                    _UPSERT_SQL, (artist.id, artist.name, normalize_name(artist.name), document)
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Artist save failed: {exc}", "sqlite") from exc
        logger.info("artist_saved", artist_id=artist.id, name=artist.name)
        return artist

    async def delete_artist(self, artist_id: str) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute("DELETE FROM artists WHERE id = ?", (artist_id,))
                await db.commit()
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Artist delete failed: {exc}", "sqlite") from exc
        logger.info("artist_deleted", artist_id=artist_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch(self, sql: str, params: tuple) -> list[tuple]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql, params)
                return list(await cursor.fetchall())
        except aiosqlite.Error as exc:
            raise RepositoryError(f"Artist query failed: {exc}", "sqlite") from exc

    @staticmethod
    def _to_artist(row: tuple) -> Artist:
        return Artist.model_validate(json.loads(row[0]))
