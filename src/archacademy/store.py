"""SQLite persistence for lessons, building progress and notebooks."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from .codec import DecodeError
from .models import Science
from .notebook import BuildingNotebook, NotebookEntry, NotebookEntryType
from .progress import BuildingProgressRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

LESSON_MARKER = "lesson"
STATION_MARKER = "station"
VOCABULARY_MARKER = "vocabulary"


@dataclass(frozen=True)
class LessonRow:
    """Raw stored lesson row; sections stay encoded."""

    building_name: str
    title: str
    sections_json: bytes
    last_modified: str
    version: int


class AcademyStore:
    """Database access layer for one local player session."""

    def __init__(self, db_path: Path | str) -> None:
        """Open the database and bring its schema up to date."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )
            logger.debug("Applied schema migration %d", version)

    def _migrate_to_v1(self) -> None:
        """Create lesson, progress and notebook tables."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS lesson_records (
                    building_name TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    sections_json BLOB NOT NULL,
                    last_modified TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 1
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS building_progress (
                    player_name TEXT NOT NULL,
                    building_id INTEGER NOT NULL,
                    science_badges_raw TEXT NOT NULL DEFAULT '[]',
                    sketching_phases_raw TEXT NOT NULL DEFAULT '[]',
                    sketch_completed INTEGER NOT NULL DEFAULT 0,
                    quiz_passed INTEGER NOT NULL DEFAULT 0,
                    lesson_read INTEGER NOT NULL DEFAULT 0,
                    lesson_section_index INTEGER NOT NULL DEFAULT 0,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    challenge_progress REAL NOT NULL DEFAULT 0,
                    PRIMARY KEY (player_name, building_id)
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS notebooks (
                    player_name TEXT NOT NULL,
                    building_id INTEGER NOT NULL,
                    building_name TEXT NOT NULL,
                    last_modified TEXT NOT NULL,
                    PRIMARY KEY (player_name, building_id)
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS notebook_entries (
                    id TEXT PRIMARY KEY,
                    player_name TEXT NOT NULL,
                    building_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    entry_type TEXT NOT NULL,
                    science TEXT,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    date_added TEXT NOT NULL,
                    user_annotation TEXT
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS notebook_markers (
                    player_name TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    marker_key TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (player_name, kind, marker_key)
                )
                """)

    # -- lesson records ------------------------------------------------------

    def count_lesson_records(self) -> int:
        """Return the number of stored lessons."""
        return int(self._conn.execute("SELECT COUNT(*) FROM lesson_records").fetchone()[0])

    def insert_lesson_record(
        self,
        building_name: str,
        title: str,
        sections_json: bytes,
        last_modified: str | None = None,
        version: int = 1,
    ) -> bool:
        """Stage one lesson row; an existing row for the building is kept.

        Nothing is durable until `commit` (or an enclosing transaction) runs.
        Returns whether a row was inserted.
        """
        cursor = self._conn.execute(
            """
            INSERT OR IGNORE INTO lesson_records (building_name, title, sections_json, last_modified, version)
            VALUES (?, ?, ?, ?, ?)
            """,
            (building_name, title, sections_json, last_modified or datetime.now(UTC).isoformat(), version),
        )
        return cursor.rowcount > 0

    def get_lesson_record(self, building_name: str) -> LessonRow | None:
        """Fetch one stored lesson by exact building name."""
        row = self._conn.execute(
            """
            SELECT building_name, title, sections_json, last_modified, version
            FROM lesson_records
            WHERE building_name = ?
            LIMIT 1
            """,
            (building_name,),
        ).fetchone()
        if row is None:
            return None
        return _lesson_row(row)

    def list_lesson_records(self, limit: int | None = None) -> list[LessonRow]:
        """Return stored lessons in insertion order, optionally only the first `limit`."""
        query = "SELECT building_name, title, sections_json, last_modified, version FROM lesson_records ORDER BY rowid"
        params: tuple[int, ...] = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        return [_lesson_row(row) for row in self._conn.execute(query, params).fetchall()]

    def update_lesson_sections(self, building_name: str, sections_json: bytes) -> bool:
        """Replace a stored lesson's sections and bump its version."""
        with self._conn:
            cursor = self._conn.execute(
                """
                UPDATE lesson_records
                SET sections_json = ?, last_modified = ?, version = version + 1
                WHERE building_name = ?
                """,
                (sections_json, datetime.now(UTC).isoformat(), building_name),
            )
        return cursor.rowcount > 0

    def delete_lesson_record(self, building_name: str) -> bool:
        with self._conn:
            cursor = self._conn.execute("DELETE FROM lesson_records WHERE building_name = ?", (building_name,))
        return cursor.rowcount > 0

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    # -- building progress ---------------------------------------------------

    def get_progress_record(self, player_name: str, building_id: int) -> BuildingProgressRecord | None:
        """Return one player's stored progress for a building."""
        row = self._conn.execute(
            """
            SELECT *
            FROM building_progress
            WHERE player_name = ? AND building_id = ?
            """,
            (player_name, building_id),
        ).fetchone()
        if row is None:
            return None
        return _progress_record(row)

    def list_progress_records(self, player_name: str) -> dict[int, BuildingProgressRecord]:
        """Return all of a player's progress records keyed by building id."""
        rows = self._conn.execute(
            "SELECT * FROM building_progress WHERE player_name = ? ORDER BY building_id",
            (player_name,),
        ).fetchall()
        return {int(row["building_id"]): _progress_record(row) for row in rows}

    def save_progress_record(self, record: BuildingProgressRecord) -> None:
        """Insert or overwrite a progress record."""
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO building_progress (
                    player_name,
                    building_id,
                    science_badges_raw,
                    sketching_phases_raw,
                    sketch_completed,
                    quiz_passed,
                    lesson_read,
                    lesson_section_index,
                    is_completed,
                    challenge_progress
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_name, building_id) DO UPDATE SET
                    science_badges_raw = excluded.science_badges_raw,
                    sketching_phases_raw = excluded.sketching_phases_raw,
                    sketch_completed = excluded.sketch_completed,
                    quiz_passed = excluded.quiz_passed,
                    lesson_read = excluded.lesson_read,
                    lesson_section_index = excluded.lesson_section_index,
                    is_completed = excluded.is_completed,
                    challenge_progress = excluded.challenge_progress
                """,
                (
                    record.player_name,
                    record.building_id,
                    json.dumps(record.science_badges_raw),
                    json.dumps(record.sketching_phases_raw),
                    int(record.sketch_completed),
                    int(record.quiz_passed),
                    int(record.lesson_read),
                    record.lesson_section_index,
                    int(record.is_completed),
                    record.challenge_progress,
                ),
            )

    # -- notebooks -----------------------------------------------------------

    def get_notebook(self, player_name: str, building_id: int) -> BuildingNotebook | None:
        """Load a building's notebook with entries in append order."""
        row = self._conn.execute(
            "SELECT building_name, last_modified FROM notebooks WHERE player_name = ? AND building_id = ?",
            (player_name, building_id),
        ).fetchone()
        if row is None:
            return None
        entry_rows = self._conn.execute(
            """
            SELECT id, building_id, entry_type, science, title, body, date_added, user_annotation
            FROM notebook_entries
            WHERE player_name = ? AND building_id = ?
            ORDER BY position
            """,
            (player_name, building_id),
        ).fetchall()
        return BuildingNotebook(
            building_id=building_id,
            building_name=str(row["building_name"]),
            entries=[_notebook_entry(entry_row) for entry_row in entry_rows],
            last_modified=str(row["last_modified"]),
        )

    def append_notebook_entries(
        self, player_name: str, building_id: int, building_name: str, entries: list[NotebookEntry]
    ) -> None:
        """Append entries to a building's notebook, creating the notebook if needed."""
        with self._conn:
            self._insert_entries(player_name, building_id, building_name, entries)

    def file_notebook_entries(
        self,
        player_name: str,
        kind: str,
        key: str,
        batches: list[tuple[int, str, list[NotebookEntry]]],
    ) -> bool:
        """Append (building_id, building_name, entries) batches once per (kind, key).

        The marker and every batch commit together. Returns False, writing
        nothing, when the marker already exists.
        """
        with self._conn:
            cursor = self._conn.execute(
                """
                INSERT OR IGNORE INTO notebook_markers (player_name, kind, marker_key, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (player_name, kind, key, datetime.now(UTC).isoformat()),
            )
            if cursor.rowcount == 0:
                return False
            for building_id, building_name, entries in batches:
                self._insert_entries(player_name, building_id, building_name, entries)
        return True

    def _insert_entries(
        self, player_name: str, building_id: int, building_name: str, entries: list[NotebookEntry]
    ) -> None:
        """Write entries inside the caller's transaction."""
        self._conn.execute(
            """
            INSERT INTO notebooks (player_name, building_id, building_name, last_modified)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(player_name, building_id) DO UPDATE SET last_modified = excluded.last_modified
            """,
            (player_name, building_id, building_name, datetime.now(UTC).isoformat()),
        )
        start = int(
            self._conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM notebook_entries WHERE player_name = ? AND building_id = ?",
                (player_name, building_id),
            ).fetchone()[0]
        )
        self._conn.executemany(
            """
            INSERT INTO notebook_entries (
                id, player_name, building_id, position, entry_type, science, title, body, date_added, user_annotation
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    entry.id,
                    player_name,
                    building_id,
                    start + offset,
                    str(entry.entry_type),
                    str(entry.science) if entry.science is not None else None,
                    entry.title,
                    entry.body,
                    entry.date_added,
                    entry.user_annotation,
                )
                for offset, entry in enumerate(entries)
            ],
        )

    def update_entry_annotation(self, player_name: str, building_id: int, entry_id: str, text: str | None) -> bool:
        """Set the user annotation on one entry. Returns False when no such entry exists."""
        with self._conn:
            cursor = self._conn.execute(
                """
                UPDATE notebook_entries
                SET user_annotation = ?
                WHERE player_name = ? AND building_id = ? AND id = ?
                """,
                (text, player_name, building_id, entry_id),
            )
            if cursor.rowcount == 0:
                return False
            self._conn.execute(
                "UPDATE notebooks SET last_modified = ? WHERE player_name = ? AND building_id = ?",
                (datetime.now(UTC).isoformat(), player_name, building_id),
            )
        return True

    def has_marker(self, player_name: str, kind: str, key: str) -> bool:
        """Return whether content identified by (kind, key) was already added to notebooks."""
        row = self._conn.execute(
            "SELECT 1 FROM notebook_markers WHERE player_name = ? AND kind = ? AND marker_key = ?",
            (player_name, kind, key),
        ).fetchone()
        return row is not None

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass


def _lesson_row(row: sqlite3.Row) -> LessonRow:
    """Convert a lesson row, raising DecodeError when a column has the wrong type."""
    building_name = str(row["building_name"])
    raw = row["sections_json"]
    if isinstance(raw, str):
        sections_json = raw.encode("utf-8")
    elif isinstance(raw, (bytes, memoryview)):
        sections_json = bytes(raw)
    else:
        raise DecodeError(f"Stored sections for '{building_name}' are {type(raw).__name__}, not JSON text.")
    version = row["version"]
    if isinstance(version, bool) or not isinstance(version, int):
        raise DecodeError(f"Stored version for '{building_name}' is not an integer: {version!r}")
    return LessonRow(
        building_name=building_name,
        title=str(row["title"]),
        sections_json=sections_json,
        last_modified=str(row["last_modified"]),
        version=version,
    )


def _raw_list(value: object) -> list[str]:
    """Decode a stored string list, treating anything unreadable as empty."""
    try:
        decoded: object = json.loads(str(value))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable stored list: %r", value)
        return []
    if not isinstance(decoded, list):
        return []
    return [item for item in decoded if isinstance(item, str)]


def _progress_record(row: sqlite3.Row) -> BuildingProgressRecord:
    return BuildingProgressRecord(
        building_id=int(row["building_id"]),
        player_name=str(row["player_name"]),
        science_badges_raw=_raw_list(row["science_badges_raw"]),
        sketching_phases_raw=_raw_list(row["sketching_phases_raw"]),
        sketch_completed=bool(row["sketch_completed"]),
        quiz_passed=bool(row["quiz_passed"]),
        lesson_read=bool(row["lesson_read"]),
        lesson_section_index=int(row["lesson_section_index"]),
        is_completed=bool(row["is_completed"]),
        challenge_progress=float(row["challenge_progress"]),
    )


def _notebook_entry(row: sqlite3.Row) -> NotebookEntry:
    science_raw = row["science"]
    science = None
    if science_raw is not None:
        try:
            science = Science(str(science_raw))
        except ValueError:
            logger.warning("Dropping unknown science %r on notebook entry %s", science_raw, row["id"])
    return NotebookEntry(
        id=str(row["id"]),
        building_id=int(row["building_id"]),
        entry_type=NotebookEntryType(str(row["entry_type"])),
        title=str(row["title"]),
        body=str(row["body"]),
        date_added=str(row["date_added"]),
        science=science,
        user_annotation=row["user_annotation"],
    )
