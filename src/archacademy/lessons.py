"""Seed stored lessons from bundled content and resolve lessons stored-first."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .codec import DecodeError, decode_sections, encode_sections
from .content_loader import ContentCatalog
from .models import Lesson
from .store import AcademyStore, LessonRow

logger = logging.getLogger(__name__)


@dataclass
class LessonRecord:
    """A lesson in its stored form, sections kept encoded."""

    building_name: str
    title: str
    sections_json: bytes
    last_modified: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    version: int = 1

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> LessonRecord:
        return cls(
            building_name=lesson.building_name,
            title=lesson.title,
            sections_json=encode_sections(lesson.sections),
        )

    @classmethod
    def from_row(cls, row: LessonRow) -> LessonRecord:
        return cls(
            building_name=row.building_name,
            title=row.title,
            sections_json=row.sections_json,
            last_modified=row.last_modified,
            version=row.version,
        )

    def to_lesson(self) -> Lesson:
        """Decode the stored sections. Raises DecodeError if they are unreadable."""
        return Lesson(building_name=self.building_name, title=self.title, sections=decode_sections(self.sections_json))


def seed_if_needed(store: AcademyStore, catalog: ContentCatalog) -> int:
    """Store every bundled lesson once. Returns how many rows were inserted."""
    if store.count_lesson_records() >= catalog.expected_lesson_count:
        return 0

    inserted = 0
    for name in catalog.building_names:
        lesson = catalog.lessons.get(name)
        if lesson is None:
            continue
        record = LessonRecord.from_lesson(lesson)
        if store.insert_lesson_record(
            record.building_name, record.title, record.sections_json, record.last_modified, record.version
        ):
            inserted += 1
    store.commit()
    logger.info("Seeded %d lesson records", inserted)
    return inserted


def _fetch_persisted(store: AcademyStore, building_name: str) -> Lesson | None:
    """Stored lesson for an exact name, or None when missing or unreadable."""
    try:
        row = store.get_lesson_record(building_name)
        if row is None:
            return None
        return LessonRecord.from_row(row).to_lesson()
    except DecodeError as exc:
        logger.warning("Stored lesson for %s is unreadable, using bundled copy: %s", building_name, exc)
    except sqlite3.Error:
        logger.warning("Could not read stored lesson for %s", building_name, exc_info=True)
    return None


def fetch_lesson(store: AcademyStore, catalog: ContentCatalog, building_name: str) -> Lesson | None:
    """Resolve a lesson from the store, falling back to bundled content.

    Returns None only when neither source knows the building.
    """
    building = catalog.building(building_name)
    stored_name = building.name if building is not None else building_name
    lesson = _fetch_persisted(store, stored_name)
    if lesson is not None:
        return lesson
    return catalog.lesson_for(building_name)
