"""Notebook entries and the extraction of knowledge from lessons."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from .markers import fill_blanks
from .models import (
    Building,
    Lesson,
    LessonFillInBlanks,
    LessonFunFact,
    LessonQuestion,
    LessonReading,
    Science,
    StationLesson,
    VocabularyTerm,
)


class NotebookEntryType(StrEnum):
    KEY_FACT = "key_fact"
    FUN_FACT = "fun_fact"
    VOCABULARY = "vocabulary"
    SCIENCE_CONCEPT = "science_concept"
    QUIZ_RESULT = "quiz_result"
    USER_NOTE = "user_note"
    ENVIRONMENT_NOTE = "environment_note"


@dataclass(frozen=True)
class NotebookEntry:
    """One append-only knowledge record. Only the annotation may change later."""

    id: str
    building_id: int
    entry_type: NotebookEntryType
    title: str
    body: str
    date_added: str
    science: Science | None = None
    user_annotation: str | None = None

    def with_annotation(self, text: str | None) -> NotebookEntry:
        return replace(self, user_annotation=text)


def new_entry(
    building_id: int,
    entry_type: NotebookEntryType,
    title: str,
    body: str,
    science: Science | None = None,
    user_annotation: str | None = None,
) -> NotebookEntry:
    """Create an entry with a fresh id and the current UTC timestamp."""
    return NotebookEntry(
        id=uuid4().hex,
        building_id=building_id,
        entry_type=entry_type,
        title=title,
        body=body,
        date_added=datetime.now(UTC).isoformat(),
        science=science,
        user_annotation=user_annotation,
    )


@dataclass
class BuildingNotebook:
    """All knowledge collected for one building. Groupings are computed on read."""

    building_id: int
    building_name: str
    entries: list[NotebookEntry] = field(default_factory=list)
    last_modified: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def entries_by_science(self) -> dict[Science, list[NotebookEntry]]:
        grouped: dict[Science, list[NotebookEntry]] = {}
        for entry in self.entries:
            if entry.science is not None:
                grouped.setdefault(entry.science, []).append(entry)
        return grouped

    @property
    def entries_by_type(self) -> dict[NotebookEntryType, list[NotebookEntry]]:
        grouped: dict[NotebookEntryType, list[NotebookEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.entry_type, []).append(entry)
        return grouped

    @property
    def user_notes(self) -> list[NotebookEntry]:
        return self._of_types(NotebookEntryType.USER_NOTE)

    @property
    def key_facts(self) -> list[NotebookEntry]:
        """Lesson readings, science concepts and station notes."""
        return self._of_types(
            NotebookEntryType.KEY_FACT,
            NotebookEntryType.SCIENCE_CONCEPT,
            NotebookEntryType.ENVIRONMENT_NOTE,
        )

    @property
    def fun_facts(self) -> list[NotebookEntry]:
        return self._of_types(NotebookEntryType.FUN_FACT)

    @property
    def vocabulary_entries(self) -> list[NotebookEntry]:
        return self._of_types(NotebookEntryType.VOCABULARY)

    @property
    def quiz_results(self) -> list[NotebookEntry]:
        return self._of_types(NotebookEntryType.QUIZ_RESULT)

    def _of_types(self, *entry_types: NotebookEntryType) -> list[NotebookEntry]:
        return [entry for entry in self.entries if entry.entry_type in entry_types]


def entries_from_lesson(lesson: Lesson, building_id: int) -> list[NotebookEntry]:
    """Convert a lesson's knowledge sections into notebook entries, in section order.

    Environment prompts, curiosity pairs and math visuals are presentation
    only and produce nothing.
    """
    entries: list[NotebookEntry] = []
    for section in lesson.sections:
        if isinstance(section, LessonReading):
            entries.append(
                new_entry(
                    building_id,
                    NotebookEntryType.KEY_FACT,
                    title=section.title or "Key Fact",
                    body=section.body,
                    science=section.science,
                )
            )
        elif isinstance(section, LessonFunFact):
            entries.append(new_entry(building_id, NotebookEntryType.FUN_FACT, title="Fun Fact", body=section.text))
        elif isinstance(section, LessonQuestion):
            body = f"**Q:** {section.question}\n\n**A:** {section.correct_answer}\n\n{section.explanation}"
            entries.append(
                new_entry(
                    building_id,
                    NotebookEntryType.QUIZ_RESULT,
                    title=section.question,
                    body=body,
                    science=section.science,
                )
            )
        elif isinstance(section, LessonFillInBlanks):
            entries.append(
                new_entry(
                    building_id,
                    NotebookEntryType.VOCABULARY,
                    title=section.title or "Key Terms",
                    body=fill_blanks(section.text),
                    science=section.science,
                )
            )
    return entries


def entries_from_station_lesson(
    station: StationLesson, buildings: list[Building]
) -> list[tuple[int, str, NotebookEntry]]:
    """Cross-reference a station lesson into every building sharing a science."""
    station_sciences = set(station.sciences)
    results: list[tuple[int, str, NotebookEntry]] = []
    for building in buildings:
        if station_sciences.isdisjoint(building.sciences):
            continue
        entry = new_entry(
            building.id,
            NotebookEntryType.ENVIRONMENT_NOTE,
            title=f"{station.label}: {station.title}",
            body=station.text,
            science=station.sciences[0] if station.sciences else None,
        )
        results.append((building.id, building.name, entry))
    return results


def entries_from_vocabulary(terms: list[VocabularyTerm], building_id: int) -> list[NotebookEntry]:
    return [
        new_entry(building_id, NotebookEntryType.VOCABULARY, title=term.title, body=term.body, science=term.science)
        for term in terms
    ]
