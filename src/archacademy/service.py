"""Application service for lessons, notebooks and building progress."""

from __future__ import annotations

import logging
import random
from pathlib import Path

from .content_loader import ContentCatalog, load_catalog
from .lessons import fetch_lesson, seed_if_needed
from .markers import word_bank
from .models import Building, Lesson, LessonFillInBlanks, RoomDefinition, Science, SketchingPhaseType
from .notebook import (
    BuildingNotebook,
    NotebookEntry,
    NotebookEntryType,
    entries_from_lesson,
    entries_from_station_lesson,
    entries_from_vocabulary,
    new_entry,
)
from .progress import BuildingProgress, BuildingProgressRecord
from .sketching import find_phase, find_room, room_matches
from .store import LESSON_MARKER, STATION_MARKER, VOCABULARY_MARKER, AcademyStore

logger = logging.getLogger(__name__)


class AcademyService:
    """Coordinates lesson content, notebooks and progress for one player."""

    def __init__(self, db_path: Path | str, catalog: ContentCatalog | None = None, player_name: str = "") -> None:
        """Open the store and seed it from bundled content on first run."""
        self.catalog = catalog if catalog is not None else load_catalog()
        self.store = AcademyStore(db_path)
        self.player_name = player_name
        self.seeded = seed_if_needed(self.store, self.catalog)

    def list_buildings(self) -> list[Building]:
        """Return buildings in roster order."""
        return list(self.catalog.buildings)

    def get_lesson(self, building_name: str) -> Lesson | None:
        """Return a building's lesson, or None if the building is unknown."""
        return fetch_lesson(self.store, self.catalog, building_name)

    def word_bank(self, section: LessonFillInBlanks, rng: random.Random | None = None) -> list[str]:
        """Shuffle a fresh word bank for one presentation of a passage."""
        return word_bank(section.text, section.distractors, rng=rng)

    def progress_for(self, building_name: str) -> BuildingProgress:
        """Return stored progress for a building, or a fresh value if none."""
        building = self._require_building(building_name)
        record = self.store.get_progress_record(self.player_name, building.id)
        if record is None:
            return BuildingProgress()
        return record.to_progress()

    def save_progress(self, building_name: str, progress: BuildingProgress) -> BuildingProgressRecord:
        """Project in-session progress into the building's stored record."""
        building = self._require_building(building_name)
        record = self.store.get_progress_record(self.player_name, building.id)
        if record is None:
            record = BuildingProgressRecord(building_id=building.id, player_name=self.player_name)
        record.update_from(progress)
        self.store.save_progress_record(record)
        return record

    def record_lesson_read(self, building_name: str) -> list[NotebookEntry]:
        """Mark a lesson read and file its knowledge in the notebook.

        Entries are added the first time only; later calls return an empty list.
        """
        building = self._require_building(building_name)
        progress = self.progress_for(building.name)
        progress.lesson_read = True
        self.save_progress(building.name, progress)

        if self.store.has_marker(self.player_name, LESSON_MARKER, building.name):
            return []
        lesson = self.get_lesson(building.name)
        if lesson is None:
            return []
        entries = entries_from_lesson(lesson, building.id)
        batch = [(building.id, building.name, entries)]
        if not self.store.file_notebook_entries(self.player_name, LESSON_MARKER, building.name, batch):
            return []
        logger.info("Added %d lesson entries to %s notebook", len(entries), building.name)
        return entries

    def add_vocabulary_to_notebook(self, building_name: str) -> list[NotebookEntry]:
        """File a building's curated vocabulary once."""
        building = self._require_building(building_name)
        if self.store.has_marker(self.player_name, VOCABULARY_MARKER, building.name):
            return []
        entries = entries_from_vocabulary(self.catalog.vocabulary_for(building.name) or [], building.id)
        batch = [(building.id, building.name, entries)]
        if not self.store.file_notebook_entries(self.player_name, VOCABULARY_MARKER, building.name, batch):
            return []
        return entries

    def record_station_lesson(self, station_key: str) -> list[tuple[int, str, NotebookEntry]]:
        """Cross-reference a station lesson into every building sharing a science, once."""
        station = self.catalog.station(station_key)
        if station is None:
            raise KeyError(station_key)
        if self.store.has_marker(self.player_name, STATION_MARKER, station.key):
            return []
        results = entries_from_station_lesson(station, self.catalog.buildings)
        batches = [(building_id, building_name, [entry]) for building_id, building_name, entry in results]
        if not self.store.file_notebook_entries(self.player_name, STATION_MARKER, station.key, batches):
            return []
        logger.info("Station %s added notes to %d notebooks", station.key, len(results))
        return results

    def add_user_note(
        self, building_name: str, title: str, body: str, science: Science | None = None
    ) -> NotebookEntry:
        """Append a player-written note."""
        building = self._require_building(building_name)
        title = title.strip()
        if not title:
            raise ValueError("Note title is required.")
        entry = new_entry(building.id, NotebookEntryType.USER_NOTE, title=title, body=body, science=science)
        self.store.append_notebook_entries(self.player_name, building.id, building.name, [entry])
        return entry

    def update_annotation(self, building_name: str, entry_id: str, text: str | None) -> bool:
        """Set or clear the annotation on one notebook entry."""
        building = self._require_building(building_name)
        if text is not None and not text.strip():
            text = None
        return self.store.update_entry_annotation(self.player_name, building.id, entry_id, text)

    def notebook_for(self, building_name: str) -> BuildingNotebook:
        """Return the building's notebook; empty if nothing was filed yet."""
        building = self._require_building(building_name)
        notebook = self.store.get_notebook(self.player_name, building.id)
        if notebook is None:
            return BuildingNotebook(building_id=building.id, building_name=building.name)
        return notebook

    def room_for(self, building_name: str, phase_type: SketchingPhaseType, label: str) -> RoomDefinition:
        """Look up a room of the building's sketching challenge."""
        building = self._require_building(building_name)
        challenge = self.catalog.sketching_for(building.name)
        if challenge is None:
            raise KeyError(f"No sketching challenge for {building.name}")
        phase = find_phase(challenge, phase_type)
        if phase is None:
            raise KeyError(f"No {phase_type} phase for {building.name}")
        room = find_room(phase, label)
        if room is None:
            raise KeyError(f"No room '{label}' in {building.name} {phase_type}")
        return room

    def check_room(
        self, building_name: str, phase_type: SketchingPhaseType, label: str, width: int, height: int
    ) -> bool:
        """Check a drawn room against the building's sketching challenge."""
        return room_matches(self.room_for(building_name, phase_type, label), width, height)

    def close(self) -> None:
        """Close underlying store."""
        self.store.close()

    def _require_building(self, building_name: str) -> Building:
        building = self.catalog.building(building_name)
        if building is None:
            raise KeyError(building_name)
        return building
