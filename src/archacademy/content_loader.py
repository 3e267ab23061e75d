"""Load the static authoring feed from bundled JSON resources."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from .codec import DecodeError, section_from_dict
from .models import (
    Building,
    Era,
    Lesson,
    ProportionalRatio,
    RoomDefinition,
    RoomShape,
    Science,
    SketchingChallenge,
    SketchingPhase,
    SketchingPhaseType,
    StationLesson,
    VocabularyTerm,
)

logger = logging.getLogger(__name__)

CONTENT_PACKAGE = "archacademy.content"


@dataclass(frozen=True)
class ContentCatalog:
    """Compiled-in lessons, vocabulary, sketching geometry and station lessons.

    Every lookup is by exact building name (or alias) and returns None when
    the name is unknown.
    """

    buildings: list[Building]
    lessons: dict[str, Lesson]
    vocabulary: dict[str, list[VocabularyTerm]]
    sketching: dict[str, SketchingChallenge]
    stations: dict[str, StationLesson]

    @property
    def building_names(self) -> list[str]:
        """Canonical building names in seed order."""
        return [building.name for building in self.buildings]

    @property
    def expected_lesson_count(self) -> int:
        return len(self.buildings)

    def building(self, name: str) -> Building | None:
        for building in self.buildings:
            if building.answers_to(name):
                return building
        return None

    def building_by_id(self, building_id: int) -> Building | None:
        for building in self.buildings:
            if building.id == building_id:
                return building
        return None

    def lesson_for(self, name: str) -> Lesson | None:
        building = self.building(name)
        return self.lessons.get(building.name) if building is not None else None

    def vocabulary_for(self, name: str) -> list[VocabularyTerm] | None:
        building = self.building(name)
        return self.vocabulary.get(building.name) if building is not None else None

    def sketching_for(self, name: str) -> SketchingChallenge | None:
        building = self.building(name)
        return self.sketching.get(building.name) if building is not None else None

    def station(self, key: str) -> StationLesson | None:
        return self.stations.get(key)


def _building_from_dict(raw: dict[str, Any]) -> Building:
    """Build a building from raw JSON content."""
    return Building(
        id=int(raw["id"]),
        name=str(raw["name"]),
        era=Era(str(raw["era"])),
        sciences=[Science(str(item)) for item in raw.get("sciences", [])],
        icon=str(raw.get("icon", "")),
        aliases=[str(item) for item in raw.get("aliases", [])],
    )


def _station_from_dict(raw: dict[str, Any]) -> StationLesson:
    return StationLesson(
        key=str(raw["key"]),
        label=str(raw["label"]),
        title=str(raw["title"]),
        text=str(raw["text"]),
        sciences=[Science(str(item)) for item in raw.get("sciences", [])],
    )


def _lesson_from_dict(raw: dict[str, Any]) -> Lesson:
    """Build a lesson; sections use the same tagged shape as stored lessons."""
    building_name = str(raw["building"])
    try:
        sections = [section_from_dict(item) for item in raw.get("sections", [])]
    except DecodeError as exc:
        raise ValueError(f"Lesson for '{building_name}' has an invalid section: {exc}") from exc
    return Lesson(building_name=building_name, title=str(raw["title"]), sections=sections)


def _vocabulary_from_list(raw: list[dict[str, Any]]) -> list[VocabularyTerm]:
    return [
        VocabularyTerm(
            title=str(item["title"]),
            body=str(item["body"]),
            science=Science(str(item["science"])) if item.get("science") else None,
        )
        for item in raw
    ]


def _room_from_dict(raw: dict[str, Any]) -> RoomDefinition:
    ratio_raw = raw.get("ratio")
    ratio = None
    if ratio_raw:
        numerator, denominator = (int(value) for value in ratio_raw)
        if numerator <= 0 or denominator <= 0:
            raise ValueError(f"Room '{raw.get('label')}' has a non-positive ratio.")
        ratio = ProportionalRatio(numerator=numerator, denominator=denominator)
    return RoomDefinition(
        label=str(raw["label"]),
        width=int(raw["width"]),
        height=int(raw["height"]),
        required_ratio=ratio,
        shape=RoomShape(str(raw.get("shape", RoomShape.RECTANGLE))),
    )


def _sketching_from_dict(building_name: str, raw: dict[str, Any]) -> SketchingChallenge:
    phases = [
        SketchingPhase(
            phase_type=SketchingPhaseType(str(phase["phase"])),
            title=str(phase["title"]),
            introduction=str(phase.get("introduction", "")),
            rooms=[_room_from_dict(room) for room in phase.get("rooms", [])],
        )
        for phase in raw.get("phases", [])
    ]
    if not 1 <= len(phases) <= len(SketchingPhaseType):
        raise ValueError(f"Sketching challenge for '{building_name}' must have 1-4 phases.")
    return SketchingChallenge(building_name=building_name, introduction=str(raw.get("introduction", "")), phases=phases)


def _build_catalog(
    buildings_raw: dict[str, Any],
    stations_raw: dict[str, Any] | None,
    lesson_raws: list[dict[str, Any]],
) -> ContentCatalog:
    buildings = [_building_from_dict(item) for item in buildings_raw.get("buildings", [])]
    _validate_unique_buildings(buildings)
    by_name = {building.name: building for building in buildings}

    lessons: dict[str, Lesson] = {}
    vocabulary: dict[str, list[VocabularyTerm]] = {}
    sketching: dict[str, SketchingChallenge] = {}
    for raw in lesson_raws:
        lesson = _lesson_from_dict(raw)
        if lesson.building_name not in by_name:
            raise ValueError(f"Lesson for unknown building: {lesson.building_name}")
        if lesson.building_name in lessons:
            raise ValueError(f"Duplicate lesson for building: {lesson.building_name}")
        lessons[lesson.building_name] = lesson
        vocabulary[lesson.building_name] = _vocabulary_from_list(raw.get("vocabulary", []))
        if raw.get("sketching"):
            sketching[lesson.building_name] = _sketching_from_dict(lesson.building_name, raw["sketching"])

    missing = [name for name in by_name if name not in lessons]
    if missing:
        logger.warning("No bundled lesson for: %s", ", ".join(missing))

    stations: dict[str, StationLesson] = {}
    for item in (stations_raw or {}).get("stations", []):
        station = _station_from_dict(item)
        if station.key in stations:
            raise ValueError(f"Duplicate station key: {station.key}")
        stations[station.key] = station

    return ContentCatalog(
        buildings=buildings, lessons=lessons, vocabulary=vocabulary, sketching=sketching, stations=stations
    )


def _read_json(entry: Traversable | Path) -> dict[str, Any]:
    return json.loads(entry.read_text(encoding="utf-8-sig"))


def load_catalog() -> ContentCatalog:
    """Load the bundled content catalog."""
    root = resources.files(CONTENT_PACKAGE)
    lessons_dir = root.joinpath("lessons")
    lesson_raws = [
        _read_json(entry)
        for entry in sorted(lessons_dir.iterdir(), key=lambda item: item.name)
        if entry.name.endswith(".json")
    ]
    return _build_catalog(
        _read_json(root.joinpath("buildings.json")),
        _read_json(root.joinpath("stations.json")),
        lesson_raws,
    )


def load_catalog_from_dir(path: Path) -> ContentCatalog:
    """Load a catalog laid out like the bundled one, for tests/tools."""
    stations_path = path / "stations.json"
    stations_raw = _read_json(stations_path) if stations_path.exists() else None
    lesson_raws = [_read_json(file_path) for file_path in sorted((path / "lessons").glob("*.json"))]
    return _build_catalog(_read_json(path / "buildings.json"), stations_raw, lesson_raws)


def _validate_unique_buildings(buildings: list[Building]) -> None:
    """Validate that building ids and names (including aliases) are unique."""
    seen_ids: set[int] = set()
    seen_names: set[str] = set()
    for building in buildings:
        if building.id in seen_ids:
            raise ValueError(f"Duplicate building id: {building.id}")
        seen_ids.add(building.id)
        for name in [building.name, *building.aliases]:
            if name in seen_names:
                raise ValueError(f"Duplicate building name: {name}")
            seen_names.add(name)
