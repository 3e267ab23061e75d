"""Per-building progress and its flat persisted record.

Set-valued progress fields are stored as plain string lists. Loading keeps
only strings that are members of the matching enum, so records written by a
newer build with extra sciences or phases still load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeVar

from .models import Science, SketchingPhaseType

E = TypeVar("E", bound=StrEnum)


@dataclass
class BuildingProgress:
    """In-session progress toward constructing one building."""

    science_badges_earned: set[Science] = field(default_factory=set)
    completed_sketching_phases: set[SketchingPhaseType] = field(default_factory=set)
    sketch_completed: bool = False
    quiz_passed: bool = False
    lesson_read: bool = False
    lesson_section_index: int = 0


@dataclass
class BuildingProgressRecord:
    """Stored progress row for one player and building."""

    building_id: int
    player_name: str = ""
    science_badges_raw: list[str] = field(default_factory=list)
    sketching_phases_raw: list[str] = field(default_factory=list)
    sketch_completed: bool = False
    quiz_passed: bool = False
    lesson_read: bool = False
    lesson_section_index: int = 0
    # Owned by construction bookkeeping, never written by update_from.
    is_completed: bool = False
    challenge_progress: float = 0.0

    @property
    def science_badges_earned(self) -> set[Science]:
        return _members(Science, self.science_badges_raw)

    @science_badges_earned.setter
    def science_badges_earned(self, value: set[Science]) -> None:
        self.science_badges_raw = _flatten(value)

    @property
    def completed_sketching_phases(self) -> set[SketchingPhaseType]:
        return _members(SketchingPhaseType, self.sketching_phases_raw)

    @completed_sketching_phases.setter
    def completed_sketching_phases(self, value: set[SketchingPhaseType]) -> None:
        self.sketching_phases_raw = _flatten(value)

    def to_progress(self) -> BuildingProgress:
        return BuildingProgress(
            science_badges_earned=self.science_badges_earned,
            completed_sketching_phases=self.completed_sketching_phases,
            sketch_completed=self.sketch_completed,
            quiz_passed=self.quiz_passed,
            lesson_read=self.lesson_read,
            lesson_section_index=self.lesson_section_index,
        )

    def update_from(self, progress: BuildingProgress) -> None:
        """Overwrite the projected fields from in-session progress."""
        self.science_badges_earned = progress.science_badges_earned
        self.completed_sketching_phases = progress.completed_sketching_phases
        self.sketch_completed = progress.sketch_completed
        self.quiz_passed = progress.quiz_passed
        self.lesson_read = progress.lesson_read
        self.lesson_section_index = progress.lesson_section_index


def _members(enum_type: type[E], raw: list[str]) -> set[E]:
    known = {member.value: member for member in enum_type}
    return {known[value] for value in raw if value in known}


def _flatten(values: set[E]) -> list[str]:
    return sorted(str(value) for value in values)
