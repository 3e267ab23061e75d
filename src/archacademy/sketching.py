"""Proportion checks for freehand floor-plan sketches."""

from __future__ import annotations

from .models import ProportionalRatio, RoomDefinition, SketchingChallenge, SketchingPhase, SketchingPhaseType

RATIO_TOLERANCE = 0.15


def ratio_matches(ratio: ProportionalRatio, width: int, height: int) -> bool:
    """Return whether width:height is close to the ratio in either orientation.

    A non-positive side means the shape is not finished yet, so it never matches.
    """
    if width <= 0 or height <= 0:
        return False
    target = ratio.numerator / ratio.denominator
    actual = width / height
    inverse = height / width
    return abs(actual - target) < RATIO_TOLERANCE or abs(inverse - target) < RATIO_TOLERANCE


def room_matches(room: RoomDefinition, width: int, height: int) -> bool:
    """Check a drawn room's proportions against its definition."""
    if width <= 0 or height <= 0:
        return False
    if room.required_ratio is None:
        return True
    return ratio_matches(room.required_ratio, width, height)


def find_phase(challenge: SketchingChallenge, phase_type: SketchingPhaseType) -> SketchingPhase | None:
    for phase in challenge.phases:
        if phase.phase_type == phase_type:
            return phase
    return None


def find_room(phase: SketchingPhase, label: str) -> RoomDefinition | None:
    wanted = label.strip().lower()
    for room in phase.rooms:
        if room.label.lower() == wanted:
            return room
    return None
