from archacademy.models import ProportionalRatio, RoomDefinition, SketchingChallenge, SketchingPhase, SketchingPhaseType
from archacademy.sketching import RATIO_TOLERANCE, find_phase, find_room, ratio_matches, room_matches


def test_ratio_matches_either_orientation() -> None:
    three_two = ProportionalRatio(3, 2)
    assert ratio_matches(three_two, 6, 4) is True
    assert ratio_matches(three_two, 4, 6) is True
    assert ratio_matches(three_two, 10, 1) is False


def test_ratio_rejects_unfinished_shapes() -> None:
    assert ratio_matches(ProportionalRatio(1, 1), 0, 5) is False
    assert ratio_matches(ProportionalRatio(1, 1), 5, -1) is False


def test_ratio_tolerance_is_exclusive() -> None:
    assert RATIO_TOLERANCE == 0.15
    square = ProportionalRatio(1, 1)
    assert ratio_matches(square, 11, 10) is True
    assert ratio_matches(square, 12, 10) is False


def test_room_without_ratio_accepts_any_finished_shape() -> None:
    room = RoomDefinition(label="Courtyard", width=4, height=4)
    assert room_matches(room, 9, 2) is True
    assert room_matches(room, 0, 2) is False


def test_find_phase_and_room() -> None:
    portico = RoomDefinition(label="Portico", width=4, height=2, required_ratio=ProportionalRatio(2, 1))
    phase = SketchingPhase(SketchingPhaseType.PIANTA, "Floor plan", "", [portico])
    challenge = SketchingChallenge("Pantheon", "", [phase])
    assert find_phase(challenge, SketchingPhaseType.PIANTA) is phase
    assert find_phase(challenge, SketchingPhaseType.ALZATO) is None
    assert find_room(phase, " portico ") is portico
    assert find_room(phase, "Rotunda") is None
    assert room_matches(portico, 2, 4) is True
