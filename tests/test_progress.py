from archacademy.models import Science, SketchingPhaseType
from archacademy.progress import BuildingProgress, BuildingProgressRecord


def test_to_progress_drops_unknown_strings() -> None:
    record = BuildingProgressRecord(
        building_id=1,
        science_badges_raw=["Hydraulics", "Alchemy", "Engineering"],
        sketching_phases_raw=["Pianta", "Disegno"],
        quiz_passed=True,
        lesson_section_index=2,
    )
    progress = record.to_progress()
    assert progress.science_badges_earned == {Science.HYDRAULICS, Science.ENGINEERING}
    assert progress.completed_sketching_phases == {SketchingPhaseType.PIANTA}
    assert progress.quiz_passed is True
    assert progress.sketch_completed is False
    assert progress.lesson_section_index == 2


def test_update_from_flattens_sorted_and_keeps_untouched_fields() -> None:
    record = BuildingProgressRecord(building_id=9, player_name="ada", is_completed=True, challenge_progress=0.75)
    progress = BuildingProgress(
        science_badges_earned={Science.PHYSICS, Science.GEOMETRY},
        completed_sketching_phases={SketchingPhaseType.SEZIONE, SketchingPhaseType.ALZATO},
        sketch_completed=True,
        lesson_read=True,
        lesson_section_index=5,
    )
    record.update_from(progress)

    assert record.science_badges_raw == ["Geometry", "Physics"]
    assert record.sketching_phases_raw == ["Alzato", "Sezione"]
    assert record.sketch_completed is True
    assert record.lesson_read is True
    assert record.lesson_section_index == 5
    assert record.is_completed is True
    assert record.challenge_progress == 0.75
    assert record.player_name == "ada"


def test_projection_round_trip() -> None:
    progress = BuildingProgress(
        science_badges_earned={Science.MATERIALS},
        completed_sketching_phases=set(SketchingPhaseType),
        quiz_passed=True,
    )
    record = BuildingProgressRecord(building_id=4)
    record.update_from(progress)
    assert record.to_progress() == progress


def test_empty_sets_flatten_to_empty_lists() -> None:
    record = BuildingProgressRecord(building_id=4, science_badges_raw=["Optics"])
    record.update_from(BuildingProgress())
    assert record.science_badges_raw == []
    assert record.sketching_phases_raw == []
