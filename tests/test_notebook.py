from archacademy.models import (
    Building,
    Era,
    Lesson,
    LessonCuriosity,
    LessonDestination,
    LessonEnvironmentPrompt,
    LessonFillInBlanks,
    LessonFunFact,
    LessonMathVisual,
    LessonQuestion,
    LessonReading,
    MathVisualType,
    Science,
    StationLesson,
    VocabularyTerm,
)
from archacademy.notebook import (
    BuildingNotebook,
    NotebookEntryType,
    entries_from_lesson,
    entries_from_station_lesson,
    entries_from_vocabulary,
    new_entry,
)


def _five_section_lesson() -> Lesson:
    return Lesson(
        building_name="Pantheon",
        title="The Temple of All Gods",
        sections=[
            LessonReading(body="Hadrian finished the **Pantheon**.", science=Science.ARCHITECTURE),
            LessonFunFact(text="The inscription credits Agrippa."),
            LessonQuestion(
                question="Who finished the Pantheon?",
                options=["Nero", "Hadrian"],
                correct_index=1,
                explanation="Around 125 AD.",
                science=Science.ARCHITECTURE,
            ),
            LessonFillInBlanks(text="Emperor {{Hadrian}} built the {{Pantheon}}", distractors=["Nero"]),
            LessonEnvironmentPrompt(
                destination=LessonDestination.WORKSHOP,
                title="Mix concrete",
                description="Go to the workshop.",
                icon="hammer",
            ),
        ],
    )


def test_entries_from_lesson_follow_section_order() -> None:
    entries = entries_from_lesson(_five_section_lesson(), building_id=4)
    assert [entry.entry_type for entry in entries] == [
        NotebookEntryType.KEY_FACT,
        NotebookEntryType.FUN_FACT,
        NotebookEntryType.QUIZ_RESULT,
        NotebookEntryType.VOCABULARY,
    ]
    assert all(entry.building_id == 4 for entry in entries)
    assert len({entry.id for entry in entries}) == 4


def test_entry_titles_and_bodies() -> None:
    reading, fun_fact, quiz, vocabulary = entries_from_lesson(_five_section_lesson(), building_id=4)
    assert reading.title == "Key Fact"
    assert reading.science == Science.ARCHITECTURE
    assert fun_fact.title == "Fun Fact"
    assert fun_fact.science is None
    assert quiz.title == "Who finished the Pantheon?"
    assert quiz.body == "**Q:** Who finished the Pantheon?\n\n**A:** Hadrian\n\nAround 125 AD."
    assert vocabulary.title == "Key Terms"
    assert vocabulary.body == "Emperor **Hadrian** built the **Pantheon**"
    assert reading.user_annotation is None


def test_explicit_titles_are_kept() -> None:
    lesson = Lesson(
        "Aqueduct",
        "Water",
        [LessonReading(body="B", title="Gravity"), LessonFillInBlanks(text="{{arch}}", title="Arches")],
    )
    assert [entry.title for entry in entries_from_lesson(lesson, 1)] == ["Gravity", "Arches"]


def test_presentation_sections_produce_nothing() -> None:
    lesson = Lesson(
        "Aqueduct",
        "Water",
        [
            LessonCuriosity(questions=[]),
            LessonMathVisual(MathVisualType.AQUEDUCT_GRADIENT, "Slope", Science.MATHEMATICS, 3, "Gentle."),
        ],
    )
    assert entries_from_lesson(lesson, 1) == []
    assert entries_from_lesson(Lesson("Aqueduct", "Empty", []), 1) == []


def test_station_lesson_cross_references_by_shared_science() -> None:
    station = StationLesson(key="river", label="River", title="Moving Water", text="Flow.", sciences=[Science.HYDRAULICS])
    aqueduct = Building(1, "Aqueduct", Era.ANCIENT_ROME, [Science.HYDRAULICS, Science.ENGINEERING])
    glassworks = Building(11, "Glassworks", Era.RENAISSANCE, [Science.OPTICS])

    results = entries_from_station_lesson(station, [aqueduct, glassworks])
    assert len(results) == 1
    building_id, building_name, entry = results[0]
    assert (building_id, building_name) == (1, "Aqueduct")
    assert entry.entry_type == NotebookEntryType.ENVIRONMENT_NOTE
    assert entry.title == "River: Moving Water"
    assert entry.body == "Flow."
    assert entry.science == Science.HYDRAULICS


def test_station_lesson_multicast_and_first_science_tag() -> None:
    station = StationLesson("mine", "Mine", "Ores", "Dig.", [Science.ENGINEERING, Science.CHEMISTRY])
    buildings = [
        Building(1, "Aqueduct", Era.ANCIENT_ROME, [Science.ENGINEERING]),
        Building(10, "Botanical Garden", Era.RENAISSANCE, [Science.CHEMISTRY]),
        Building(16, "Vatican Observatory", Era.RENAISSANCE, [Science.ASTRONOMY]),
    ]
    results = entries_from_station_lesson(station, buildings)
    assert [name for _, name, _ in results] == ["Aqueduct", "Botanical Garden"]
    assert {entry.science for _, _, entry in results} == {Science.ENGINEERING}


def test_station_without_sciences_produces_nothing() -> None:
    station = StationLesson("empty", "Nowhere", "Nothing", "", [])
    assert entries_from_station_lesson(station, [Building(1, "Aqueduct", Era.ANCIENT_ROME, [Science.PHYSICS])]) == []


def test_entries_from_vocabulary() -> None:
    terms = [VocabularyTerm("Oculus", "Eye.", Science.ARCHITECTURE), VocabularyTerm("Coffers", "Panels.")]
    entries = entries_from_vocabulary(terms, 4)
    assert [(entry.title, entry.entry_type) for entry in entries] == [
        ("Oculus", NotebookEntryType.VOCABULARY),
        ("Coffers", NotebookEntryType.VOCABULARY),
    ]
    assert entries[1].science is None


def test_notebook_groupings_are_derived() -> None:
    entries = entries_from_lesson(_five_section_lesson(), 4)
    note = new_entry(4, NotebookEntryType.USER_NOTE, "Mine", "Remember the dome.")
    station = new_entry(4, NotebookEntryType.ENVIRONMENT_NOTE, "Quarry: Stone", "T", science=Science.GEOLOGY)
    notebook = BuildingNotebook(building_id=4, building_name="Pantheon", entries=[*entries, note, station])

    assert notebook.entries_by_science == {
        Science.ARCHITECTURE: [entries[0], entries[2]],
        Science.GEOLOGY: [station],
    }
    assert notebook.entries_by_type[NotebookEntryType.USER_NOTE] == [note]
    assert notebook.user_notes == [note]
    assert notebook.key_facts == [entries[0], station]
    assert notebook.fun_facts == [entries[1]]
    assert notebook.quiz_results == [entries[2]]
    assert notebook.vocabulary_entries == [entries[3]]


def test_with_annotation_returns_copy() -> None:
    entry = new_entry(4, NotebookEntryType.KEY_FACT, "Dome", "Big.")
    annotated = entry.with_annotation("See sketch.")
    assert entry.user_annotation is None
    assert annotated.user_annotation == "See sketch."
    assert (annotated.id, annotated.date_added) == (entry.id, entry.date_added)
