"""CLI entrypoint for the architecture academy."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from . import __version__, config
from .markers import segments
from .models import (
    Lesson,
    LessonCuriosity,
    LessonEnvironmentPrompt,
    LessonFillInBlanks,
    LessonFunFact,
    LessonMathVisual,
    LessonQuestion,
    LessonReading,
    LessonSection,
    SketchingPhaseType,
)
from .notebook import BuildingNotebook, NotebookEntryType
from .service import AcademyService

PrintFn = Callable[[str], None]

ENTRY_TYPE_HEADINGS = {
    NotebookEntryType.KEY_FACT: "Key Facts",
    NotebookEntryType.SCIENCE_CONCEPT: "Science Concepts",
    NotebookEntryType.ENVIRONMENT_NOTE: "Environment Notes",
    NotebookEntryType.FUN_FACT: "Fun Facts",
    NotebookEntryType.VOCABULARY: "Vocabulary",
    NotebookEntryType.QUIZ_RESULT: "Quiz Results",
    NotebookEntryType.USER_NOTE: "My Notes",
}


def _service(db_path: Path | str, player_name: str) -> AcademyService:
    """Create app service for the given database."""
    return AcademyService(db_path=db_path, player_name=player_name)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archacademy", description="Renaissance architecture lessons and notebooks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", type=Path, default=config.DB_PATH, help="database path")
    parser.add_argument("--player", default=config.DEFAULT_PLAYER, help="player name progress is stored under")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="more log output (-vv for debug)")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("buildings", help="list buildings")
    commands.add_parser("seed", help="store bundled lessons if not yet stored")

    lesson = commands.add_parser("lesson", help="print a building's lesson")
    lesson.add_argument("building")

    notebook = commands.add_parser("notebook", help="print a building's notebook")
    notebook.add_argument("building")

    read = commands.add_parser("read", help="mark a lesson read and file its notes")
    read.add_argument("building")
    read.add_argument("--vocabulary", action="store_true", help="also file the building's key terms")

    station = commands.add_parser("station", help="file a station lesson into matching notebooks")
    station.add_argument("key")

    sketch = commands.add_parser("sketch", help="check a drawn room's proportions")
    sketch.add_argument("building")
    sketch.add_argument("phase", choices=[str(phase) for phase in SketchingPhaseType])
    sketch.add_argument("room")
    sketch.add_argument("width", type=int)
    sketch.add_argument("height", type=int)
    return parser


def _log_level(verbose: int) -> int | str:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return config.LOG_LEVEL


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = _parser().parse_args(argv)
    logging.basicConfig(level=_log_level(args.verbose), format="%(levelname)s %(name)s: %(message)s")

    service = _service(args.db, args.player)
    try:
        if args.command == "buildings":
            _buildings_flow(service, print_fn)
        elif args.command == "seed":
            print_fn(f"Seeded {service.seeded} lessons.")
        elif args.command == "lesson":
            lesson = service.get_lesson(args.building)
            if lesson is None:
                print_fn(f"Not found: {args.building}")
                return 1
            _print_lesson(service, lesson, print_fn)
        elif args.command == "notebook":
            _print_notebook(service.notebook_for(args.building), print_fn)
        elif args.command == "read":
            added = service.record_lesson_read(args.building)
            if args.vocabulary:
                added += service.add_vocabulary_to_notebook(args.building)
            print_fn(f"Lesson read. {len(added)} new notebook entries.")
        elif args.command == "station":
            results = service.record_station_lesson(args.key)
            if not results:
                print_fn("No new notebook entries.")
            for _, building_name, entry in results:
                print_fn(f"{building_name}: {entry.title}")
        elif args.command == "sketch":
            phase = SketchingPhaseType(args.phase)
            room = service.room_for(args.building, phase, args.room)
            if service.check_room(args.building, phase, args.room, args.width, args.height):
                print_fn("Proportions match.")
            elif room.required_ratio is not None:
                print_fn(f"Proportions do not match. {room.label} needs {room.required_ratio.display}.")
            else:
                print_fn("Proportions do not match.")
    except KeyError as exc:
        print_fn(f"Not found: {exc.args[0]}")
        return 1
    except ValueError as exc:
        print_fn(str(exc))
        return 1
    finally:
        service.close()
    return 0


def _buildings_flow(service: AcademyService, print_fn: PrintFn) -> None:
    """Print the building roster with lesson status."""
    rows: list[tuple[str, str, str, str, str]] = []
    for building in service.list_buildings():
        progress = service.progress_for(building.name)
        status = "read" if progress.lesson_read else "new"
        sciences = ", ".join(str(science) for science in building.sciences)
        rows.append((str(building.id), building.name, str(building.era), sciences, status))

    id_width = max(len("Id"), max(len(row[0]) for row in rows))
    name_width = max(len("Building"), max(len(row[1]) for row in rows))
    era_width = max(len("Era"), max(len(row[2]) for row in rows))
    science_width = max(len("Sciences"), max(len(row[3]) for row in rows))
    header = (
        f"{'Id':<{id_width}} "
        f"{'Building':<{name_width}} "
        f"{'Era':<{era_width}} "
        f"{'Sciences':<{science_width}} "
        "Lesson"
    )
    print_fn(header)
    print_fn("-" * len(header))
    for row in rows:
        print_fn(f"{row[0]:<{id_width}} {row[1]:<{name_width}} {row[2]:<{era_width}} {row[3]:<{science_width}} {row[4]}")


def _print_lesson(service: AcademyService, lesson: Lesson, print_fn: PrintFn) -> None:
    print_fn(f"=== {lesson.title} ===")
    for index, section in enumerate(lesson.sections, start=1):
        print_fn(f"\n[{index}/{len(lesson.sections)}] {section.kind}")
        _print_section(service, section, print_fn)


def _print_section(service: AcademyService, section: LessonSection, print_fn: PrintFn) -> None:
    """Print one section as plain text."""
    if isinstance(section, LessonReading):
        if section.title:
            print_fn(section.title)
        print_fn(section.body)
        if section.caption:
            print_fn(f"({section.caption})")
    elif isinstance(section, LessonFunFact):
        print_fn(f"Fun fact: {section.text}")
    elif isinstance(section, LessonQuestion):
        print_fn(section.question)
        for idx, option in enumerate(section.options, start=1):
            print_fn(f"  {idx}) {option}")
    elif isinstance(section, LessonFillInBlanks):
        if section.title:
            print_fn(section.title)
        print_fn("".join(segment.text if segment.blank_word is None else "____" for segment in segments(section.text)))
        print_fn(f"Word bank: {', '.join(service.word_bank(section))}")
    elif isinstance(section, LessonEnvironmentPrompt):
        print_fn(f"{section.title}: {section.description} (go to {section.destination})")
    elif isinstance(section, LessonCuriosity):
        for pair in section.questions:
            print_fn(f"Q: {pair.question}")
            print_fn(f"A: {pair.answer}")
    elif isinstance(section, LessonMathVisual):
        print_fn(f"{section.title} [{section.science}, {section.total_steps} steps]")
        print_fn(section.caption)


def _print_notebook(notebook: BuildingNotebook, print_fn: PrintFn) -> None:
    """Print a notebook grouped by entry type."""
    print_fn(f"=== Notebook: {notebook.building_name} ===")
    if not notebook.entries:
        print_fn("No entries yet.")
        return
    grouped = notebook.entries_by_type
    for entry_type, heading in ENTRY_TYPE_HEADINGS.items():
        entries = grouped.get(entry_type)
        if not entries:
            continue
        print_fn(f"\n{heading}")
        for entry in entries:
            science = f" [{entry.science}]" if entry.science is not None else ""
            print_fn(f"- {entry.title}{science}")
            print_fn(f"  {entry.body}")
            if entry.user_annotation:
                print_fn(f"  Note: {entry.user_annotation}")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
