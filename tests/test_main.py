from pathlib import Path
from typing import Any

from archacademy import main
from archacademy.service import AcademyService


def _run(tmp_path: Path, *argv: str) -> tuple[int, list[str]]:
    out: list[str] = []
    code = main.run(["--db", str(tmp_path / "academy.db"), *argv], print_fn=out.append)
    return code, out


def test_buildings_lists_roster(tmp_path: Path) -> None:
    code, out = _run(tmp_path, "buildings")
    assert code == 0
    assert out[0].startswith("Id")
    assert out[0].endswith("Lesson")
    assert set(out[1]) == {"-"}
    assert len(out) == 2 + 17
    assert "Aqueduct" in out[2]
    assert out[2].endswith("new")


def test_seed_reports_inserted_count(tmp_path: Path) -> None:
    assert _run(tmp_path, "seed") == (0, ["Seeded 17 lessons."])
    assert _run(tmp_path, "seed") == (0, ["Seeded 0 lessons."])


def test_lesson_prints_sections_and_word_bank(tmp_path: Path) -> None:
    code, out = _run(tmp_path, "lesson", "Pantheon")
    assert code == 0
    assert out[0] == "=== The Temple of All Gods ==="
    assert "\n[1/7] reading" in out
    assert "Emperor ____ built the ____" in out
    bank_line = next(line for line in out if line.startswith("Word bank: "))
    assert sorted(bank_line.removeprefix("Word bank: ").split(", ")) == ["Colosseum", "Hadrian", "Nero", "Pantheon"]


def test_lesson_prints_curiosity_pairs(tmp_path: Path) -> None:
    code, out = _run(tmp_path, "lesson", "Aqueduct")
    assert code == 0
    assert any(line.startswith("Q: ") for line in out)
    assert any(line.startswith("A: ") for line in out)


def test_unknown_lesson_returns_error(tmp_path: Path) -> None:
    assert _run(tmp_path, "lesson", "Parthenon") == (1, ["Not found: Parthenon"])


def test_read_then_notebook(tmp_path: Path) -> None:
    assert _run(tmp_path, "read", "Pantheon") == (0, ["Lesson read. 4 new notebook entries."])
    assert _run(tmp_path, "read", "Pantheon", "--vocabulary") == (0, ["Lesson read. 3 new notebook entries."])

    code, out = _run(tmp_path, "notebook", "Pantheon")
    assert code == 0
    assert out[0] == "=== Notebook: Pantheon ==="
    headings = [line.strip() for line in out if line.startswith("\n")]
    assert headings == ["Key Facts", "Fun Facts", "Vocabulary", "Quiz Results"]
    assert "- Builders of the Pantheon [Architecture]" in out
    assert "  Emperor **Hadrian** built the **Pantheon**" in out

    code, out = _run(tmp_path, "buildings")
    pantheon_row = next(line for line in out if "Pantheon" in line)
    assert pantheon_row.endswith("read")


def test_empty_notebook(tmp_path: Path) -> None:
    assert _run(tmp_path, "notebook", "Harbor") == (0, ["=== Notebook: Harbor ===", "No entries yet."])


def test_notebook_unknown_building(tmp_path: Path) -> None:
    assert _run(tmp_path, "notebook", "Parthenon") == (1, ["Not found: Parthenon"])


def test_station_files_notes_once(tmp_path: Path) -> None:
    code, out = _run(tmp_path, "station", "river")
    assert code == 0
    assert "Aqueduct: River: Leonardo's Water Studies" in out
    assert _run(tmp_path, "station", "river") == (0, ["No new notebook entries."])
    assert _run(tmp_path, "station", "desert") == (1, ["Not found: desert"])


def test_sketch_checks_room(tmp_path: Path) -> None:
    assert _run(tmp_path, "sketch", "Pantheon", "Pianta", "Portico", "4", "2") == (0, ["Proportions match."])
    assert _run(tmp_path, "sketch", "Pantheon", "Pianta", "Portico", "3", "3") == (
        0,
        ["Proportions do not match. Portico needs 2:1."],
    )
    code, out = _run(tmp_path, "sketch", "Glassworks", "Pianta", "Furnace", "2", "2")
    assert code == 1
    assert out[0].startswith("Not found:")


def test_player_scopes_progress(tmp_path: Path) -> None:
    _run(tmp_path, "--player", "ada", "read", "Aqueduct")
    _, ada = _run(tmp_path, "--player", "ada", "buildings")
    _, other = _run(tmp_path, "buildings")
    assert next(line for line in ada if "Aqueduct" in line).endswith("read")
    assert next(line for line in other if "Aqueduct" in line).endswith("new")


def test_run_closes_service(monkeypatch: Any) -> None:
    service = AcademyService(":memory:")
    closed = {"value": False}
    original_close = service.close

    def _close() -> None:
        closed["value"] = True
        original_close()

    monkeypatch.setattr(service, "close", _close)
    monkeypatch.setattr(main, "_service", lambda db_path, player_name: service)
    out: list[str] = []
    assert main.run(["seed"], print_fn=out.append) == 0
    assert out == ["Seeded 17 lessons."]
    assert closed["value"] is True


def test_verbose_flag_sets_log_level() -> None:
    assert main._log_level(2) == 10  # noqa: SLF001
    assert main._log_level(1) == 20  # noqa: SLF001
