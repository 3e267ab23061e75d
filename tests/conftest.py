from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from archacademy.content_loader import ContentCatalog, load_catalog  # noqa: E402
from archacademy.store import AcademyStore  # noqa: E402


def _tmp_path_fixture() -> Iterator[Path]:
    """Per-test directory under ``.tmp_pytest/`` in the project root.

    Replaces pytest's builtin ``tmp_path`` so database files and content
    fixtures stay inside the working tree.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture(scope="session")
def catalog() -> ContentCatalog:
    return load_catalog()


@pytest.fixture
def store() -> Iterator[AcademyStore]:
    db = AcademyStore(":memory:")
    try:
        yield db
    finally:
        db.close()
