"""Runtime settings read from the environment (and an optional `.env` file)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DB_PATH = Path(os.getenv("ARCHACADEMY_DB_PATH", ".archacademy/academy.db"))
LOG_LEVEL = os.getenv("ARCHACADEMY_LOG_LEVEL", "WARNING").upper()
DEFAULT_PLAYER = os.getenv("ARCHACADEMY_PLAYER", "")
