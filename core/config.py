"""Configuration for the finance tracker.

Values come from environment variables (optionally via a ``.env`` file in the
working directory) with defaults that work out of the box.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
STORE_PATH = Path(os.getenv("FINTRACK_STORE_PATH", DATA_DIR / "store.json"))
SEED_PATH = Path(os.getenv("FINTRACK_SEED_PATH", DATA_DIR / "seed.json"))

# Simulated backend latency, milliseconds
LATENCY_MIN_MS = int(os.getenv("FINTRACK_LATENCY_MIN_MS", "100"))
LATENCY_MAX_MS = int(os.getenv("FINTRACK_LATENCY_MAX_MS", "500"))

COLLATION_LOCALE = os.getenv("FINTRACK_COLLATION_LOCALE", "ru_RU.UTF-8")
LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO")

DEFAULT_CATEGORY_COLOR = "#CBD5E0"
CURRENCY_SYMBOL = "₽"


@dataclass(frozen=True)
class Settings:
    store_path: Path = STORE_PATH
    seed_path: Path = SEED_PATH
    latency_min_ms: int = LATENCY_MIN_MS
    latency_max_ms: int = LATENCY_MAX_MS
    collation_locale: str = COLLATION_LOCALE

    @property
    def latency_range(self) -> tuple[float, float]:
        """Latency bounds in seconds."""
        return self.latency_min_ms / 1000, self.latency_max_ms / 1000


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def ensure_data_directories() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
