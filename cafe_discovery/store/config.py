from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PROCESSED_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class StoreConfig:
    cafes_csv: Path = Path(os.getenv("CAFES_CSV", str(_PROCESSED_DIR / "cafes.csv")))
    tag_reports_csv: Path = Path(
        os.getenv("TAG_REPORTS_CSV", str(_PROCESSED_DIR / "tag_reports.csv"))
    )


DEFAULT_STORE_CONFIG = StoreConfig()
