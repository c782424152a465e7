"""
DCM Decision Support: Configuration
=================================
Runtime settings read from the environment. A project-level .env file is
loaded first when present.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PACKAGE_DIR = Path(__file__).resolve().parent                  # dcm_decision/
PROJECT_ROOT = PACKAGE_DIR.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    approach_source: str = "final"   # which approach distribution is surfaced

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("DCM_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("DCM_LOG_FILE") or None,
            approach_source=os.getenv("DCM_APPROACH_SOURCE", "final").strip().lower(),
        )


settings = Settings.from_env()
