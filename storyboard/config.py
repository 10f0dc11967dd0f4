from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storyboard.constants import DEFAULT_AUTOSAVE_DELAY_SEC, DEFAULT_DRAFT_KEY


@dataclass(frozen=True)
class Settings:
    draft_dir: Path
    draft_key: str = DEFAULT_DRAFT_KEY
    autosave_delay_sec: float = DEFAULT_AUTOSAVE_DELAY_SEC
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            draft_dir=Path(
                os.environ.get(
                    "STORYBOARD_DRAFT_DIR",
                    str(Path.home() / ".storyboard_engine" / "drafts"),
                )
            ),
            draft_key=os.environ.get("STORYBOARD_DRAFT_KEY", DEFAULT_DRAFT_KEY),
            autosave_delay_sec=float(
                os.environ.get("STORYBOARD_AUTOSAVE_DELAY", DEFAULT_AUTOSAVE_DELAY_SEC)
            ),
            log_level=os.environ.get("STORYBOARD_LOG_LEVEL", "WARNING").upper(),
        )
