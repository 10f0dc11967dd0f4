"""
store.py — Durable key-value slots for storyboard drafts.

Layout under <base_dir>/ for ``FileDraftStore``:

    <key>.json      ← latest draft text for one slot

Writes go to a temporary sibling first and are moved into place with
``os.replace`` so a crash mid-write never leaves a truncated draft behind.
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not _KEY_RE.match(key) or key.startswith("."):
        raise ValueError(f"Invalid draft key: {key!r}")
    return key


class DraftStore(ABC):
    """A named durable slot holding serialized draft text."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the slot's text, or None when the slot is empty."""

    @abstractmethod
    def write(self, key: str, text: str) -> None:
        """Overwrite the slot with *text*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Empty the slot; deleting an empty slot is a no-op."""


class FileDraftStore(DraftStore):
    """One JSON file per slot under *base_dir*."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def slot_path(self, key: str) -> Path:
        return self.base_dir / f"{_check_key(key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.slot_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        path = self.slot_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        self.slot_path(key).unlink(missing_ok=True)


class MemoryDraftStore(DraftStore):
    """In-process slots; nothing survives the process."""

    def __init__(self, slots: Optional[Dict[str, str]] = None):
        self.slots: Dict[str, str] = dict(slots or {})

    def read(self, key: str) -> Optional[str]:
        return self.slots.get(_check_key(key))

    def write(self, key: str, text: str) -> None:
        self.slots[_check_key(key)] = text

    def delete(self, key: str) -> None:
        self.slots.pop(_check_key(key), None)
