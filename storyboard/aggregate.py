"""Derived values computed from the current document.

All functions are pure: no I/O, no cached state.  Callers recompute on every
change to ``scenes`` or the target duration.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from storyboard.models import StoryboardDoc

Number = Union[int, float]


def _seconds(value: Any) -> Number:
    # bool is an int subclass; a checkbox value is not a duration
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def total_duration(scenes: Iterable[Any]) -> Number:
    """Sum ``duration_sec`` over *scenes*; missing or non-numeric values count as 0."""
    total: Number = 0
    for scene in scenes or ():
        if isinstance(scene, dict):
            total += _seconds(scene.get("duration_sec"))
    return total


@dataclass(frozen=True)
class DurationSummary:
    total: Number
    target: Number
    exceeded: bool

    def label(self) -> str:
        text = f"{self.total}s / {self.target}s"
        if self.exceeded:
            text += " (Target duration exceeded.)"
        return text


def duration_summary(document: StoryboardDoc) -> DurationSummary:
    """Total scene duration against ``metadata.total_duration_sec``."""
    scenes = document.get("scenes")
    metadata = document.get("metadata")
    target = _seconds(metadata.get("total_duration_sec")) if isinstance(metadata, dict) else 0
    total = total_duration(scenes if isinstance(scenes, list) else [])
    return DurationSummary(total=total, target=target, exceeded=total > target)
