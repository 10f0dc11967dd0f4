"""Entity ID allocation.

IDs are ``<prefix><n>`` (``c1``, ``l2``, ``s3``).  The allocator parses the
numeric suffix of every existing id with the same prefix and hands out
max + 1, so ids stay collision-free within one entity kind.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        value = item.get("id")
    else:
        value = getattr(item, "id", None)
    return value if isinstance(value, str) else None


def highest_suffix(prefix: str, existing_items: Iterable[Any]) -> int:
    """Return the largest integer suffix among ids of the form ``prefix`` + digits (0 if none)."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for item in existing_items or ():
        item_id = _item_id(item)
        if item_id is None:
            continue
        m = pattern.match(item_id)
        if m:
            highest = max(highest, int(m.group(1)))
    return highest


def next_id(prefix: str, existing_items: Iterable[Any]) -> str:
    """Return ``prefix`` + (highest existing suffix + 1), or ``prefix + "1"``.

    *existing_items* may hold dicts or objects exposing an ``id`` attribute.
    Ids with a different prefix or a non-numeric suffix are ignored.
    """
    return f"{prefix}{highest_suffix(prefix, existing_items) + 1}"


class IdAllocator:
    """Stateful allocator that never re-issues a suffix within its lifetime.

    ``next_id`` alone would hand ``c4`` out again after ``c4`` is added and
    removed; the allocator remembers the highest suffix it has issued per
    prefix and always moves past it.
    """

    def __init__(self) -> None:
        self._issued: Dict[str, int] = {}

    def next_id(self, prefix: str, existing_items: Iterable[Any]) -> str:
        n = max(highest_suffix(prefix, existing_items), self._issued.get(prefix, 0)) + 1
        self._issued[prefix] = n
        return f"{prefix}{n}"

    def reset(self) -> None:
        self._issued.clear()
