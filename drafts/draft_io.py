"""
draft_io.py — Serialize and parse storyboard drafts.

Drafts are written with sorted keys and consistent indentation so that
identical documents always produce byte-identical slots (deterministic).
"""

import json
from typing import Any

from storyboard.models import StoryboardDoc


def serialize_draft(document: StoryboardDoc) -> str:
    """Serialize a (possibly invalid) document to draft text.

    Raises:
        TypeError: If the document holds values JSON cannot represent.
        ValueError: If the document contains a circular reference.
    """
    return json.dumps(document, sort_keys=True, indent=2, ensure_ascii=False) + "\n"  # POSIX trailing newline


def parse_draft(text: str) -> Any:
    """Parse draft text back into JSON data.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON.
    """
    return json.loads(text)
