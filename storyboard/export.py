"""The *generate* action: validated storyboard JSON or an error report.

Exactly one of the two is produced per call.  The document is written as
canonical JSON (sort_keys=True, indent=2) so identical documents always
produce byte-identical exports; the error report keeps document order so it
reads top to bottom like the form.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from storyboard.contract import validate_export
from storyboard.validator import ErrorMap, validate_storyboard

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


@dataclass(frozen=True)
class GenerateResult:
    ok: bool
    text: str
    errors: ErrorMap = field(default_factory=dict)

    @property
    def notification(self) -> str:
        if self.ok:
            return "JSON Generated Successfully!"
        return "Validation errors found. Check JSON preview for details."


def dump_storyboard(document: dict, *, indent: int = 2) -> str:
    """Serialize a storyboard to canonical JSON (sort_keys=True, indent=2)."""
    return json.dumps(document, sort_keys=True, indent=indent, ensure_ascii=False)


def dump_errors(errors: ErrorMap, *, indent: int = 2) -> str:
    """Serialize a path → messages mapping, preserving document order."""
    return json.dumps(errors, indent=indent, ensure_ascii=False)


def generate(document: Any) -> GenerateResult:
    """Validate *document* and render either the normalized JSON or the error report.

    The normalized document is also checked against the JSON Schema contract
    before it is returned.

    Raises:
        MalformedStoryboardError: *document* is not a dict.
        jsonschema.ValidationError: the normalized document breaks the contract.
    """
    result = validate_storyboard(document)
    if not result.ok:
        logger.info("generate: %d field(s) with errors", len(result.errors))
        return GenerateResult(ok=False, text=dump_errors(result.errors), errors=result.errors)

    validate_export(result.document)
    return GenerateResult(ok=True, text=dump_storyboard(result.document))


def export_filename(project_title: Optional[str]) -> str:
    """Download filename for a project: non-alphanumerics → ``_``, lower-cased."""
    safe = _UNSAFE_FILENAME_RE.sub("_", project_title or "untitled").lower()
    return f"{safe}.json"


def write_export(path: Path, text: str) -> Path:
    """Write generated JSON *text* to *path*, creating parent directories.

    Raises:
        ValueError: *text* is empty (nothing has been generated yet).
    """
    if not text:
        raise ValueError("Generate JSON first!")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    return path
