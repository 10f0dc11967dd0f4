"""JSON Schema contract for exported storyboards.

The schema is derived from the pydantic ``Storyboard`` model so the exported
artifact and the validation engine cannot drift apart.  Cross-entity rules
(references, model-dependent ratios) are not expressible here and remain the
validation engine's job.
"""
import json
from functools import lru_cache
from pathlib import Path

import jsonschema

from storyboard.models import Storyboard


@lru_cache(maxsize=1)
def storyboard_json_schema() -> dict:
    """Return the Storyboard JSON Schema (draft 2020-12)."""
    schema = Storyboard.model_json_schema()
    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    return schema


def validate_export(data: dict) -> None:
    """Validate a normalized storyboard dict against the JSON Schema contract.

    Raises jsonschema.ValidationError if non-conformant.
    """
    jsonschema.validate(data, storyboard_json_schema())


def write_schema(path: Path) -> None:
    """Write the Storyboard JSON Schema to *path* (sorted keys, 2-space indent)."""
    path.write_text(
        json.dumps(storyboard_json_schema(), sort_keys=True, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
