"""storyboard-engine CLI entry point."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="storyboard-engine",
        description="Storyboard Engine — validated storyboard JSON for video prompts",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    template_parser = sub.add_parser("template", help="Write the starter storyboard")
    template_parser.add_argument(
        "--output", required=True, metavar="storyboard.json",
        help="Destination path for the starter storyboard",
    )

    validate_parser = sub.add_parser("validate", help="Validate a storyboard JSON file")
    validate_parser.add_argument(
        "--storyboard", required=True, metavar="storyboard.json",
        help="Path to a storyboard JSON file",
    )

    generate_parser = sub.add_parser(
        "generate",
        help="Validate a storyboard and emit normalized JSON or an error report",
    )
    generate_parser.add_argument(
        "--storyboard", required=True, metavar="storyboard.json",
        help="Path to a storyboard JSON file",
    )
    generate_parser.add_argument(
        "--output", metavar="out.json",
        help="Write the generated JSON here (default: stdout)",
    )

    schema_parser = sub.add_parser("schema", help="Write the storyboard JSON Schema")
    schema_parser.add_argument(
        "--output", required=True, metavar="schema.json",
        help="Destination path for the JSON Schema",
    )

    duration_parser = sub.add_parser("duration", help="Show total scene duration vs. target")
    duration_parser.add_argument(
        "--storyboard", required=True, metavar="storyboard.json",
        help="Path to a storyboard JSON file",
    )

    for kind in ("character", "location"):
        remove_parser = sub.add_parser(
            f"remove-{kind}",
            help=f"Remove a {kind}, clearing references to it when confirmed",
        )
        remove_parser.add_argument(
            "--storyboard", required=True, metavar="storyboard.json",
            help="Storyboard JSON file to edit in place",
        )
        remove_parser.add_argument("--id", required=True, help=f"{kind.capitalize()} id")
        remove_parser.add_argument(
            "--yes", action="store_true",
            help="Confirm clearing references that use this entity",
        )

    sub.add_parser("draft-show", help="Print the saved draft (or the template)")
    sub.add_parser("draft-reset", help="Delete the saved draft")

    args = parser.parse_args()

    from storyboard.config import Settings
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "template":
        from storyboard.export import dump_storyboard
        from storyboard.template import template
        Path(args.output).write_text(dump_storyboard(template()) + "\n", encoding="utf-8")
        print(f"OK: template written to {args.output}")
        sys.exit(0)
    elif args.command == "validate":
        from storyboard.validator import format_errors, validate_storyboard_file
        try:
            result = validate_storyboard_file(Path(args.storyboard))
        except ValueError as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        if not result.ok:
            print("ERROR: invalid Storyboard")
            for line in format_errors(result.errors):
                print(f"  {line}", file=sys.stderr)
            sys.exit(1)
        print("OK: Storyboard is valid")
        sys.exit(0)
    elif args.command == "generate":
        sys.exit(generate_file(Path(args.storyboard), Path(args.output) if args.output else None))
    elif args.command == "schema":
        from storyboard.contract import write_schema
        write_schema(Path(args.output))
        print(f"OK: schema written to {args.output}")
        sys.exit(0)
    elif args.command == "duration":
        from storyboard.aggregate import duration_summary
        try:
            document = _read_storyboard(Path(args.storyboard))
        except ValueError as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        print(duration_summary(document).label())
        sys.exit(0)
    elif args.command in ("remove-character", "remove-location"):
        sys.exit(remove_entity(args.command.split("-", 1)[1], Path(args.storyboard), args.id, args.yes))
    elif args.command == "draft-show":
        from storyboard.export import dump_storyboard
        print(dump_storyboard(_gateway(settings).load(settings.draft_key)))
        sys.exit(0)
    elif args.command == "draft-reset":
        _gateway(settings).clear(settings.draft_key)
        print(f"OK: draft {settings.draft_key!r} cleared")
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(1)


def _read_storyboard(path: Path) -> dict:
    """Load a storyboard JSON object from *path*.

    Raises:
        ValueError: missing file, invalid JSON, or a non-object top level.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Storyboard file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Storyboard must be a JSON object")
    return data


def _gateway(settings):
    from drafts import DraftGateway, FileDraftStore
    return DraftGateway(FileDraftStore(settings.draft_dir), delay=settings.autosave_delay_sec)


def generate_file(storyboard_path: Path, output_path: Path | None) -> int:
    """Run the generate action on a file; returns the process exit code.

    The generated text (document or error report) goes to *output_path* when
    given, otherwise to stdout.  Exit code is 1 when validation failed.
    """
    from storyboard.export import generate, write_export

    try:
        result = generate(_read_storyboard(storyboard_path))
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 1

    if output_path is None:
        print(result.text)
    else:
        write_export(output_path, result.text)
        print(f"{'OK' if result.ok else 'ERROR'}: {result.notification}")
    return 0 if result.ok else 1


def remove_entity(kind: str, storyboard_path: Path, entity_id: str, confirmed: bool) -> int:
    """Remove a character or location from a storyboard file in place.

    References are cleared only with *confirmed*; otherwise the file is left
    untouched and the usages are reported.
    """
    from storyboard import integrity
    from storyboard.export import dump_storyboard

    try:
        document = _read_storyboard(storyboard_path)
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 1

    planner = integrity.plan_character_removal if kind == "character" else integrity.plan_location_removal
    remover = integrity.remove_character if kind == "character" else integrity.remove_location
    plan = planner(document, entity_id)

    updated = remover(document, entity_id, confirm=lambda _plan: confirmed)
    if updated is document:
        if plan.requires_confirmation and not confirmed:
            print(f"ERROR: {plan.describe()}; pass --yes to clear these references")
        else:
            print(f"ERROR: no {kind} with id {entity_id!r}")
        return 1

    storyboard_path.write_text(dump_storyboard(updated) + "\n", encoding="utf-8")
    print(f"OK: removed {kind} {entity_id!r}")
    return 0


if __name__ == "__main__":
    main()
