"""CLI entry point for tasksmd-group."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .errors import QueryError
from .group import by
from .markdown import render_task_groups, task_groups_to_dict
from .models import Task
from .parser import parse_tasks_file
from .query import Grouping, parse_groupings, parse_query


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tasksmd-group",
        description="Group the checklist tasks of Markdown notes into nested headings.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Markdown files, or folders to scan for *.md files",
    )
    parser.add_argument(
        "--group-by",
        action="append",
        default=None,
        metavar="PROPERTY",
        help="Property to group by; repeat to nest groups, outermost first "
        "(or set TASKSMD_GROUP_BY, comma separated)",
    )
    parser.add_argument(
        "--query",
        type=str,
        default=None,
        help="File containing a query block with 'group by' lines",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Vault folder that task paths are relative to "
        "(or set TASKSMD_VAULT_ROOT; default: common folder of the inputs)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write the groups to a JSON file",
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    # Resolve groupings
    try:
        groupings = _resolve_groupings(args.group_by, args.query)
    except (QueryError, OSError) as e:
        logging.error("%s", e)
        return 1

    # Collect notes
    inputs = [Path(p) for p in args.paths]
    missing = [p for p in inputs if not p.exists()]
    if missing:
        for p in missing:
            logging.error("Path not found: %s", p)
        return 1
    notes = _collect_notes(inputs)
    root = Path(args.root or os.environ.get("TASKSMD_VAULT_ROOT") or _common_root(inputs))

    # Parse
    tasks: list[Task] = []
    for note in notes:
        if not note.resolve().is_relative_to(root.resolve()):
            logging.error("%s is not inside the vault folder %s", note, root)
            return 1
        try:
            task_file = parse_tasks_file(note, root=root)
        except (OSError, UnicodeDecodeError) as e:
            logging.error("Could not read %s: %s", note, e)
            return 1
        logging.debug("Found %d tasks in %s", len(task_file.tasks), note)
        tasks.extend(task_file.tasks)
    logging.info("Found %d tasks in %d notes", len(tasks), len(notes))

    # Group and render
    task_groups = by(groupings, tasks)
    sys.stdout.write(render_task_groups(task_groups))

    if args.output_json:
        Path(args.output_json).write_text(
            json.dumps(task_groups_to_dict(task_groups), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logging.info("Results written to %s", args.output_json)

    return 0


def _resolve_groupings(group_by: list[str] | None, query_path: str | None) -> list[Grouping]:
    """Groupings from --query, then --group-by, then TASKSMD_GROUP_BY."""
    groupings: list[Grouping] = []
    if query_path:
        source = Path(query_path).read_text(encoding="utf-8")
        groupings.extend(parse_query(source).groupings)
    if group_by:
        groupings.extend(parse_groupings(group_by))
    if not groupings and not query_path:
        env_value = os.environ.get("TASKSMD_GROUP_BY", "")
        names = [name for name in env_value.split(",") if name.strip()]
        groupings.extend(parse_groupings(names))
    return groupings


def _collect_notes(inputs: list[Path]) -> list[Path]:
    notes: list[Path] = []
    for p in inputs:
        if p.is_dir():
            notes.extend(sorted(f for f in p.rglob("*.md") if f.is_file()))
        else:
            notes.append(p)
    return notes


def _common_root(inputs: list[Path]) -> Path:
    folders = [str(p.resolve() if p.is_dir() else p.resolve().parent) for p in inputs]
    return Path(os.path.commonpath(folders))


if __name__ == "__main__":
    sys.exit(main())
