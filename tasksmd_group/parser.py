"""Parser for checklist tasks in Markdown notes."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path

from .models import Priority, Recurrence, Status, Task, TaskFile

logger = logging.getLogger(__name__)

# Regex patterns
RE_HEADING = re.compile(r"^#{1,6}\s+(.+?)\s*$")
RE_FENCE = re.compile(r"^\s*(```|~~~)")
RE_TASK = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+\[(.)\]\s*(.*)$")
RE_TAG = re.compile(r"(?:^|\s)(#[^\s!@#$%^&*(),.?\":{}|<>]+)")
RE_TRAILING_TAG = re.compile(r"(?:^|\s)(#[^\s!@#$%^&*(),.?\":{}|<>]+)$")

_DATE = r"\s*(\d{4}-\d{2}-\d{2})$"
RE_PRIORITY = re.compile(r"\s*(⏫|🔼|🔽)\ufe0f?$")
RE_START = re.compile(r"🛫\ufe0f?" + _DATE)
RE_SCHEDULED = re.compile(r"(?:⏳|⌛)\ufe0f?" + _DATE)
RE_DUE = re.compile(r"(?:📅|📆|🗓)\ufe0f?" + _DATE)
RE_DONE = re.compile(r"✅\ufe0f?" + _DATE)
RE_RECURRENCE = re.compile(r"🔁\ufe0f?\s*([a-zA-Z0-9, !]+)$")

PRIORITY_SIGNIFIERS = {
    "⏫": Priority.HIGH,
    "🔼": Priority.MEDIUM,
    "🔽": Priority.LOW,
}

# Signifiers are stripped from the end of the line one at a time, in any
# order; this bounds the number of passes.
MAX_SIGNIFIER_PASSES = 20


def parse_tasks_md(content: str, path: str = "") -> TaskFile:
    """Parse the text of a Markdown note into a TaskFile model."""
    tasks: list[Task] = []
    current_heading: str | None = None
    open_fence: str | None = None

    for line_number, line in enumerate(content.splitlines()):
        # Nothing inside a fenced code block is a heading or a task
        m = RE_FENCE.match(line)
        if m:
            if open_fence is None:
                open_fence = m.group(1)
            elif m.group(1) == open_fence:
                open_fence = None
            continue
        if open_fence is not None:
            continue

        m = RE_HEADING.match(line)
        if m:
            current_heading = m.group(1)
            continue

        m = RE_TASK.match(line)
        if m:
            task = _parse_task_line(
                indicator=m.group(1),
                body=m.group(2),
                path=path,
                preceding_header=current_heading,
                line_number=line_number,
            )
            if task is not None:
                tasks.append(task)

    return TaskFile(tasks=tasks, source_path=path)


def parse_tasks_file(path: str | Path, root: str | Path | None = None) -> TaskFile:
    """Parse a Markdown note from disk.

    The task paths are recorded relative to ``root`` (the vault folder),
    with '/' separators.
    """
    p = Path(path)
    content = p.read_text(encoding="utf-8")
    if root is not None:
        relative = p.resolve().relative_to(Path(root).resolve()).as_posix()
    else:
        relative = p.as_posix()
    return parse_tasks_md(content, path=relative)


def _parse_task_line(
    indicator: str,
    body: str,
    path: str,
    preceding_header: str | None,
    line_number: int,
) -> Task | None:
    description = body.strip()
    if not description:
        return None

    priority = Priority.NONE
    dates: dict[str, date | None] = {
        "start_date": None,
        "scheduled_date": None,
        "due_date": None,
        "done_date": None,
    }
    recurrence: Recurrence | None = None
    trailing_tags: list[str] = []

    for _ in range(MAX_SIGNIFIER_PASSES):
        matched = False

        m = RE_PRIORITY.search(description)
        if m:
            priority = PRIORITY_SIGNIFIERS[m.group(1)]
            description = description[: m.start()].strip()
            matched = True

        for key, pattern in (
            ("done_date", RE_DONE),
            ("due_date", RE_DUE),
            ("scheduled_date", RE_SCHEDULED),
            ("start_date", RE_START),
        ):
            m = pattern.search(description)
            if m:
                dates[key] = _parse_date(m.group(1), key, line_number)
                description = description[: m.start()].strip()
                matched = True

        m = RE_RECURRENCE.search(description)
        if m:
            recurrence = Recurrence(m.group(1).strip())
            description = description[: m.start()].strip()
            matched = True

        # Tags between signifiers belong to the description, not the signifier
        m = RE_TRAILING_TAG.search(description)
        if m:
            trailing_tags.insert(0, m.group(1))
            description = description[: m.start()].strip()
            matched = True

        if not matched:
            break

    if trailing_tags:
        description = " ".join([description, *trailing_tags]).strip()

    return Task(
        description=description,
        status=Status.from_indicator(indicator),
        priority=priority,
        recurrence=recurrence,
        tags=tuple(RE_TAG.findall(description)),
        path=path,
        preceding_header=preceding_header,
        line_number=line_number,
        **dates,
    )


def _parse_date(raw: str, field_name: str, line_number: int) -> date | None:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        logger.warning(
            "Ignoring invalid %s '%s' on line %d", field_name, raw, line_number + 1
        )
        return None
