"""Data models for tasks parsed from Markdown notes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar

RE_FILENAME = re.compile(r"([^/]+)\.md$")


class Priority(str, Enum):
    """Task priority. The value is the rank used when grouping."""

    HIGH = "1"
    MEDIUM = "2"
    NONE = "3"
    LOW = "4"


@dataclass(frozen=True)
class Status:
    """A checklist status: the character between the brackets and its name."""

    indicator: str
    name: str

    TODO: ClassVar[Status]
    DONE: ClassVar[Status]

    @classmethod
    def from_indicator(cls, indicator: str) -> Status:
        return cls(indicator, _STATUS_NAMES.get(indicator, "Unknown"))


_STATUS_NAMES = {
    " ": "Todo",
    "x": "Done",
    "X": "Done",
    "/": "In Progress",
    "-": "Cancelled",
}

Status.TODO = Status(" ", "Todo")
Status.DONE = Status("x", "Done")


@dataclass(frozen=True)
class Recurrence:
    """A recurrence rule, kept in its textual form (e.g. ``every week``)."""

    rule: str

    def to_text(self) -> str:
        return self.rule


@dataclass(frozen=True)
class Task:
    """A single task parsed from a checklist line in a Markdown note."""

    description: str
    status: Status = Status.TODO
    priority: Priority = Priority.NONE
    start_date: date | None = None
    scheduled_date: date | None = None
    due_date: date | None = None
    done_date: date | None = None
    recurrence: Recurrence | None = None
    tags: tuple[str, ...] = ()
    path: str = ""
    preceding_header: str | None = None
    line_number: int = 0

    @property
    def filename(self) -> str | None:
        """The note's file name without ``.md``, or None if the origin is unknown."""
        m = RE_FILENAME.search(self.path)
        return m.group(1) if m else None

    @property
    def happens_date(self) -> date | None:
        """Earliest of the start, scheduled and due dates."""
        dates = [
            d for d in (self.start_date, self.scheduled_date, self.due_date)
            if d is not None
        ]
        return min(dates) if dates else None

    def get_link_text(self, is_filename_unique: bool) -> str | None:
        """Return the text of a link back to this task's location.

        Args:
            is_filename_unique: If True, the bare file name is enough to
                identify the note; otherwise the full path is used.

        Returns:
            The link text, or None when the task has no known location.
        """
        if is_filename_unique:
            link_text = self.filename
        else:
            link_text = "/" + self.path if self.path else None
        if link_text is None:
            return None
        if self.preceding_header and self.preceding_header != link_text:
            link_text = f"{link_text} > {self.preceding_header}"
        return link_text

    def to_file_line(self) -> str:
        """Render the task back as a Markdown checklist line."""
        parts = [f"- [{self.status.indicator}] {self.description}"]
        signifier = _PRIORITY_SIGNIFIERS.get(self.priority)
        if signifier:
            parts.append(signifier)
        if self.recurrence is not None:
            parts.append(f"🔁 {self.recurrence.to_text()}")
        for emoji, value in (
            ("🛫", self.start_date),
            ("⏳", self.scheduled_date),
            ("📅", self.due_date),
            ("✅", self.done_date),
        ):
            if value is not None:
                parts.append(f"{emoji} {value.isoformat()}")
        return " ".join(parts)


_PRIORITY_SIGNIFIERS = {
    Priority.HIGH: "⏫",
    Priority.MEDIUM: "🔼",
    Priority.LOW: "🔽",
}


@dataclass
class TaskFile:
    """All tasks parsed from one Markdown note."""

    tasks: list[Task] = field(default_factory=list)
    source_path: str = ""

    @property
    def by_status(self) -> dict[str, list[Task]]:
        groups: dict[str, list[Task]] = {}
        for task in self.tasks:
            groups.setdefault(task.status.name, []).append(task)
        return groups
