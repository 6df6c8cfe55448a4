"""Implementation of the 'group by' instruction.

Each grouping property has one grouper: a pure function that takes a task
and returns the names of the groups the task belongs to. The names are
rendered as headings, so Markdown characters in free text (file and folder
names) are escaped. Headings and tags are already Markdown and are kept as
written.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date
from typing import TYPE_CHECKING

from .models import Priority, Task
from .query import Grouping, GroupingProperty

if TYPE_CHECKING:
    from .task_groups import TaskGroups

Grouper = Callable[[Task], list[str]]

GROUP_DATE_FORMAT = "%Y-%m-%d %A"
UNKNOWN_LOCATION = "Unknown Location"

_PRIORITY_NAMES = {
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.NONE: "None",
    Priority.LOW: "Low",
}


def by(groupings: Sequence[Grouping], tasks: Sequence[Task]) -> TaskGroups:
    """Group tasks according to zero or more 'group by' instructions.

    Args:
        groupings: One Grouping per 'group by' line, outermost first
        tasks: The tasks matching the query, already filtered and sorted
    """
    from .task_groups import TaskGroups

    return TaskGroups(groupings, tasks)


def names_for_task(property: GroupingProperty, task: Task) -> list[str]:
    """Return the group names of a single task for one grouping property."""
    return GROUPERS[property](task)


def escape_markdown_characters(text: str) -> str:
    return text.replace("\\", "\\\\").replace("_", "\\_")


def group_by_priority(task: Task) -> list[str]:
    priority_name = _PRIORITY_NAMES.get(task.priority, "ERROR")
    rank = getattr(task.priority, "value", task.priority)
    return [f"Priority {rank}: {priority_name}"]


def group_by_recurrence(task: Task) -> list[str]:
    if task.recurrence is not None:
        return [task.recurrence.to_text()]
    return ["None"]


def group_by_recurring(task: Task) -> list[str]:
    if task.recurrence is not None:
        return ["Recurring"]
    return ["Not Recurring"]


def group_by_start_date(task: Task) -> list[str]:
    return [_string_from_date(task.start_date, "start")]


def group_by_scheduled_date(task: Task) -> list[str]:
    return [_string_from_date(task.scheduled_date, "scheduled")]


def group_by_due_date(task: Task) -> list[str]:
    return [_string_from_date(task.due_date, "due")]


def group_by_done_date(task: Task) -> list[str]:
    return [_string_from_date(task.done_date, "done")]


def group_by_happens_date(task: Task) -> list[str]:
    return [_string_from_date(task.happens_date, "happens")]


def _string_from_date(value: date | None, field_name: str) -> str:
    if value is None:
        return f"No {field_name} date"
    return value.strftime(GROUP_DATE_FORMAT)


def group_by_path(task: Task) -> list[str]:
    return [escape_markdown_characters(task.path.replace(".md", "", 1))]


def group_by_folder(task: Task) -> list[str]:
    path = task.path
    filename_with_extension = f"{task.filename}.md"
    index = path.rfind(filename_with_extension)
    folder = path[:index] if index != -1 else ""
    if folder == "":
        return ["/"]
    return [escape_markdown_characters(folder)]


def group_by_filename(task: Task) -> list[str]:
    # Notes with the same name in different folders share a group.
    filename = task.filename
    if filename is None:
        return [UNKNOWN_LOCATION]
    return [f"[[{escape_markdown_characters(filename)}]]"]


def group_by_root(task: Task) -> list[str]:
    path = task.path.replace("\\", "/")
    separator_index = path.find("/")
    if separator_index == -1:
        return ["/"]
    return [escape_markdown_characters(path[: separator_index + 1])]


def group_by_backlink(task: Task, collapse_identical_heading: bool = True) -> list[str]:
    """Group by the link back to the task: file name, then heading.

    Args:
        task: The task to group
        collapse_identical_heading: If True, a heading with the same text as
            the file name is dropped, leaving just the file name.
    """
    link_text = task.get_link_text(is_filename_unique=True)
    if link_text is None:
        return [UNKNOWN_LOCATION]

    filename_component = UNKNOWN_LOCATION
    if task.filename is not None:
        filename_component = escape_markdown_characters(task.filename)

    if not task.preceding_header:
        return [filename_component]

    heading_component = group_by_heading(task)[0]
    if collapse_identical_heading and filename_component == heading_component:
        return [filename_component]
    return [f"{filename_component} > {heading_component}"]


def group_by_status(task: Task) -> list[str]:
    # Only 'Todo' and 'Done' are used here: anything other than a space is
    # 'Done', however many custom statuses exist.
    if task.status.indicator == " ":
        return ["Todo"]
    return ["Done"]


def group_by_heading(task: Task) -> list[str]:
    if not task.preceding_header:
        return ["(No heading)"]
    return [task.preceding_header]


def group_by_tags(task: Task) -> list[str]:
    if not task.tags:
        return ["(No tags)"]
    return list(task.tags)


GROUPERS: dict[GroupingProperty, Grouper] = {
    GroupingProperty.BACKLINK: group_by_backlink,
    GroupingProperty.DONE: group_by_done_date,
    GroupingProperty.DUE: group_by_due_date,
    GroupingProperty.FILENAME: group_by_filename,
    GroupingProperty.FOLDER: group_by_folder,
    GroupingProperty.HAPPENS: group_by_happens_date,
    GroupingProperty.HEADING: group_by_heading,
    GroupingProperty.PATH: group_by_path,
    GroupingProperty.PRIORITY: group_by_priority,
    GroupingProperty.RECURRENCE: group_by_recurrence,
    GroupingProperty.RECURRING: group_by_recurring,
    GroupingProperty.ROOT: group_by_root,
    GroupingProperty.SCHEDULED: group_by_scheduled_date,
    GroupingProperty.START: group_by_start_date,
    GroupingProperty.STATUS: group_by_status,
    GroupingProperty.TAGS: group_by_tags,
}

_missing = set(GroupingProperty) - set(GROUPERS)
if _missing:
    raise RuntimeError(f"No grouper for: {sorted(p.value for p in _missing)}")
