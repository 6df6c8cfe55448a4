"""Group tasks parsed from Markdown notes into nested, displayable groups."""

from .group import by, names_for_task
from .models import Priority, Recurrence, Status, Task, TaskFile
from .query import Grouping, GroupingProperty

__all__ = [
    "Grouping",
    "GroupingProperty",
    "Priority",
    "Recurrence",
    "Status",
    "Task",
    "TaskFile",
    "by",
    "names_for_task",
]
