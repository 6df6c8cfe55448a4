"""Nesting of tasks into groups, one level per 'group by' instruction."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from . import group
from .models import Task
from .query import Grouping

logger = logging.getLogger(__name__)

KeyPath = tuple[str, ...]


def paths_for_task(groupings: Sequence[Grouping], task: Task) -> list[KeyPath]:
    """Return every key path a task belongs to, one key per grouping.

    A grouping that gives several names for the task (only tags can) fans
    the task out into one path per combination. No groupings gives a single
    empty path.
    """
    names_per_grouping = [
        group.names_for_task(grouping.property, task) for grouping in groupings
    ]
    return list(itertools.product(*names_per_grouping))


@dataclass
class GroupTreeNode:
    """A node of the group tree. Children are kept in first-seen order."""

    children: dict[str, GroupTreeNode] = field(default_factory=dict)
    tasks: list[Task] = field(default_factory=list)

    def child(self, name: str) -> GroupTreeNode:
        node = self.children.get(name)
        if node is None:
            node = GroupTreeNode()
            self.children[name] = node
        return node


class GroupTree:
    """Tasks nested under their key paths.

    Keys are never re-sorted: each level lists its keys in the order the
    first task with that key was inserted.
    """

    def __init__(self) -> None:
        self.root = GroupTreeNode()

    def insert(self, task: Task, key_path: Sequence[str]) -> None:
        node = self.root
        for key in key_path:
            node = node.child(key)
        node.tasks.append(task)

    def render(self) -> list[tuple[KeyPath, list[Task]]]:
        """Walk the tree depth-first, returning (heading path, tasks) per leaf."""
        result: list[tuple[KeyPath, list[Task]]] = []
        self._walk(self.root, (), result)
        return result

    def _walk(
        self,
        node: GroupTreeNode,
        path: KeyPath,
        result: list[tuple[KeyPath, list[Task]]],
    ) -> None:
        if not node.children:
            result.append((path, node.tasks))
            return
        for name, child in node.children.items():
            self._walk(child, path + (name,), result)


@dataclass(frozen=True)
class GroupDisplayHeading:
    """A heading to show above a group. Level 0 is the outermost grouping."""

    nesting_level: int
    name: str


class GroupHeadings:
    """Works out which headings change from one group to the next.

    Groups come out of the tree in order, so consecutive groups often share
    their outer names. Only names that differ from the previous group at the
    same level are displayed, and a new name resets all deeper levels.
    """

    def __init__(self, depth: int) -> None:
        self._last_heading_at_level: list[str | None] = [None] * depth

    def headings_for_group(self, group_names: Sequence[str]) -> list[GroupDisplayHeading]:
        headings: list[GroupDisplayHeading] = []
        for level, name in enumerate(group_names):
            if name != self._last_heading_at_level[level]:
                headings.append(GroupDisplayHeading(level, name))
                for deeper in range(level, len(group_names)):
                    self._last_heading_at_level[deeper] = None
                self._last_heading_at_level[level] = name
        return headings


@dataclass
class TaskGroup:
    """One leaf group: its names, the headings to show, and its tasks."""

    group_names: KeyPath
    group_headings: list[GroupDisplayHeading]
    tasks: list[Task]

    def __str__(self) -> str:
        lines = [f"Group names: [{', '.join(self.group_names)}]"]
        for heading in self.group_headings:
            lines.append(
                f"{'#' * (4 + heading.nesting_level)} "
                f"[{heading.nesting_level}] {heading.name}"
            )
        lines.extend(task.to_file_line() for task in self.tasks)
        return "\n".join(lines)


class TaskGroups:
    """The result of grouping a list of tasks.

    Args:
        groupings: Zero or more groupings, outermost first
        tasks: Tasks in display order; grouping never re-sorts them
    """

    def __init__(self, groupings: Sequence[Grouping], tasks: Sequence[Task]) -> None:
        self.groupings = list(groupings)
        self._total_tasks_count = len(tasks)
        self.groups: list[TaskGroup] = []

        tree = GroupTree()
        for task in tasks:
            for key_path in paths_for_task(self.groupings, task):
                tree.insert(task, key_path)

        headings = GroupHeadings(len(self.groupings))
        for group_names, group_tasks in tree.render():
            self.groups.append(
                TaskGroup(
                    group_names=group_names,
                    group_headings=headings.headings_for_group(group_names),
                    tasks=group_tasks,
                )
            )
        logger.debug(
            "Grouped %d tasks into %d groups by [%s]",
            self._total_tasks_count,
            len(self.groups),
            ", ".join(g.property.value for g in self.groupings),
        )

    def total_tasks_count(self) -> int:
        """Number of input tasks; tasks fanned out into several groups count once."""
        return self._total_tasks_count

    def __str__(self) -> str:
        lines = ["Groupers (if any):"]
        lines.extend(f"- {g.property.value}" for g in self.groupings)
        for task_group in self.groups:
            lines.append("")
            lines.append(str(task_group))
            lines.append("---")
        lines.append("")
        lines.append(f"{self._total_tasks_count} tasks")
        return "\n".join(lines) + "\n"
