"""Markdown and JSON output for grouped tasks."""

from __future__ import annotations

from .task_groups import GroupDisplayHeading, TaskGroups


def heading_prefix(heading: GroupDisplayHeading) -> str:
    """The outermost grouping is a level-4 heading; deeper ones stop at 6."""
    return "#" * min(4 + heading.nesting_level, 6)


def render_task_groups(task_groups: TaskGroups) -> str:
    """Render grouped tasks as a Markdown document.

    Structure:
        #### Outer group

        ##### Inner group

        - [ ] task line
        - [x] task line

        N tasks
    """
    blocks: list[str] = []
    for task_group in task_groups.groups:
        for heading in task_group.group_headings:
            blocks.append(f"{heading_prefix(heading)} {heading.name}")
        if task_group.tasks:
            blocks.append("\n".join(task.to_file_line() for task in task_group.tasks))

    count = task_groups.total_tasks_count()
    blocks.append(f"{count} task" if count == 1 else f"{count} tasks")
    return "\n\n".join(blocks) + "\n"


def task_groups_to_dict(task_groups: TaskGroups) -> dict:
    """Return a JSON-ready description of the groups."""
    return {
        "groupings": [g.property.value for g in task_groups.groupings],
        "total_tasks": task_groups.total_tasks_count(),
        "groups": [
            {
                "names": list(task_group.group_names),
                "tasks": [
                    {
                        "description": task.description,
                        "status": task.status.name,
                        "path": task.path,
                        "line": task.line_number + 1,
                    }
                    for task in task_group.tasks
                ],
            }
            for task_group in task_groups.groups
        ],
    }
