"""Parsing of 'group by' instructions from a query block."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .errors import QueryError

logger = logging.getLogger(__name__)

RE_GROUP_BY = re.compile(r"^group by\s+(\S+)$", re.IGNORECASE)


class GroupingProperty(str, Enum):
    """Task properties that tasks can be grouped by."""

    BACKLINK = "backlink"
    DONE = "done"
    DUE = "due"
    FILENAME = "filename"
    FOLDER = "folder"
    HAPPENS = "happens"
    HEADING = "heading"
    PATH = "path"
    PRIORITY = "priority"
    RECURRENCE = "recurrence"
    RECURRING = "recurring"
    ROOT = "root"
    SCHEDULED = "scheduled"
    START = "start"
    STATUS = "status"
    TAGS = "tags"


@dataclass(frozen=True)
class Grouping:
    """One 'group by' instruction."""

    property: GroupingProperty


@dataclass
class Query:
    """The instructions of a query block that this package understands."""

    groupings: list[Grouping] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


def parse_property(name: str) -> GroupingProperty:
    """Look up a grouping property by its identifier (case-insensitive)."""
    try:
        return GroupingProperty(name.strip().lower())
    except ValueError:
        supported = ", ".join(p.value for p in GroupingProperty)
        raise QueryError(
            f"Unknown grouping property '{name.strip()}' (supported: {supported})"
        ) from None


def parse_group_by_line(line: str) -> Grouping:
    """Parse a single 'group by <property>' instruction."""
    m = RE_GROUP_BY.match(line.strip())
    if not m:
        raise QueryError(f"Not a 'group by' instruction: {line.strip()!r}")
    try:
        return Grouping(parse_property(m.group(1)))
    except QueryError as e:
        raise QueryError(f"{e} in line {line.strip()!r}") from None


def parse_groupings(values: Iterable[str]) -> list[Grouping]:
    """Parse instruction lines or bare property names, keeping their order."""
    groupings: list[Grouping] = []
    for value in values:
        if RE_GROUP_BY.match(value.strip()):
            groupings.append(parse_group_by_line(value))
        else:
            groupings.append(Grouping(parse_property(value)))
    return groupings


def parse_query(source: str) -> Query:
    """Parse a multi-line query block.

    'group by' lines become groupings in the order they appear. Blank lines
    and '#' comments are skipped. Any other instruction (filters, sorting)
    is kept in ``ignored`` for the caller to deal with.
    """
    query = Query()
    for line in source.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.lower().startswith("group by"):
            query.groupings.append(parse_group_by_line(stripped))
        else:
            logger.debug("Ignoring instruction: %s", stripped)
            query.ignored.append(stripped)
    return query
