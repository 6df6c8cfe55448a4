"""Exceptions raised by tasksmd-group."""


class TasksmdGroupError(Exception):
    """Base class for all tasksmd-group errors."""


class QueryError(TasksmdGroupError, ValueError):
    """A query instruction could not be understood."""
