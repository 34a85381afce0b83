"""Typed errors raised by the task core and mapped to status codes by the API."""


class TaskServiceError(Exception):
    pass


class ValidationError(TaskServiceError):
    """Malformed input, raised before any store access."""


class NotFoundError(TaskServiceError):
    """Unknown id, another owner's task, or a category that was never used."""


class ConflictError(TaskServiceError):
    """The request contradicts the current state of the task or category."""


class StorageError(TaskServiceError):
    """A Redis command or atomic batch could not be applied."""
