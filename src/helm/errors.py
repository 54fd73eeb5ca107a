"""
Errors — Failure taxonomy for the alignment core.

A rejected decision is never an error; these are raised only for
genuine failures.
"""


class HelmError(Exception):
    """Base class for all alignment core errors."""
    pass


class ConfigurationError(HelmError):
    """Raised when a value model or component configuration is malformed."""
    pass


class InvalidInputError(HelmError):
    """Raised when evaluation input is empty or malformed. Nothing is recorded."""
    pass


class InvalidTransitionError(HelmError):
    """Raised on an illegal task state change. The task is left unchanged."""

    def __init__(self, task_id: str, from_state: str, to_state: str):
        self.task_id = task_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Task {task_id}: illegal transition {from_state} -> {to_state}"
        )


class CapacityExceededError(HelmError):
    """Raised when a configured hard cap on live tasks would be exceeded."""
    pass
