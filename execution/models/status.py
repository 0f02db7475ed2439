# Action, result and summary enums
"""Status enums and states"""
from enum import Enum


class ActionType(str, Enum):
    """Kind of change an action performs"""
    SHELL = "shell"
    CREATE = "create"
    UPDATE = "update"
    RENAME = "rename"
    DELETE = "delete"


class ActionStatus(str, Enum):
    """Outcome of a single action as reported by the runner"""
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


class SummaryState(str, Enum):
    """Lifecycle of a summary stream"""
    PENDING = "pending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SummaryState.COMPLETED, SummaryState.FAILED)
