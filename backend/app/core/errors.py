from enum import Enum


class ErrorMessage(Enum):
    USER_NOT_EXIST = ("USER_NOT_EXIST", "User does not exist")
    SCENARIO_NOT_FOUND = ("SCENARIO_NOT_FOUND", "Scenario not found")
    RUNNING_NOT_FOUND = ("RUNNING_NOT_FOUND", "Running session not found")
    INVALID_MONTH = ("INVALID_MONTH", "Month must be between 1 and 12")
    RUNNING_CONFLICT = (
        "RUNNING_CONFLICT",
        "Running session was modified or removed concurrently",
    )

    def __init__(self, code: str, text: str):
        self.code = code
        self.text = text


class RuntaleError(Exception):
    """Base error for a failed running-session operation."""

    def __init__(self, message: ErrorMessage):
        super().__init__(message.text)
        self.message = message

    @property
    def code(self) -> str:
        return self.message.code


class NotFoundError(RuntaleError):
    """A referenced user, scenario or running does not exist."""


class BadRequestError(RuntaleError):
    """The caller supplied an invalid id or argument in a read context."""


class ConflictError(RuntaleError):
    """The session changed underneath the request (optimistic lock lost)."""
