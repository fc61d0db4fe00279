"""
error taxonomy for scholartree.

every error carries a human-readable message; the session shows str(err)
in its single error slot.
"""


class ExplorerError(Exception):
    """base class for all session-visible errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ValidationError(ExplorerError):
    """precondition failed before any collaborator call."""
    pass


class BudgetExceededError(ValidationError):
    """mutation budget used up for this session."""

    def __init__(self, limit: int):
        super().__init__(f"Iteration limit of {limit} reached.")
        self.limit = limit


class CollaboratorError(ExplorerError):
    """external model call failed or returned a malformed response."""
    pass


class ProviderError(ExplorerError):
    """transport-level failure inside an LLM provider."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code
