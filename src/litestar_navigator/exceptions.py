"""Exception hierarchy for litestar-navigator."""

from __future__ import annotations

from litestar_navigator.core.types import CodecErrorCode

__all__ = (
    "InvalidActionError",
    "NavigatorError",
    "StateCodecError",
    "WorkflowNotFoundError",
    "WorkflowValidationError",
)


class NavigatorError(Exception):
    """Base exception for all litestar-navigator errors.

    All exceptions raised by litestar-navigator inherit from this class, so
    callers can catch every navigation-related error with a single except clause.
    """


class WorkflowNotFoundError(NavigatorError):
    """Raised when a workflow definition is not found.

    This occurs when a state token or a request references a workflow id that
    is neither registered nor present in the workflow directory.

    Attributes:
        workflow_id: The id of the workflow that was not found.
        version: The specific version requested, if any.
    """

    code = "WORKFLOW_NOT_FOUND"

    def __init__(self, workflow_id: str, version: str | None = None) -> None:
        """Initialize the exception with workflow details.

        Args:
            workflow_id: The id of the workflow that was not found.
            version: The specific version requested, if any.
        """
        self.workflow_id = workflow_id
        self.version = version
        msg = f"Workflow '{workflow_id}'"
        if version:
            msg += f" version '{version}'"
        msg += " not found"
        super().__init__(msg)


class WorkflowValidationError(NavigatorError):
    """Raised when a workflow definition fails schema or integrity validation.

    Attributes:
        workflow_id: The id (or file stem) of the offending definition.
        errors: List of ``"<field.path>: <message>"`` validation messages.
    """

    code = "WORKFLOW_VALIDATION_ERROR"

    def __init__(self, workflow_id: str, errors: list[str]) -> None:
        """Initialize the exception with validation errors.

        Args:
            workflow_id: The id (or file stem) of the offending definition.
            errors: List of validation error messages.
        """
        self.workflow_id = workflow_id
        self.errors = errors
        super().__init__(f"Workflow validation failed for '{workflow_id}': {'; '.join(errors)}")


class StateCodecError(NavigatorError):
    """Raised when a state token cannot be decoded into a valid state.

    A malformed token cannot produce a meaningful result, so this is a hard
    failure the web layer maps to a client error.

    Attributes:
        code: Which stage of decoding failed.
        errors: Field-level validation messages for ``VALIDATION_FAILED``.
    """

    def __init__(self, message: str, code: CodecErrorCode, errors: list[str] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            code: The decoding stage that failed.
            errors: Optional list of field-level validation messages.
        """
        self.code = code
        self.errors = errors or []
        super().__init__(message)


class InvalidActionError(NavigatorError):
    """Raised when a navigation action is unknown or misses a required parameter.

    Attributes:
        action: The action that was requested.
    """

    code = "INVALID_ACTION"

    def __init__(self, action: str, reason: str) -> None:
        """Initialize the exception.

        Args:
            action: The action that was requested.
            reason: Why the action cannot be executed.
        """
        self.action = action
        super().__init__(f"Invalid action '{action}': {reason}")
