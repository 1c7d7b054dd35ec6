"""Centralized exception hierarchy for phettest.

Only request-level problems are exceptions. A failing git/npm/grunt process is
reported as a ``CommandFailure`` value and never raised.
"""


class AppBaseError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        retriable: bool = False,
        **params: object,
    ) -> None:
        """
        Initialize the error.

        Args:
            message: Short, user-facing message shown inline on the dashboard
            status_code: Recommended HTTP status code
            retriable: Whether the operation can be retried
            **params: Extra context, included in log output
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        if not self.params:
            return self.message
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.message} ({params_str})"


class ResourceNotFoundError(AppBaseError):
    """Raised when a requested resource (repository list, task) is not found."""

    def __init__(self, message: str, **params: object) -> None:
        super().__init__(message, status_code=404, **params)


class ValidationError(AppBaseError):
    """Raised when input validation fails."""

    def __init__(self, message: str, **params: object) -> None:
        super().__init__(message, status_code=400, **params)


class OperationalError(AppBaseError):
    """Raised when an operational failure occurs (unreadable repository list, etc.)."""

    def __init__(self, message: str, retriable: bool = False, **params: object) -> None:
        super().__init__(message, status_code=500, retriable=retriable, **params)
