"""Custom exceptions and error handling for the Dashboard Console API."""

from fastapi import HTTPException, status


class DashboardException(HTTPException):
    """Base exception for the Dashboard Console API."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str | None = None,
        headers: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


# Authentication Errors (401, 403)
class InvalidCredentialsError(DashboardException):
    """Raised when login credentials are invalid."""

    def __init__(self, detail: str = "Invalid login credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_CREDENTIALS",
        )


class NotAuthenticatedError(DashboardException):
    """Raised when a request carries no valid session."""

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="NOT_AUTHENTICATED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(DashboardException):
    """Raised when user lacks permission for an action."""

    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN",
        )


# Resource Errors (404, 409)
class NotFoundError(DashboardException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or f"{resource} not found",
            error_code="NOT_FOUND",
        )


class AlreadyExistsError(DashboardException):
    """Raised when trying to create a resource that already exists."""

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail or f"{resource} already exists",
            error_code="ALREADY_EXISTS",
        )


class OperationInProgressError(DashboardException):
    """Raised when a mutation targets a row that already has one pending."""

    def __init__(self, detail: str = "Another operation on this item is already in progress"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="OPERATION_IN_PROGRESS",
        )


# Validation Errors (400)
class ValidationError(DashboardException):
    """Raised when input validation fails before reaching the data store."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
        )


class RemoteOperationError(DashboardException):
    """Raised when the data or identity service rejects an operation.

    The detail is the service message, passed through verbatim.
    """

    def __init__(self, detail: str = "The operation could not be completed"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="REMOTE_ERROR",
        )


# Page navigation
class PageRedirect(Exception):
    """Raised by page guards when the access policy sends the browser elsewhere."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location
