"""
Custom Exceptions

Centralized exception definitions for better error handling.
FastAPI automatically converts these to appropriate HTTP responses.
"""
from fastapi import HTTPException, status


class _NotFoundError(HTTPException):
    """Base for 404 errors that name the missing entity."""

    entity = "Resource"

    def __init__(self, identifier=""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{self.entity} not found: {identifier}" if identifier != "" else f"{self.entity} not found"
        )


class TeamNotFoundError(_NotFoundError):
    """Raised when team cannot be found."""
    entity = "Team"


class UserNotFoundError(_NotFoundError):
    """Raised when user cannot be found."""
    entity = "User"


class PlanNotFoundError(_NotFoundError):
    """Raised when plan cannot be found by id or slug."""
    entity = "Plan"


class ColorNotFoundError(_NotFoundError):
    entity = "Color"


class PermissionNotFoundError(_NotFoundError):
    entity = "Permission"


class PageNotFoundError(_NotFoundError):
    entity = "Page"


class ReportNotFoundError(_NotFoundError):
    entity = "Report"


class ShareLinkUnavailableError(HTTPException):
    """Raised when a share token is unknown or has been disabled."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dashboard unavailable or private."
        )


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TeamAccessError(HTTPException):
    """
    Raised when a user acts in a team they do not belong to.

    This is a security error and is logged as such.
    """

    def __init__(self, detail: str = "You are not a member of this team"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class PlanFeatureUnavailable(HTTPException):
    """Raised when the active team's plan does not include a feature."""

    def __init__(self, feature: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Feature not in your plan: {feature}"
        )


class RateLimitExceeded(HTTPException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={"Retry-After": str(retry_after)}
        )


class InvalidInputError(HTTPException):
    """Raised when input validation fails."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class DuplicateResourceError(HTTPException):
    """Raised when a unique business key is already taken."""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class ResourceInUseError(HTTPException):
    """Raised when deleting a record that other records still reference."""

    def __init__(self, detail: str = "Resource is in use"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class RegistrationClosedError(HTTPException):
    """Raised when sign-ups arrive before the admin workspace is seeded."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Registration is not open yet"
        )
