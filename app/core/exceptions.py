import logging
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse
from fastapi.requests import Request

logger = logging.getLogger(__name__)


# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    pass

class ServiceError(BusinessError):
    """Generic error for unexpected service failures."""
    pass

class NotFoundError(BusinessError):
    """Raised when a requested resource does not exist."""
    pass

class ValidationError(BusinessError):
    """Raised when business rule validation fails (e.g., invalid date window)."""
    pass

class UnauthorizedError(BusinessError):
    """Raised when authentication fails."""
    pass


class QuotaExceededError(BusinessError):
    """Raised when a user's plan has no report generations left this period."""

    def __init__(self, plan: str, limit: Optional[int], used: int):
        self.plan = plan
        self.limit = limit
        self.used = used
        super().__init__(
            f"You have reached your {plan} plan limit of {limit} wellbeing "
            f"reports this month. Please upgrade your plan."
        )


# ---------------------------
# Narrative generation
# ---------------------------

class NarrativeBackendUnavailable(ServiceError):
    """
    The generative narrative backend failed, timed out or answered with
    something unusable. Always recovered by the deterministic fallback.
    """
    pass


class InsufficientDataWarning(UserWarning):
    """Emitted when a report window contains no mood or activity logs."""
    pass


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(QuotaExceededError)
    async def quota_exceeded_handler(request: Request, exc: QuotaExceededError):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "detail": str(exc),
                "code": "QUOTA_EXCEEDED",
                "plan": exc.plan,
                "limit": exc.limit,
                "used": exc.used,
            },
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"Service error: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
