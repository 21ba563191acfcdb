"""
Custom Exception Classes with Structured Error Handling
Enables consistent error responses across the API

Only ValidationError on the job itself is fatal to a ranking run.
Per-candidate problems (sparse profiles, semantic timeouts) degrade
gracefully and are reported through the ranking summary instead.
"""
from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Base application exception.
    All custom exceptions should inherit from this.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AppException):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )


class AIServiceError(AppException):
    """Raised when AI service fails"""

    def __init__(self, message: str, service: str = "local", timeout: bool = False):
        super().__init__(
            message=f"AI service error: {message}",
            status_code=503,
            error_code="AI_SERVICE_ERROR",
            details={"service": service, "timeout": timeout}
        )


class ExternalScorerTimeout(AIServiceError):
    """Raised when the similarity provider does not answer in time"""

    def __init__(self, service: str, timeout_seconds: float):
        super().__init__(
            message=f"similarity lookup exceeded {timeout_seconds:.1f}s",
            service=service,
            timeout=True
        )
        self.error_code = "EXTERNAL_SCORER_TIMEOUT"
        self.details["timeout_seconds"] = timeout_seconds


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Global exception handler for AppException and subclasses.
    Provides consistent error response format.
    """
    logger.warning(
        f"AppException: {exc.error_code} - {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "details": exc.details
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global handler for unhandled exceptions.
    Logs full traceback and returns sanitized response.
    """
    logger.exception(
        f"Unhandled exception: {str(exc)}",
        extra={"path": request.url.path}
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again.",
            "details": {}
        }
    )
