"""
Error taxonomy and uniform error envelopes for the clinic API
"""

import uuid
import traceback
import logging
import os
from typing import Optional, Any
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.request_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class ClinicError(Exception):
    """Base class for errors that map onto an HTTP status and error envelope"""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None, original_error: Optional[Exception] = None):
        self.message = message
        self.details = details
        self.original_error = original_error
        super().__init__(self.message)

class ValidationError(ClinicError):
    """Missing or malformed input"""
    status_code = 400
    error_code = "VALIDATION_ERROR"

class AuthError(ClinicError):
    """Bad, inactive or missing credentials"""
    status_code = 401
    error_code = "AUTH_ERROR"

class ConflictError(ClinicError):
    """Request clashes with an existing record"""
    status_code = 409
    error_code = "CONFLICT"

class InternalError(ClinicError):
    """Store or unexpected failure"""
    status_code = 500
    error_code = "INTERNAL_ERROR"

class DatabaseError(InternalError):
    """Custom exception for database-related errors"""
    error_code = "DATABASE_ERROR"

class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        status_code: Optional[int] = None,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized error response"""
        status_code = status_code or ErrorHandler._get_status_code(error)

        error_data = {
            "success": False,
            "message": ErrorHandler._get_user_friendly_message(error),
            "error": ErrorHandler._get_error_code(error),
            "request_id": error_context.request_id,
            "timestamp": error_context.timestamp.isoformat()
        }

        if isinstance(error, ClinicError) and error.details is not None:
            error_data["details"] = error.details
        elif include_details:
            original = error.original_error if isinstance(error, ClinicError) and error.original_error else error
            error_data["details"] = str(original)

        # Client errors are expected traffic, only failures get the full trace
        if status_code >= 500:
            ErrorHandler._log_error(error_context, error, status_code)
        else:
            logger.warning(
                f"Request {error_context.request_id} rejected with {status_code}: "
                f"{error_context.method} {error_context.endpoint} - {error}"
            )

        return JSONResponse(
            status_code=status_code,
            content=error_data
        )

    @staticmethod
    def _get_status_code(error: Exception) -> int:
        if isinstance(error, ClinicError):
            return error.status_code
        elif isinstance(error, ValueError):
            return 400
        return 500

    @staticmethod
    def _get_error_code(error: Exception) -> str:
        """Generate appropriate error codes based on exception type"""
        if isinstance(error, ClinicError):
            return error.error_code
        elif isinstance(error, ValueError):
            return "VALIDATION_ERROR"
        else:
            return "INTERNAL_ERROR"

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        """Generate user-friendly error messages"""
        if isinstance(error, ClinicError):
            return error.message
        elif isinstance(error, ValueError):
            return "Invalid input provided. Please check your data and try again."
        else:
            return "An unexpected error occurred. Please try again later."

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        logger.error(
            f"Error {error_context.request_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "request_id": error_context.request_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "stack_trace": traceback.format_exc()
            }
        )

class DatabaseManager:
    """Context manager for safe database operations"""

    def __init__(self, db_session_factory):
        self.db_session_factory = db_session_factory
        self.db = None

    def __enter__(self) -> Session:
        try:
            self.db = self.db_session_factory()
            return self.db
        except Exception as e:
            raise DatabaseError(f"Failed to create database session: {str(e)}", original_error=e)

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.db:
            try:
                if exc_type is None:
                    self.db.commit()
                else:
                    self.db.rollback()
            except SQLAlchemyError as e:
                logger.error(f"Database transaction error: {e}")
                self.db.rollback()
                raise DatabaseError(f"Database transaction failed: {str(e)}", original_error=e)
            finally:
                self.db.close()

def _describe_validation_errors(errors) -> list:
    """Flatten FastAPI validation errors into field/message pairs"""
    described = []
    for err in errors:
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
        described.append({
            "field": ".".join(location) or None,
            "message": err.get("msg")
        })
    return described

def register_exception_handlers(app: FastAPI):
    """Install the envelope-producing exception handlers on the application"""

    @app.exception_handler(ClinicError)
    async def clinic_error_handler(request: Request, exc: ClinicError):
        return ErrorHandler.create_error_response(ErrorContext(request), exc, include_details=DEBUG)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(
            "Invalid request data",
            details=_describe_validation_errors(exc.errors())
        )
        return ErrorHandler.create_error_response(ErrorContext(request), error)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error = InternalError("An unexpected error occurred. Please try again later.", original_error=exc)
        return ErrorHandler.create_error_response(ErrorContext(request), error, include_details=DEBUG)
