"""
Centralized error types and user-friendly error messages.
"""
import logging
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class DuplicateEmailError(ValidationError):
    """A user with this email is already stored."""
    def __init__(self, email: str):
        super().__init__(get_error_message("email_exists"), details={"email": email})
        self.email = email


class AIServiceError(AppError):
    """AI service error."""
    def __init__(self, message: str = "AI service temporarily unavailable", details: dict | None = None):
        super().__init__(message, status_code=503, details=details)


class AIConfigurationError(AIServiceError):
    """The AI collaborator cannot be called at all (e.g. no API key)."""
    def __init__(self, message: str = "API Key not found in environment", details: dict | None = None):
        super().__init__(message, details=details)


class StorageCorruptionError(AppError):
    """Stored text under a key could not be decoded. Never recovered automatically."""
    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Stored data under '{key}' is corrupt: {reason}",
            status_code=500,
            details={"key": key},
        )
        self.key = key


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid credentials or candidate not found.",
    "admin_not_found": "Unauthorized access. Have you registered an admin account yet?",
    "email_exists": "Account already exists with this email.",
    "invalid_access_code": "Invalid master access code.",

    # CV uploads
    "file_too_large": "File is too large. Maximum size is 5MB.",
    "invalid_file_type": "Only PDF files are allowed.",
    "file_empty": "Uploaded file is empty.",
    "no_cv": "No CV uploaded by this candidate.",

    # AI drafting
    "ai_unavailable": "AI drafting is temporarily unavailable. Please compose the email manually.",
    "ai_timeout": "AI drafting took too long. Please try again or compose manually.",
    "ai_failed": "Error generating email. Please try manual composition.",
    "ai_empty": "Failed to generate email content.",

    # Candidates
    "candidate_not_found": "Candidate not found.",
    "invalid_status": "Status must be VERIFIED or REJECTED.",
    "empty_email": "Email content cannot be empty",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "storage_error": "Stored portal data is corrupt. Clear the affected key and reload.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_ai_service_error(error: Exception, operation: str = "drafting") -> dict:
    """
    Classify an AI failure for the caller's fallback path.
    Returns a dict with status and user-friendly message.
    """
    logger.error(f"AI service error during {operation}: {error}")

    error_str = str(error).lower()

    if "timeout" in error_str or "timed out" in error_str:
        return {
            "success": False,
            "fallback": True,
            "message": get_error_message("ai_timeout"),
            "error_type": "timeout"
        }

    if "unavailable" in error_str or "503" in error_str:
        return {
            "success": False,
            "fallback": True,
            "message": get_error_message("ai_unavailable"),
            "error_type": "unavailable"
        }

    return {
        "success": False,
        "fallback": True,
        "message": get_error_message("ai_failed"),
        "error_type": "error"
    }


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
