"""
Validation utilities for request input.
"""
import re
from typing import Any
from fastapi import HTTPException

from ..config import ADMIN_ACCESS_CODE
from .error_handlers import get_error_message


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    if not re.match(pattern, email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    return email


def validate_password_present(password: str | None) -> None:
    """Passwords are collected but not verified; only presence is checked."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if not value:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")
        return None

    if len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    if pattern and not re.match(pattern, value):
        raise HTTPException(status_code=400, detail=f"{field_name} format is invalid")

    return value


def validate_phone(phone: str | None) -> str | None:
    return validate_string_field(
        phone, "Phone", min_length=4, max_length=20, required=False, pattern=r"^[0-9 ()-]+$"
    )


def validate_country_code(code: str | None) -> str | None:
    return validate_string_field(code, "Country code", max_length=5, required=False, pattern=r"^\+\d{1,4}$")


def validate_access_code(code: str | None) -> None:
    """Admin registration gate; compared case-insensitively."""
    if (code or "").strip().upper() != ADMIN_ACCESS_CODE.upper():
        raise HTTPException(status_code=403, detail=get_error_message("invalid_access_code"))


def validate_review_status(status: str | None) -> str:
    """Status an admin may assign."""
    status = (status or "").strip().upper()
    if status not in {"VERIFIED", "REJECTED"}:
        raise HTTPException(status_code=400, detail=get_error_message("invalid_status"))
    return status


def validate_status_filter(status: str | None) -> str:
    status = (status or "ALL").strip().upper()
    valid = {"ALL", "PENDING", "VERIFIED", "REJECTED"}
    if status not in valid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(sorted(valid))}"
        )
    return status


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and other attacks."""
    if not filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    # Remove any path separators
    filename = filename.replace("/", "_").replace("\\", "_")

    # Remove any null bytes
    filename = filename.replace("\x00", "")

    # Remove directory traversal sequences
    filename = filename.replace("..", "_")

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    if len(filename) > 255:
        raise HTTPException(status_code=400, detail="Filename too long")

    if not filename or filename == "_":
        raise HTTPException(status_code=400, detail="Invalid filename")

    return filename
