"""
familyvault/utils/validation_utils.py

Purpose: Input validation

- Upload file size and type checks
- PAN, Aadhaar and OTP formats
- E-mail format
- Input sanitization
"""

import re
from typing import Iterable, Optional

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAAR_PATTERN = re.compile(r"^\d{12}$")
OTP_PATTERN = re.compile(r"^\d{6}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_file_size(size: int, max_bytes: int) -> bool:
    """
    Checks an upload against the size ceiling.

    The ceiling is inclusive: a file of exactly ``max_bytes`` is accepted.

    Args:
        size: File size in bytes
        max_bytes: Largest accepted size

    Returns:
        True if the size is acceptable
    """
    return 0 <= size <= max_bytes


def validate_file_type(mime_type: Optional[str], allowed: Iterable[str]) -> bool:
    """
    Checks an upload's mime type against the allow-list.

    Args:
        mime_type: Declared mime type of the file
        allowed: Accepted mime types

    Returns:
        True if the type is accepted
    """
    if not mime_type:
        return False
    return mime_type.strip().lower() in {t.lower() for t in allowed}


def validate_pan(pan: str) -> bool:
    """
    Validates PAN format: 5 letters, 4 digits, 1 letter.
    Example: ABCDE1234F

    Args:
        pan: PAN string (callers upper-case user input first)

    Returns:
        True if valid, False otherwise
    """
    if not pan:
        return False
    return bool(PAN_PATTERN.match(pan))


def validate_aadhaar(aadhaar: str) -> bool:
    """
    Validates Aadhaar format (exactly 12 decimal digits).
    """
    if not aadhaar:
        return False
    return bool(AADHAAR_PATTERN.match(aadhaar))


def validate_otp_format(otp: str) -> bool:
    """
    Validates OTP format (must be 6 digits).
    """
    if not otp:
        return False
    return bool(OTP_PATTERN.match(otp.strip()))


def validate_email(email: str) -> bool:
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Trims free-text input and normalizes its whitespace.

    Markup is not stripped here; rendering always treats text as text.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]
    text = " ".join(text.split())

    return text.strip()
