"""
familyvault/utils/format_utils.py

Purpose: Display formatting helpers

- Human file sizes
- Dates for cards
- Category labels and icons
- Download filename extraction
- Member display-name fallback
"""

import re
from datetime import datetime
from typing import Optional

from familyvault.utils.constants import (
    CATEGORY_LABELS,
    CATEGORY_ICONS,
    DEFAULT_DOWNLOAD_NAME,
)

FILENAME_PATTERN = re.compile(r'filename="([^"]*)"')
SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(size: Optional[int]) -> str:
    """
    Formats a byte count the way the dashboard shows it.

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 2097152 -> "2 MB"
    """
    if not size:
        return "0 Bytes"
    k = 1024
    index = 0
    while size >= k ** (index + 1) and index < len(SIZE_UNITS) - 1:
        index += 1
    value = round(size / (k ** index), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {SIZE_UNITS[index]}"


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "Recently"
    return value.strftime("%d/%m/%Y")


def category_label(category: Optional[str]) -> str:
    if not category:
        return "Unknown"
    return CATEGORY_LABELS.get(category, category[:1].upper() + category[1:])


def category_icon(category: Optional[str]) -> str:
    return CATEGORY_ICONS.get(category or "", CATEGORY_ICONS["other"])


def mime_icon(mime_type: Optional[str]) -> str:
    if not mime_type:
        return "fas fa-file"
    if "pdf" in mime_type:
        return "fas fa-file-pdf"
    if "image" in mime_type:
        return "fas fa-file-image"
    return "fas fa-file"


def parse_download_filename(content_disposition: Optional[str]) -> str:
    """
    Extracts the filename from a ``content-disposition`` header.

    Args:
        content_disposition: Raw header value, possibly absent

    Returns:
        The quoted filename, or "document" when none is present
    """
    if not content_disposition:
        return DEFAULT_DOWNLOAD_NAME
    match = FILENAME_PATTERN.search(content_disposition)
    if match and match.group(1):
        return match.group(1)
    return DEFAULT_DOWNLOAD_NAME


def name_from_email(email: str) -> str:
    """Turns "jane.doe@x.com" into "Jane Doe"."""
    local = email.split("@")[0]
    words = re.sub(r"[._-]", " ", local).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def member_display_name(
    display_name: Optional[str],
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> str:
    """
    Picks the name shown on a family member card.

    Order: display name, name, title-cased e-mail local part, "Family Member".
    """
    for candidate in (display_name, name):
        if candidate and candidate != "undefined" and candidate.strip():
            return candidate.strip()
    if email and "@" in email:
        derived = name_from_email(email)
        if derived:
            return derived
    return "Family Member"
