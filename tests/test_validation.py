from datetime import datetime

import pytest

from familyvault.utils.format_utils import (
    category_label,
    format_date,
    format_file_size,
    member_display_name,
    parse_download_filename,
)
from familyvault.utils.validation_utils import (
    sanitize_input,
    validate_aadhaar,
    validate_email,
    validate_file_size,
    validate_file_type,
    validate_otp_format,
    validate_pan,
)

MIB = 1024 * 1024


@pytest.mark.parametrize("size, ok", [(0, True), (10 * MIB, True), (10 * MIB + 1, False)])
def test_file_size_ceiling_is_inclusive(size, ok):
    assert validate_file_size(size, 10 * MIB) is ok


def test_file_type_allow_list():
    allowed = ["application/pdf", "image/jpeg", "image/png"]
    assert validate_file_type("image/PNG", allowed)
    assert not validate_file_type("image/gif", allowed)
    assert not validate_file_type(None, allowed)


@pytest.mark.parametrize("pan, ok", [
    ("ABCDE1234F", True),
    ("abcde1234f", False),
    ("ABCD1234F", False),
    ("ABCDE12345", False),
    ("", False),
])
def test_pan_format(pan, ok):
    assert validate_pan(pan) is ok


@pytest.mark.parametrize("aadhaar, ok", [
    ("123456789012", True),
    ("12345678901", False),
    ("1234567890123", False),
    ("1234 5678 9012", False),
])
def test_aadhaar_format(aadhaar, ok):
    assert validate_aadhaar(aadhaar) is ok


@pytest.mark.parametrize("otp, ok", [("123456", True), ("12345", False), ("1234567", False), ("12a456", False)])
def test_otp_format(otp, ok):
    assert validate_otp_format(otp) is ok


def test_email_format():
    assert validate_email("a@b.co")
    assert not validate_email("a@b")
    assert not validate_email("")


def test_sanitize_input_collapses_whitespace():
    assert sanitize_input("  hello \n  world ") == "hello world"
    assert sanitize_input("x" * 20, max_length=5) == "xxxxx"


@pytest.mark.parametrize("size, text", [
    (0, "0 Bytes"),
    (None, "0 Bytes"),
    (512, "512 Bytes"),
    (1536, "1.5 KB"),
    (2 * MIB, "2 MB"),
    (3 * 1024 * MIB, "3 GB"),
])
def test_format_file_size(size, text):
    assert format_file_size(size) == text


def test_format_date():
    assert format_date(datetime(2024, 1, 15)) == "15/01/2024"
    assert format_date(None) == "Recently"


def test_category_label():
    assert category_label("passport") == "Passport"
    assert category_label(None) == "Unknown"


@pytest.mark.parametrize("header, name", [
    ('attachment; filename="report.pdf"', "report.pdf"),
    ("attachment", "document"),
    (None, "document"),
])
def test_parse_download_filename(header, name):
    assert parse_download_filename(header) == name


@pytest.mark.parametrize("display_name, name, email, label", [
    ("Alice", None, "a@x.com", "Alice"),
    ("undefined", "Bob", None, "Bob"),
    (None, None, "jane.doe@x.com", "Jane Doe"),
    (None, None, None, "Family Member"),
])
def test_member_display_name(display_name, name, email, label):
    assert member_display_name(display_name, name, email) == label
