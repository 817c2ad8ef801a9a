"""Form field normalisation for the employee forms."""
import re
from typing import Optional

NON_DIGIT = re.compile(r"\D")
EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Format an employee phone number for display and storage.

    Blank input is allowed and stored as "".  Ten digits, or eleven with a
    leading 1, come back as (XXX) XXX-XXXX.  Anything else returns None and
    the form is rejected.
    """
    digits = NON_DIGIT.sub("", value or "")
    if not digits:
        return ""
    if len(digits) == 11 and digits[0] == "1":
        digits = digits[1:]
    if len(digits) != 10:
        return None
    area, exchange, line = digits[:3], digits[3:6], digits[6:]
    return f"({area}) {exchange}-{line}"


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL.match(value) is not None


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
