# streamify/utils/validators.py
# Validation functions for input data

import re
from typing import Optional
from bson import ObjectId

MIN_PASSWORD_LENGTH = 6


def validate_email(email: Optional[str]) -> bool:
    """Validate email format if provided."""
    if not email:
        return True
    pattern = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
    return bool(re.match(pattern, email))


def validate_password(password: Optional[str]) -> bool:
    """Validate password length if provided."""
    if not password:
        return True
    return len(password) >= MIN_PASSWORD_LENGTH


def validate_object_id(value: Optional[str]) -> bool:
    """Validate a MongoDB ObjectId string."""
    if not value:
        return False
    return ObjectId.is_valid(value)


def is_data_uri(value: Optional[str]) -> bool:
    """Check whether an image value is an inline data: URI."""
    if not value:
        return False
    return value.startswith("data:")
