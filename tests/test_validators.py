# tests/test_validators.py
# Unit tests for validator functions

from bson import ObjectId
from streamify.utils.validators import (
    validate_email,
    validate_password,
    validate_object_id,
    is_data_uri,
)


def test_validate_email():
    """Test email validation."""
    assert validate_email(None) == True
    assert validate_email("test@example.com") == True
    assert validate_email("first.last+tag@mail.example.org") == True
    assert validate_email("invalid") == False
    assert validate_email("missing@tld") == False
    assert validate_email("spaces in@example.com") == False


def test_validate_password():
    """Test password length validation."""
    assert validate_password(None) == True
    assert validate_password("secret") == True
    assert validate_password("12345") == False


def test_validate_object_id():
    """Test ObjectId validation."""
    assert validate_object_id(str(ObjectId())) == True
    assert validate_object_id(None) == False
    assert validate_object_id("") == False
    assert validate_object_id("not-an-id") == False
    assert validate_object_id("z" * 24) == False


def test_is_data_uri():
    """Test inline image detection."""
    assert is_data_uri("data:image/png;base64,AAAA") == True
    assert is_data_uri("https://avatar.iran.liara.run/public/3.png") == False
    assert is_data_uri(None) == False
