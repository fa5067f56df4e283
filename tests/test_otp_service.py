# tests/test_otp_service.py
# Unit tests for password reset OTPs

from datetime import datetime, timedelta

import pytest

from streamify.exceptions import EmailNotFoundError, InvalidOTPError, OTPExpiredError, PasswordResetError
from streamify.services.otp_service import (
    OTP_EXPIRE_MINUTES,
    cleanup_expired_otps,
    generate_otp,
    issue_password_reset_otp,
    reset_password,
    verify_password_reset_otp,
)
from streamify.utils.auth import verify_password
from streamify.utils.db_setup import utcnow


def test_generate_otp_is_six_digits():
    for _ in range(50):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()
        assert otp[0] != "0"


def test_issue_otp_stores_value_and_expiry(db, make_user):
    make_user("alice@example.com")
    now = datetime(2026, 1, 1, 12, 0, 0)

    user, otp = issue_password_reset_otp("alice@example.com", now=now)

    stored = db.users.find_one({"_id": user["_id"]})
    assert stored["reset_password_otp"] == otp
    assert stored["reset_password_expiry"] == now + timedelta(minutes=OTP_EXPIRE_MINUTES)


def test_issue_otp_unknown_email():
    with pytest.raises(EmailNotFoundError):
        issue_password_reset_otp("nobody@example.com")


def test_otp_accepted_only_once(db, make_user):
    make_user("alice@example.com")
    _, otp = issue_password_reset_otp("alice@example.com")

    assert verify_password_reset_otp("alice@example.com", otp) is True

    stored = db.users.find_one({"email": "alice@example.com"})
    assert stored["reset_password_otp"] is None
    assert stored["reset_password_expiry"] is None

    with pytest.raises(OTPExpiredError):
        verify_password_reset_otp("alice@example.com", otp)


def test_otp_rejected_at_or_after_expiry(make_user):
    make_user("alice@example.com")
    issued_at = datetime(2026, 1, 1, 12, 0, 0)
    _, otp = issue_password_reset_otp("alice@example.com", now=issued_at)
    expiry = issued_at + timedelta(minutes=OTP_EXPIRE_MINUTES)

    with pytest.raises(OTPExpiredError):
        verify_password_reset_otp("alice@example.com", otp, now=expiry)

    with pytest.raises(OTPExpiredError):
        verify_password_reset_otp("alice@example.com", otp, now=expiry + timedelta(seconds=1))

    assert verify_password_reset_otp("alice@example.com", otp, now=expiry - timedelta(seconds=1))


def test_wrong_otp_does_not_consume(db, make_user):
    make_user("alice@example.com")
    _, otp = issue_password_reset_otp("alice@example.com")
    wrong = "100000" if otp != "100000" else "100001"

    with pytest.raises(InvalidOTPError):
        verify_password_reset_otp("alice@example.com", wrong)

    assert db.users.find_one({"email": "alice@example.com"})["reset_password_otp"] == otp
    assert verify_password_reset_otp("alice@example.com", otp)


def test_verify_without_issued_otp(make_user):
    make_user("alice@example.com")
    with pytest.raises(OTPExpiredError):
        verify_password_reset_otp("alice@example.com", "123456")


def test_reissue_replaces_previous_otp(make_user):
    make_user("alice@example.com")
    _, first = issue_password_reset_otp("alice@example.com")
    _, second = issue_password_reset_otp("alice@example.com")

    if first != second:
        with pytest.raises(InvalidOTPError):
            verify_password_reset_otp("alice@example.com", first)
    assert verify_password_reset_otp("alice@example.com", second)


def test_reset_password_rehashes(db, make_user):
    make_user("alice@example.com", password="oldpassword")
    _, otp = issue_password_reset_otp("alice@example.com")
    verify_password_reset_otp("alice@example.com", otp)

    assert reset_password("alice@example.com", "newpassword", "newpassword") is True

    stored = db.users.find_one({"email": "alice@example.com"})
    assert stored["password"] != "newpassword"
    assert verify_password("newpassword", stored["password"])
    assert not verify_password("oldpassword", stored["password"])
    assert stored["reset_password_verified"] is False


def test_reset_password_requires_matching_confirmation(make_user):
    make_user("alice@example.com")
    _, otp = issue_password_reset_otp("alice@example.com")
    verify_password_reset_otp("alice@example.com", otp)

    with pytest.raises(PasswordResetError) as exc_info:
        reset_password("alice@example.com", "newpassword", "different")
    assert exc_info.value.message == "Passwords do not match."


def test_reset_password_requires_verified_otp(make_user):
    make_user("alice@example.com")
    issue_password_reset_otp("alice@example.com")

    with pytest.raises(PasswordResetError):
        reset_password("alice@example.com", "newpassword", "newpassword")


def test_reset_password_only_once_per_verification(make_user):
    make_user("alice@example.com")
    _, otp = issue_password_reset_otp("alice@example.com")
    verify_password_reset_otp("alice@example.com", otp)
    reset_password("alice@example.com", "newpassword", "newpassword")

    with pytest.raises(PasswordResetError):
        reset_password("alice@example.com", "another1", "another1")

def test_reset_password_rejected_after_verification_window(db, make_user):
    make_user("alice@example.com", password="oldpassword")
    issued_at = datetime(2020, 1, 1, 12, 0, 0)
    _, otp = issue_password_reset_otp("alice@example.com", now=issued_at)
    verify_password_reset_otp("alice@example.com", otp, now=issued_at + timedelta(minutes=1))

    with pytest.raises(PasswordResetError) as exc_info:
        reset_password("alice@example.com", "newpassword", "newpassword")
    assert "expired" in exc_info.value.message

    stored = db.users.find_one({"email": "alice@example.com"})
    assert verify_password("oldpassword", stored["password"])


def test_reset_password_allowed_until_window_closes(make_user):
    make_user("alice@example.com")
    verified_at = datetime(2026, 1, 1, 12, 0, 0)
    _, otp = issue_password_reset_otp("alice@example.com", now=verified_at)
    verify_password_reset_otp("alice@example.com", otp, now=verified_at)
    deadline = verified_at + timedelta(minutes=OTP_EXPIRE_MINUTES)

    with pytest.raises(PasswordResetError):
        reset_password("alice@example.com", "newpassword", "newpassword", now=deadline)

    assert reset_password(
        "alice@example.com", "newpassword", "newpassword", now=deadline - timedelta(seconds=1)
    )


def test_reissue_revokes_unused_verification(make_user):
    make_user("alice@example.com")
    _, otp = issue_password_reset_otp("alice@example.com")
    verify_password_reset_otp("alice@example.com", otp)
    issue_password_reset_otp("alice@example.com")

    with pytest.raises(PasswordResetError):
        reset_password("alice@example.com", "newpassword", "newpassword")



def test_cleanup_expired_otps(db, make_user):
    past = utcnow() - timedelta(minutes=1)
    future = utcnow() + timedelta(minutes=30)
    make_user("old@example.com", reset_password_otp="111111", reset_password_expiry=past)
    make_user("new@example.com", reset_password_otp="222222", reset_password_expiry=future)

    assert cleanup_expired_otps() == 1
    assert db.users.find_one({"email": "old@example.com"})["reset_password_otp"] is None
    assert db.users.find_one({"email": "new@example.com"})["reset_password_otp"] == "222222"
