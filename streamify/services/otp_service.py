# streamify/services/otp_service.py
# OTP generation, verification and password reset

import os
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
from streamify.exceptions import (
    EmailNotFoundError,
    OTPExpiredError,
    InvalidOTPError,
    PasswordResetError,
)
from streamify.utils.auth import get_password_hash
from streamify.utils.db_setup import get_database_connection, utcnow
from streamify.utils.validators import validate_password, MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", "60"))


def generate_otp() -> str:
    """Generate a 6-digit OTP with no leading zero."""
    return str(100000 + secrets.randbelow(900000))


def issue_password_reset_otp(email: str, now: Optional[datetime] = None) -> Tuple[dict, str]:
    """Store a fresh reset OTP on the user and return (user, otp).

    Issuing a new OTP replaces any previous one and revokes an earlier
    verification that was never used to reset the password.
    """
    db = get_database_connection()
    user = db.users.find_one({"email": email})
    if not user:
        logger.warning(f"Password reset requested for unknown email: {email}")
        raise EmailNotFoundError()

    now = now or utcnow()
    otp = generate_otp()
    db.users.update_one(
        {"_id": user["_id"]},
        {
            "$set": {
                "reset_password_otp": otp,
                "reset_password_expiry": now + timedelta(minutes=OTP_EXPIRE_MINUTES),
                "reset_password_verified": False,
                "reset_password_verified_until": None,
                "updated_at": now,
            }
        },
    )
    logger.info(f"Password reset OTP issued for {email}")
    return user, otp


def verify_password_reset_otp(email: str, otp: str, now: Optional[datetime] = None) -> bool:
    """Check an OTP and consume it.

    The OTP is valid strictly before its expiry and only once: a successful
    check clears it and marks the user as allowed to reset the password
    until the end of a fresh OTP window.
    """
    db = get_database_connection()
    user = db.users.find_one({"email": email})
    if not user:
        raise EmailNotFoundError()

    now = now or utcnow()
    stored_otp = user.get("reset_password_otp")
    expiry = user.get("reset_password_expiry")
    if not stored_otp or not expiry or expiry <= now:
        logger.warning(f"Expired or missing OTP for {email}")
        raise OTPExpiredError()

    if otp != stored_otp:
        logger.warning(f"Invalid OTP submitted for {email}")
        raise InvalidOTPError()

    # Filtering on the OTP makes consumption atomic
    result = db.users.update_one(
        {"_id": user["_id"], "reset_password_otp": stored_otp},
        {
            "$set": {
                "reset_password_otp": None,
                "reset_password_expiry": None,
                "reset_password_verified": True,
                "reset_password_verified_until": now + timedelta(minutes=OTP_EXPIRE_MINUTES),
                "updated_at": now,
            }
        },
    )
    if result.modified_count == 0:
        logger.warning(f"OTP for {email} was consumed concurrently")
        raise OTPExpiredError()

    logger.info(f"OTP verified successfully for {email}")
    return True


def reset_password(
    email: str,
    new_password: str,
    confirm_password: str,
    now: Optional[datetime] = None,
) -> bool:
    """Replace the password of a user who has verified a reset OTP.

    The verification grant is checked and spent in the same update, so it
    allows exactly one reset and only before its deadline.
    """
    db = get_database_connection()
    user = db.users.find_one({"email": email})
    if not user:
        raise EmailNotFoundError()

    if new_password != confirm_password:
        raise PasswordResetError("Passwords do not match.")

    if not validate_password(new_password):
        raise PasswordResetError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    now = now or utcnow()
    result = db.users.update_one(
        {
            "_id": user["_id"],
            "reset_password_verified": True,
            "reset_password_verified_until": {"$gt": now},
        },
        {
            "$set": {
                "password": get_password_hash(new_password),
                "reset_password_verified": False,
                "reset_password_verified_until": None,
                "updated_at": now,
            }
        },
    )
    if result.modified_count == 0:
        if user.get("reset_password_verified", False):
            logger.warning(f"Password reset attempted after verification expired: {email}")
            raise PasswordResetError("OTP verification has expired. Please request a new OTP.")
        logger.warning(f"Password reset attempted without OTP verification: {email}")
        raise PasswordResetError("Please verify the OTP before resetting your password.")

    logger.info(f"Password reset for {email}")
    return True


def cleanup_expired_otps(now: Optional[datetime] = None) -> int:
    """Clear reset OTPs whose expiry has passed."""
    db = get_database_connection()
    now = now or utcnow()
    result = db.users.update_many(
        {"reset_password_expiry": {"$lte": now}},
        {"$set": {"reset_password_otp": None, "reset_password_expiry": None}},
    )
    logger.info(f"Cleaned up {result.modified_count} expired OTPs")
    return result.modified_count
