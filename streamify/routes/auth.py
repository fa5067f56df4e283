# streamify/routes/auth.py
# Authentication routes for signup, login, onboarding and password reset

import os
import logging
from fastapi import APIRouter, HTTPException, Response, status, Depends
from streamify.exceptions import InvalidCredentialsError, PasswordResetError, UserNotFoundError
from streamify.models.user import (
    SignupRequest,
    LoginRequest,
    OnboardingRequest,
    ForgotPasswordRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
    AuthResponse,
)
from streamify.services.email_service import send_password_reset_email
from streamify.services.otp_service import (
    issue_password_reset_otp,
    verify_password_reset_otp,
    reset_password as reset_user_password,
    OTP_EXPIRE_MINUTES,
)
from streamify.services.stream_service import sync_stream_user
from streamify.services.user_service import (
    create_user,
    get_user_by_email,
    onboard_user,
    serialize_user,
)
from streamify.utils.auth import (
    create_access_token,
    verify_password,
    set_auth_cookie,
    clear_auth_cookie,
    get_current_user,
)
from streamify.utils.validators import validate_email, validate_password, MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, response: Response):
    """Register a new user and start a session."""
    logger.info(f"Signup attempt for email: {request.email}")

    try:
        if not request.email or not request.password or not request.full_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="All fields are required",
            )

        if not validate_password(request.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )

        if not validate_email(request.email):
            logger.warning(f"Invalid email format: {request.email}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email format",
            )

        user = create_user(request.email, request.password, request.full_name)

        # The account exists even if Stream is unreachable
        sync_stream_user(user)

        set_auth_cookie(response, create_access_token(str(user["_id"])))

        logger.info(f"User created successfully: {request.email}")
        return AuthResponse(success=True, user=serialize_user(user))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during signup: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, response: Response):
    """Authenticate user with email and password."""
    logger.info(f"Login attempt for email: {request.email}")

    try:
        if not request.email or not request.password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="All fields are required",
            )

        user = get_user_by_email(request.email)
        if not user or not verify_password(request.password, user["password"]):
            logger.warning(f"Failed login for email: {request.email}")
            raise InvalidCredentialsError()

        set_auth_cookie(response, create_access_token(str(user["_id"])))

        logger.info(f"User logged in successfully: {request.email}")
        return AuthResponse(success=True, user=serialize_user(user))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.post("/logout")
def logout(response: Response):
    """Clear the session cookie."""
    clear_auth_cookie(response)
    return {"success": True, "message": "Logout successful"}


@router.get("/me", response_model=AuthResponse)
def get_me(current_user: dict = Depends(get_current_user)):
    """Get current user information."""
    return AuthResponse(success=True, user=serialize_user(current_user))


@router.post("/onboarding", response_model=AuthResponse)
def onboarding(request: OnboardingRequest, current_user: dict = Depends(get_current_user)):
    """Complete or edit the user's profile."""
    logger.info(f"Onboarding for user: {current_user['_id']}")

    missing_fields = [
        field
        for field, value in (
            ("fullName", request.full_name),
            ("bio", request.bio),
            ("location", request.location),
        )
        if not value
    ]
    if missing_fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "All fields are required", "missingFields": missing_fields},
        )

    try:
        user = onboard_user(current_user["_id"], request.model_dump())
        if not user:
            raise UserNotFoundError()

        sync_stream_user(user)

        return AuthResponse(success=True, user=serialize_user(user))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Onboarding error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.post("/forgot-password")
def forgot_password(request: ForgotPasswordRequest):
    """Generate a password reset OTP and email it to the user."""
    logger.info(f"Forgot password request for: {request.email}")

    if not request.email:
        raise PasswordResetError("Provide email.")

    try:
        user, otp = issue_password_reset_otp(request.email)
        email_sent = send_password_reset_email(
            request.email, user.get("full_name"), otp, OTP_EXPIRE_MINUTES
        )

        result = {
            "message": "Check your email for the OTP." if email_sent
            else "OTP generated, but email not sent",
            "error": not email_sent,
            "success": True,
        }
        if os.getenv("ENVIRONMENT") == "development":
            result["otp"] = otp
        return result

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during forgot password: {str(e)}")
        raise PasswordResetError("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/verify-forgot-password-otp")
def verify_forgot_password_otp(request: VerifyOtpRequest):
    """Verify a password reset OTP. Each OTP can be used once."""
    if not request.email or not request.otp:
        raise PasswordResetError("Provide email and otp.")

    try:
        verify_password_reset_otp(request.email, request.otp)
        return {"message": "OTP verified successfully.", "error": False, "success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error verifying OTP: {str(e)}")
        raise PasswordResetError("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/reset-password")
def reset_password(request: ResetPasswordRequest):
    """Set a new password after OTP verification."""
    if not request.email or not request.new_password or not request.confirm_password:
        raise PasswordResetError("Provide email, newPassword, and confirmPassword.")

    try:
        reset_user_password(request.email, request.new_password, request.confirm_password)
        return {"message": "Password updated successfully.", "error": False, "success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error resetting password: {str(e)}")
        raise PasswordResetError("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)
