from fastapi import HTTPException, status


class DuplicateEmailError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already exists, please use a different one",
        )


class UserNotFoundError(HTTPException):
    def __init__(self, detail="User not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidCredentialsError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )


class PasswordResetError(HTTPException):
    """Password reset failures carry the {message, error, success} envelope."""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST):
        self.message = message
        super().__init__(
            status_code=status_code,
            detail={"message": message, "error": True, "success": False},
        )


class EmailNotFoundError(PasswordResetError):
    def __init__(self):
        super().__init__("Email not found")


class OTPExpiredError(PasswordResetError):
    def __init__(self):
        super().__init__("OTP is expired or not set.")


class InvalidOTPError(PasswordResetError):
    def __init__(self):
        super().__init__("Invalid OTP.")


class FriendRequestError(HTTPException):
    def __init__(self, detail, status_code=status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class StreamConfigurationError(Exception):
    """Raised when the Stream API key or secret is missing."""
