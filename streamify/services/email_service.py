# streamify/services/email_service.py
# SMTP email service for password reset OTPs

import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional
import os
import logging

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "Streamify <noreply@streamify.app>")


def forgot_password_template(name: Optional[str], otp: str, valid_minutes: int = 60) -> str:
    """Render the HTML body of the password reset email."""
    return f"""
<div>
    <p>Dear {name or "there"},</p>
    <p>You requested a password reset for your Streamify account. Please use the following OTP code to reset your password:</p>
    <div style="background:yellow; font-size:20px; padding:20px; text-align:center; font-weight:800;">
        {otp}
    </div>
    <p>This OTP is valid for {valid_minutes} minutes only. Enter this OTP in the Streamify website to proceed with resetting your password.</p>
    <br/>
    <p>Thanks,</p>
    <p>Streamify Team</p>
</div>
"""


def send_email(to_email: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    """Send an HTML email via SMTP."""
    if not SMTP_HOST:
        logger.error(f"SMTP_HOST not configured, cannot send email to {to_email}")
        return False

    try:
        msg = EmailMessage()
        msg["From"] = EMAIL_SENDER
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(text or "Please view this email in an HTML capable client.")
        msg.add_alternative(html, subtype="html")

        context = ssl.create_default_context()
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=10) as server:
            server.starttls(context=context)
            if SMTP_USER:
                server.login(SMTP_USER, SMTP_PASS)
            server.send_message(msg)
        logger.info(f"Email sent to {to_email}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def send_password_reset_email(to_email: str, name: Optional[str], otp: str, valid_minutes: int = 60) -> bool:
    """Send the password reset OTP."""
    subject = "Streamify Password Reset OTP"
    text = f"Your Streamify password reset OTP is: {otp}\n\nThis OTP is valid for {valid_minutes} minutes only."
    html = forgot_password_template(name, otp, valid_minutes)
    return send_email(to_email, subject, html, text)
