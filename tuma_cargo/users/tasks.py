import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify Your Email Address - Tuma-Africa Link Cargo"
RESET_SUBJECT = "Reset Your Password - Tuma-Africa Link Cargo"


@shared_task(name="users.send_verification_email")
def send_verification_email(user_id: int) -> bool:
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None or user.verified or not user.email_verification_token:
        return False

    url = f"{settings.FRONTEND_URL}/verify-email?token={user.email_verification_token}"
    body = (
        f"Hello {user.full_name},\n\n"
        "Thank you for registering with Tuma-Africa Link Cargo. "
        "Please confirm your email address by opening the link below:\n\n"
        f"{url}\n\n"
        f"This link expires in {settings.EMAIL_VERIFICATION_TTL_HOURS} hours.\n"
    )
    send_mail(VERIFICATION_SUBJECT, body, settings.DEFAULT_FROM_EMAIL, [user.email])
    logger.info("Verification email sent to user %s", user.pk)
    return True


@shared_task(name="users.send_password_reset_email")
def send_password_reset_email(user_id: int) -> bool:
    user = get_user_model().objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        return False

    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    url = f"{settings.FRONTEND_URL}/reset-password?uid={uid}&token={token}"
    body = (
        f"Hello {user.full_name},\n\n"
        "We received a request to reset your password. "
        "Open the link below to choose a new one:\n\n"
        f"{url}\n\n"
        "If you did not request a password reset you can ignore this email.\n"
    )
    send_mail(RESET_SUBJECT, body, settings.DEFAULT_FROM_EMAIL, [user.email])
    logger.info("Password reset email sent to user %s", user.pk)
    return True
