import logging
import secrets

from rest_framework_simplejwt.tokens import RefreshToken

from apps.notifications.mail import send_otp_email
from .models import User

logger = logging.getLogger(__name__)


def generate_token_pair(user: User) -> dict:
    refresh = RefreshToken.for_user(user)

    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def generate_otp_code() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def send_login_code(user: User) -> bool:
    """
    Генерирует новый OTP, сохраняет его у пользователя и отправляет на email.
    Возвращает False, если письмо не ушло (код при этом остаётся действительным).
    """
    code = generate_otp_code()
    user.issue_otp(code)
    logger.info("OTP issued for user_id=%s", user.pk)
    return send_otp_email(user.email, code, user.full_name)
