# apps/notifications/mail.py

import logging
from decimal import Decimal

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

OTP_SUBJECT = "REI 25th Login One Time Pin"
CONFIRMATION_SUBJECT = "REI Conference Payment Confirmation"
REMINDER_SUBJECT = "Reminder: Complete Your REI Conference Payment"


def format_ugx(amount) -> str:
    return f"UGX {Decimal(amount or 0):,.0f}"


def _send(subject: str, template: str, context: dict, to: str) -> None:
    """Рендерит text + html версии шаблона и отправляет письмо."""
    text_body = render_to_string(f"emails/{template}.txt", context)
    html_body = render_to_string(f"emails/{template}.html", context)

    message = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    message.attach_alternative(html_body, "text/html")
    message.send()


def send_otp_email(email: str, otp: str, full_name: str) -> bool:
    """
    Отправка PIN-кода для входа.
    Ошибку SMTP только логируем: пользователь может запросить код повторно.
    """
    try:
        _send(
            OTP_SUBJECT,
            "otp_code",
            {"otp": otp, "full_name": full_name or "Member"},
            email,
        )
    except Exception:
        logger.exception("Error sending OTP email to %s", email)
        return False

    logger.info("OTP email sent to %s", email)
    return True


def send_payment_confirmation_email(
    email: str,
    full_name: str,
    amount_paid,
    balance,
    total_amount,
    payment_method: str,
    transaction_id: str,
) -> None:
    context = {
        "full_name": full_name,
        "amount_paid": format_ugx(amount_paid),
        "balance": format_ugx(balance),
        "total_amount": format_ugx(total_amount),
        "payment_method": payment_method or "Mobile Money",
        "transaction_id": transaction_id,
        "fully_paid": Decimal(balance or 0) <= 0,
    }
    _send(CONFIRMATION_SUBJECT, "payment_confirmation", context, email)
    logger.info("Payment confirmation sent to %s (txn=%s)", email, transaction_id)


def send_payment_reminder_email(email: str, full_name: str, amount_paid, balance_due) -> None:
    context = {
        "full_name": full_name,
        "amount_paid": format_ugx(amount_paid),
        "balance_due": format_ugx(balance_due),
    }
    _send(REMINDER_SUBJECT, "payment_reminder", context, email)
    logger.info("Payment reminder sent to %s", email)
