import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.notifications.mail import send_payment_confirmation_email
from apps.registrations.models import Registration
from apps.users.utils import to_msisdn
from .exceptions import GatewayError, PaymentErrorCode
from .gateway import get_gateway
from .models import DailyTransactionCounter, Payment, PaymentMethod

logger = logging.getLogger(__name__)

EMONEY_ISSUER_CODE = "618"
MESSAGE_CATEGORY = "01"
PAYMENT_DESCRIPTION = "Conference registration payment"


def get_next_transaction_id() -> str:
    """Дневной счётчик транзакций, 9 знаков с ведущими нулями."""
    today = timezone.localdate()
    with transaction.atomic():
        counter, created = DailyTransactionCounter.objects.select_for_update().get_or_create(
            date=today,
            defaults={"counter": 1},
        )
        if not created:
            DailyTransactionCounter.objects.filter(pk=counter.pk).update(counter=F("counter") + 1)
            counter.refresh_from_db(fields=["counter"])

    return str(counter.counter).zfill(9)


def generate_reference_number() -> str:
    today = timezone.localdate()
    return f"{EMONEY_ISSUER_CODE}{MESSAGE_CATEGORY}{today:%Y%m%d}{get_next_transaction_id()}"


# --------------------------------------------------------------
# Инициация платежа
# --------------------------------------------------------------


def initiate_payment(amount: Decimal, phone_number: str, gateway=None) -> dict:
    """
    Проверяет номер в шлюзе и отправляет запрос на списание.
    Возвращает ссылки, по которым дальше опрашивается статус.
    """
    gateway = gateway or get_gateway()
    msisdn = to_msisdn(phone_number)

    try:
        validation = gateway.validate_msisdn(msisdn)
    except GatewayError as exc:
        if exc.code == PaymentErrorCode.SERVER_ERROR:
            raise
        raise GatewayError(
            PaymentErrorCode.INVALID_NUMBER,
            f"Invalid mobile number: {exc.message}",
            details=exc.details,
        ) from exc

    if validation.get("valid") is False:
        raise GatewayError(
            PaymentErrorCode.INVALID_NUMBER,
            f"Invalid mobile number: {validation.get('message') or 'Validation failed'}",
            details=validation,
        )

    reference = generate_reference_number()
    result = gateway.request_payment(
        msisdn=msisdn,
        amount=amount,
        description=PAYMENT_DESCRIPTION,
        reference=reference,
    )

    logger.info(
        "Payment initiated reference=%s internal_reference=%s",
        reference,
        result.get("internal_reference"),
    )
    return {
        "success": True,
        "status": "PENDING",
        "reference": reference,
        "customerReference": result.get("customer_reference"),
        "internalReference": result.get("internal_reference"),
        "message": "Payment request initiated. Please approve on your phone.",
        "provider": result.get("provider"),
        "amount": result.get("amount", amount),
    }


def check_payment_status(internal_reference: str, gateway=None) -> dict:
    gateway = gateway or get_gateway()
    result = gateway.check_request_status(internal_reference)

    return {
        "success": True,
        "status": (result.get("request_status") or "").lower(),
        "message": result.get("message"),
        "data": {
            "customerReference": result.get("customer_reference"),
            "internalReference": result.get("internal_reference"),
            "msisdn": result.get("msisdn"),
            "amount": result.get("amount"),
            "currency": result.get("currency"),
            "provider": result.get("provider"),
            "charge": result.get("charge"),
            "providerTransactionId": result.get("provider_transaction_id"),
            "completedAt": result.get("completed_at"),
        },
    }


# --------------------------------------------------------------
# Проведение платежа
# --------------------------------------------------------------


def notify_payment_settled(payment: Payment) -> bool:
    """
    Письмо-подтверждение после проведения платежа.
    Платёж уже сохранён, поэтому ошибку SMTP только логируем.
    """
    registration = payment.registration
    user = registration.user
    try:
        send_payment_confirmation_email(
            user.email,
            user.full_name,
            registration.amount_paid,
            registration.balance,
            registration.total_amount,
            payment.get_payment_method_display(),
            payment.transaction_id,
        )
    except Exception:
        logger.exception("Payment confirmation email failed for payment_id=%s", payment.pk)
        return False
    return True


def settle_payment(
    *,
    registration_id: int,
    amount: Decimal,
    transaction_id: str,
    payment_method: str = PaymentMethod.MOBILE_MONEY,
    provider: str = "",
    user=None,
):
    """
    Записывает Payment и переносит сумму из balance в amount_paid.

    Повторное проведение того же transaction_id НЕ блокируется: только пишем
    предупреждение в лог.
    """
    with transaction.atomic():
        registration = (
            Registration.objects.select_for_update()
            .select_related("user")
            .get(pk=registration_id)
        )

        if Payment.objects.filter(transaction_id=transaction_id).exists():
            logger.warning(
                "Transaction %s is already recorded; settling registration %s again",
                transaction_id,
                registration.pk,
            )

        payment = Payment.objects.create(
            registration=registration,
            user=user or registration.user,
            amount=amount,
            payment_method=payment_method,
            transaction_id=transaction_id,
            provider=provider or "",
        )

        registration.apply_payment(amount)
        registration.save(update_fields=["amount_paid", "balance", "payment_status", "updated_at"])

        transaction.on_commit(lambda: notify_payment_settled(payment))

    logger.info(
        "Settled %s on registration %s (txn=%s): paid=%s balance=%s status=%s",
        amount,
        registration.pk,
        transaction_id,
        registration.amount_paid,
        registration.balance,
        registration.payment_status,
    )
    return payment, registration
