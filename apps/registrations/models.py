from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


def default_registration_fee() -> Decimal:
    return Decimal(getattr(settings, "REGISTRATION_FEE", 180000))


class RegistrationStatus(models.TextChoices):
    REGISTERED = "registered", "Registered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PARTIALLY_PAID = "partially_paid", "Partially paid"
    FULLY_PAID = "fully_paid", "Fully paid"


class Registration(models.Model):
    """
    Регистрация участника на конференцию.
    amount_paid + balance = полная стоимость; меняется только при оплате.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="registrations",
    )

    registration_status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.REGISTERED,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=default_registration_fee,
        help_text="Outstanding amount in UGX. Not clamped at zero.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Registration"
        verbose_name_plural = "Registrations"

    def __str__(self) -> str:
        return f"{self.user} ({self.payment_status})"

    @property
    def total_amount(self) -> Decimal:
        return self.amount_paid + self.balance

    def compute_payment_status(self) -> str:
        if self.amount_paid >= self.total_amount:
            return PaymentStatus.FULLY_PAID
        if self.amount_paid > 0:
            return PaymentStatus.PARTIALLY_PAID
        return PaymentStatus.PENDING

    def apply_payment(self, amount: Decimal) -> None:
        """
        Переносит сумму из balance в amount_paid и пересчитывает статус.
        Сохраняет вызывающий код.
        """
        self.amount_paid += amount
        self.balance -= amount
        self.payment_status = self.compute_payment_status()
