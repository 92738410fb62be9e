from django.conf import settings
from django.db import models

from apps.registrations.models import Registration


class PaymentMethod(models.TextChoices):
    MOBILE_MONEY = "mobile_money", "Mobile Money"
    CARD = "card", "Card"
    BANK = "bank", "Bank transfer"
    CASH = "cash", "Cash"


class Payment(models.Model):
    """
    Один проведённый платёж. Запись не меняется после создания.
    transaction_id не уникален: повторное проведение той же транзакции не блокируется.
    """

    registration = models.ForeignKey(
        Registration,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.MOBILE_MONEY,
    )
    transaction_id = models.CharField(max_length=100, db_index=True)
    provider = models.CharField(max_length=50, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"

    def __str__(self) -> str:
        return f"{self.payment_method} {self.amount} ({self.transaction_id})"


class DailyTransactionCounter(models.Model):
    date = models.DateField(unique=True)
    counter = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Daily transaction counter"
        verbose_name_plural = "Daily transaction counters"

    def __str__(self) -> str:
        return f"{self.date}: {self.counter}"
