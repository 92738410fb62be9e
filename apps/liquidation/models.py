import uuid

from django.conf import settings
from django.db import models


class LiquidationMethod(models.TextChoices):
    BANK = "bank", "Bank transfer"
    MOBILE_MONEY = "mobile_money", "Mobile money"


class LiquidationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    PROCESSED = "processed", "Processed"


# Допустимые переходы статуса заявки
ALLOWED_TRANSITIONS = {
    LiquidationStatus.PENDING: {LiquidationStatus.APPROVED, LiquidationStatus.REJECTED},
    LiquidationStatus.APPROVED: {LiquidationStatus.PROCESSED},
    LiquidationStatus.REJECTED: set(),
    LiquidationStatus.PROCESSED: set(),
}


class LiquidationRequest(models.Model):
    """
    Заявка на вывод собранных средств конференции.
    Создаёт requester, рассматривает approver.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=LiquidationMethod.choices)

    account_name = models.CharField(max_length=255)
    bank_name = models.CharField(max_length=255, blank=True)
    account_number = models.CharField(max_length=64, blank=True)
    mobile_number = models.CharField(max_length=20, blank=True)
    network = models.CharField(max_length=32, blank=True)

    reason = models.TextField()
    disbursement_date = models.DateField()

    status = models.CharField(
        max_length=20,
        choices=LiquidationStatus.choices,
        default=LiquidationStatus.PENDING,
        db_index=True,
    )

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="liquidation_requests",
    )
    requester_name = models.CharField(max_length=255, blank=True)

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_liquidations",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Liquidation request"
        verbose_name_plural = "Liquidation requests"

    def __str__(self) -> str:
        return f"{self.requester_name or self.requester}: {self.amount} ({self.status})"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())
