# users/models.py
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from .managers import UserManager


class AdminRole(models.TextChoices):
    NONE = "", "None"
    REQUESTER = "requester", "Requester"
    APPROVER = "approver", "Approver"


class User(AbstractUser):
    """
    Участник конференции. Вход по email и одноразовому PIN-коду,
    поэтому email используется вместо username.
    """
    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(
        unique=True,
        help_text="Email used to log in and receive OTP codes.",
        verbose_name="Email",
    )
    phone_number = models.CharField(max_length=20, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    club_name = models.CharField(max_length=255, blank=True)
    country = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)
    designation = models.CharField(
        max_length=100,
        blank=True,
        help_text="Position held in the club, e.g. Club President.",
    )
    delegate_type = models.CharField(max_length=50, blank=True)
    t_shirt_size = models.CharField(max_length=10, blank=True)
    dietary_needs = models.CharField(max_length=100, blank=True)
    accommodation = models.CharField(max_length=100, blank=True)
    next_of_kin = models.CharField(max_length=255, blank=True)
    next_of_kin_contact = models.CharField(max_length=20, blank=True)
    special_medical_conditions = models.TextField(blank=True)

    # Поля для OTP-кода
    otp_code = models.CharField(
        max_length=6,
        blank=True,
        null=True,
        help_text="One-time PIN for passwordless login.",
    )
    otp_expires_at = models.DateTimeField(
        blank=True,
        null=True,
        help_text="Moment the current OTP stops being valid.",
    )

    admin_role = models.CharField(
        max_length=20,
        choices=AdminRole.choices,
        default=AdminRole.NONE,
        blank=True,
        help_text="Role in the fund liquidation workflow.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        """
        Возвращает ФИО пользователя, собранное из полей first_name / last_name.
        """
        parts = [self.first_name or "", self.last_name or ""]
        full = " ".join(part for part in parts if part).strip()
        return full or ""

    def set_full_name(self, value: str):
        """
        Делит переданное ФИО на имя и фамилию для хранения в стандартных полях.
        """
        cleaned = (value or "").strip()
        if not cleaned:
            self.first_name = ""
            self.last_name = ""
            return

        parts = cleaned.split()
        self.first_name = parts[0]
        self.last_name = " ".join(parts[1:]) if len(parts) > 1 else ""

    @property
    def is_requester(self) -> bool:
        return self.admin_role == AdminRole.REQUESTER

    @property
    def is_approver(self) -> bool:
        return self.admin_role == AdminRole.APPROVER

    def issue_otp(self, code: str) -> None:
        ttl_minutes = getattr(settings, "OTP_TTL_MINUTES", 10)
        self.otp_code = code
        self.otp_expires_at = timezone.now() + timedelta(minutes=ttl_minutes)
        self.save(update_fields=["otp_code", "otp_expires_at"])

    def otp_matches(self, code: str) -> bool:
        """Проверяет, что код совпадает и ещё не истёк."""
        if not self.otp_code or self.otp_code != code:
            return False
        if self.otp_expires_at and timezone.now() > self.otp_expires_at:
            return False
        return True

    def clear_otp(self) -> None:
        self.otp_code = None
        self.otp_expires_at = None
        self.save(update_fields=["otp_code", "otp_expires_at"])
