from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone


def reminder_cooldown() -> timedelta:
    return timedelta(days=getattr(settings, "REMINDER_COOLDOWN_DAYS", 7))


class ReminderLog(models.Model):
    """Когда участнику последний раз отправляли напоминание об оплате."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reminder_log",
    )
    last_sent = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Reminder log"
        verbose_name_plural = "Reminder logs"

    def __str__(self) -> str:
        return f"{self.user} @ {self.last_sent:%Y-%m-%d %H:%M}"

    @property
    def next_available(self):
        return self.last_sent + reminder_cooldown()
