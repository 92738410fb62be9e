# apps/payments/poller.py

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from django.conf import settings

from .exceptions import GatewayError
from .gateway import STATUS_PENDING, TERMINAL_STATUSES, get_gateway
from .services import check_payment_status

logger = logging.getLogger(__name__)


@dataclass
class PollResult:
    status: str
    attempts: int
    data: dict = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class PaymentStatusPoller:
    """
    Опрашивает шлюз о статусе платежа, пока не придёт success / failed.

    По умолчанию ограничения по числу попыток нет: цикл крутится, пока
    статус не станет терминальным или пока кто-то не вызовет stop().
    Ошибки отдельного запроса логируются, опрос продолжается.
    """

    def __init__(
        self,
        gateway=None,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        on_tick: Optional[Callable[[int, Optional[dict]], None]] = None,
    ):
        self.gateway = gateway or get_gateway()
        if interval is None:
            interval = getattr(settings, "PAYMENT_STATUS_POLL_INTERVAL", 5)
        self.interval = interval
        self.max_attempts = max_attempts
        self.on_tick = on_tick
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def poll(self, internal_reference: str) -> PollResult:
        attempts = 0
        last = None

        while not self.stopped:
            attempts += 1
            try:
                last = check_payment_status(internal_reference, gateway=self.gateway)
            except GatewayError as exc:
                logger.warning(
                    "Status check %s for %s failed: %s %s",
                    attempts,
                    internal_reference,
                    exc.code,
                    exc.message,
                )
                last = None

            if self.on_tick:
                self.on_tick(attempts, last)

            if last and last["status"] in TERMINAL_STATUSES:
                logger.info("Payment %s reached %s after %s checks", internal_reference, last["status"], attempts)
                return PollResult(
                    status=last["status"],
                    attempts=attempts,
                    data=last["data"],
                    message=last.get("message"),
                )

            if self.max_attempts is not None and attempts >= self.max_attempts:
                logger.info("Giving up on %s after %s checks", internal_reference, attempts)
                break

            self._stop_event.wait(self.interval)

        return PollResult(
            status=last["status"] if last else STATUS_PENDING,
            attempts=attempts,
            data=last["data"] if last else {},
            message=last.get("message") if last else None,
        )
