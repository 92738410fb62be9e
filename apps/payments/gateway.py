# apps/payments/gateway.py

import logging
from decimal import Decimal

import requests
from django.conf import settings
from rest_framework import status

from .exceptions import GatewayError, PaymentErrorCode

logger = logging.getLogger(__name__)

GATEWAY_ACCEPT = "application/vnd.relworx.v2"

STATUS_PENDING = "pending"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = (STATUS_SUCCESS, STATUS_FAILED)


def _as_number(amount):
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return int(value)
    return float(value)


class MobileMoneyGateway:
    """
    HTTP-клиент мобильного платёжного шлюза (Relworx-совместимый API).

    Все методы возвращают распарсенный JSON шлюза или бросают GatewayError.
    Повторов нет: на один вызов один HTTP-запрос.
    """

    def __init__(self, base_url=None, api_key=None, account_no=None, currency=None, timeout=None, session=None):
        config = getattr(settings, "PAYMENT_GATEWAY", {})
        self.base_url = (base_url or config.get("BASE_URL", "")).rstrip("/")
        self.api_key = api_key if api_key is not None else config.get("API_KEY", "")
        self.account_no = account_no if account_no is not None else config.get("ACCOUNT_NO", "")
        self.currency = currency or config.get("CURRENCY", "UGX")
        self.timeout = timeout or config.get("TIMEOUT", 30)

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": GATEWAY_ACCEPT,
                "Authorization": f"Bearer {self.api_key}",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _call(self, method: str, path: str, *, failure_code: str, failure_message: str, **kwargs) -> dict:
        try:
            response = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Gateway %s %s failed: %s", method, path, exc)
            raise GatewayError(
                PaymentErrorCode.SERVER_ERROR,
                failure_message,
                http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from exc

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.ok:
            logger.warning("Gateway %s %s returned %s: %s", method, path, response.status_code, result)
            raise GatewayError(
                result.get("error_code") or failure_code,
                result.get("message") or failure_message,
                details=result,
            )

        return result

    def validate_msisdn(self, msisdn: str) -> dict:
        return self._call(
            "POST",
            "validate",
            json={"msisdn": f"+{msisdn}"},
            failure_code=PaymentErrorCode.INVALID_NUMBER,
            failure_message="Validation failed",
        )

    def request_payment(self, msisdn: str, amount, description: str, reference: str) -> dict:
        payload = {
            "account_no": self.account_no,
            "msisdn": f"+{msisdn}",
            "amount": _as_number(amount),
            "currency": self.currency,
            "description": description,
            "reference": reference,
        }
        logger.info("Requesting payment reference=%s amount=%s", reference, payload["amount"])
        return self._call(
            "POST",
            "request-payment",
            json=payload,
            failure_code=PaymentErrorCode.PAYMENT_FAILED,
            failure_message="Payment request failed",
        )

    def check_request_status(self, internal_reference: str) -> dict:
        return self._call(
            "GET",
            "check-request-status",
            params={"internal_reference": internal_reference, "account_no": self.account_no},
            failure_code=PaymentErrorCode.STATUS_CHECK_FAILED,
            failure_message="Failed to check payment status",
        )


def get_gateway() -> MobileMoneyGateway:
    return MobileMoneyGateway()
