from rest_framework import status
from rest_framework.response import Response


class PaymentErrorCode:
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_NUMBER = "INVALID_NUMBER"
    MISSING_REFERENCE = "MISSING_REFERENCE"
    NOT_FOUND = "NOT_FOUND"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    STATUS_CHECK_FAILED = "STATUS_CHECK_FAILED"
    SERVER_ERROR = "SERVER_ERROR"


class GatewayError(Exception):
    """
    Ошибка обращения к платёжному шлюзу.
    code пробрасывается клиенту как есть (в т.ч. error_code самого шлюза).
    """

    def __init__(self, code: str, message: str, details=None, http_status: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.http_status = http_status


def error_payload(code: str, message: str, details=None) -> dict:
    payload = {"success": False, "error": code, "message": message}
    if details is not None:
        payload["details"] = details
    return payload


def error_response(code: str, message: str, http_status: int, details=None) -> Response:
    return Response(error_payload(code, message, details), status=http_status)
