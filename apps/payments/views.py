import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.notifications.mail import send_payment_confirmation_email
from apps.registrations.models import Registration
from apps.registrations.serializers import RegistrationSerializer
from apps.users.utils import is_mobile_money_number
from .exceptions import GatewayError, PaymentErrorCode, error_payload, error_response
from .serializers import (
    PaymentEmailSerializer,
    PaymentErrorSerializer,
    PaymentSerializer,
    ProcessPaymentSerializer,
    SavePaymentSerializer,
)
from .services import check_payment_status, initiate_payment, settle_payment

logger = logging.getLogger(__name__)

User = get_user_model()


def first_error_message(detail) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return first_error_message(value)
        return "Invalid request data"
    if isinstance(detail, list):
        return first_error_message(detail[0]) if detail else "Invalid request data"
    return str(detail)


class PaymentAPIView(APIView):
    """
    Базовый view платёжных эндпоинтов: все ошибки отдаются в одном формате
    {"success": false, "error": CODE, "message": ...}.
    """

    def handle_exception(self, exc):
        if isinstance(exc, GatewayError):
            return error_response(exc.code, exc.message, exc.http_status, exc.details)

        if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            response = super().handle_exception(exc)
            response.data = error_payload(PaymentErrorCode.UNAUTHORIZED, "Authentication required")
            return response

        if isinstance(exc, ValidationError):
            return error_response(
                PaymentErrorCode.VALIDATION_ERROR,
                first_error_message(exc.detail),
                status.HTTP_400_BAD_REQUEST,
                details=exc.detail,
            )

        if isinstance(exc, APIException):
            return super().handle_exception(exc)

        logger.exception("Unexpected error in %s", self.__class__.__name__)
        return error_response(
            PaymentErrorCode.SERVER_ERROR,
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class ProcessPaymentView(PaymentAPIView):
    """
    POST /api/process-payment/

    Body:
    {
      "amount": 180000,
      "phoneNumber": "256772123456"
    }
    """

    @extend_schema(
        summary="Initiate a mobile-money payment",
        request=ProcessPaymentSerializer,
        responses={
            200: OpenApiResponse(description="Debit request sent, approve on the phone."),
            400: OpenApiResponse(PaymentErrorSerializer, description="VALIDATION_ERROR / INVALID_NUMBER / PAYMENT_FAILED"),
            401: OpenApiResponse(PaymentErrorSerializer, description="UNAUTHORIZED"),
            500: OpenApiResponse(PaymentErrorSerializer, description="SERVER_ERROR"),
        },
    )
    def post(self, request):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not is_mobile_money_number(data["phone_number"]):
            return error_response(
                PaymentErrorCode.INVALID_NUMBER,
                "Please enter a valid MTN or Airtel Uganda number starting with 256",
                status.HTTP_400_BAD_REQUEST,
            )

        result = initiate_payment(data["amount"], data["phone_number"])
        return Response(result, status=status.HTTP_200_OK)


class CheckPaymentStatusView(PaymentAPIView):
    """
    GET /api/check-payment-status/?internal_reference=...
    """

    @extend_schema(
        summary="Check the gateway status of a payment",
        parameters=[OpenApiParameter("internal_reference", str, required=True)],
        responses={
            200: OpenApiResponse(description="status is pending, success or failed."),
            400: OpenApiResponse(PaymentErrorSerializer, description="MISSING_REFERENCE / STATUS_CHECK_FAILED"),
            401: OpenApiResponse(PaymentErrorSerializer, description="UNAUTHORIZED"),
            500: OpenApiResponse(PaymentErrorSerializer, description="SERVER_ERROR"),
        },
    )
    def get(self, request):
        internal_reference = request.query_params.get("internal_reference")
        if not internal_reference:
            return error_response(
                PaymentErrorCode.MISSING_REFERENCE,
                "Internal reference is required",
                status.HTTP_400_BAD_REQUEST,
            )

        return Response(check_payment_status(internal_reference))


class SavePaymentView(PaymentAPIView):
    """
    POST /api/save-payment/

    Проводит успешный платёж по регистрации и отправляет письмо-подтверждение.
    """

    @extend_schema(
        summary="Record a settled payment",
        request=SavePaymentSerializer,
        responses={
            200: OpenApiResponse(description="Payment recorded, registration updated."),
            400: OpenApiResponse(PaymentErrorSerializer, description="VALIDATION_ERROR"),
            401: OpenApiResponse(PaymentErrorSerializer, description="UNAUTHORIZED"),
            404: OpenApiResponse(PaymentErrorSerializer, description="Registration not found."),
        },
    )
    def post(self, request):
        serializer = SavePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        registration = Registration.objects.filter(pk=data["registration_id"]).first()
        if registration is None:
            return error_response(
                PaymentErrorCode.NOT_FOUND,
                "Registration not found",
                status.HTTP_404_NOT_FOUND,
            )

        if registration.user_id != request.user.pk and not request.user.is_staff:
            return error_response(
                PaymentErrorCode.FORBIDDEN,
                "You can only record payments for your own registration",
                status.HTTP_403_FORBIDDEN,
            )

        payer = None
        if data.get("user_id"):
            payer = User.objects.filter(pk=data["user_id"]).first()
            if payer is None:
                return error_response(
                    PaymentErrorCode.NOT_FOUND,
                    "User not found",
                    status.HTTP_404_NOT_FOUND,
                )

        payment, registration = settle_payment(
            registration_id=registration.pk,
            amount=data["amount"],
            transaction_id=data["transaction_id"],
            payment_method=data["payment_method"],
            provider=data.get("provider", ""),
            user=payer,
        )

        return Response(
            {
                "success": True,
                "payment": PaymentSerializer(payment).data,
                "registration": RegistrationSerializer(registration).data,
            }
        )


class SendPaymentEmailView(PaymentAPIView):
    """
    POST /api/send-payment-email/
    """

    @extend_schema(
        summary="Send a payment confirmation email",
        request=PaymentEmailSerializer,
        responses={
            200: OpenApiResponse(description="Email sent."),
            400: OpenApiResponse(PaymentErrorSerializer, description="Missing required fields."),
            500: OpenApiResponse(PaymentErrorSerializer, description="Email could not be sent."),
        },
    )
    def post(self, request):
        serializer = PaymentEmailSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                PaymentErrorCode.VALIDATION_ERROR,
                "Missing required fields",
                status.HTTP_400_BAD_REQUEST,
                details=serializer.errors,
            )
        data = serializer.validated_data

        try:
            send_payment_confirmation_email(
                data["email"],
                data["full_name"],
                data["amount_paid"],
                data["balance"],
                data["total_amount"],
                data.get("payment_method", ""),
                data["transaction_id"],
            )
        except Exception:
            logger.exception("Error in payment confirmation route for %s", data["email"])
            return error_response(
                PaymentErrorCode.SERVER_ERROR,
                "Failed to send payment confirmation",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"success": True})
