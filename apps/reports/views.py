import logging

from django.contrib.auth import get_user_model
from django.http import HttpResponse
from rest_framework import serializers, status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.notifications.mail import send_payment_reminder_email
from apps.registrations.models import Registration
from . import services

logger = logging.getLogger(__name__)

User = get_user_model()

USER_ID_REQUIRED = "User ID is required"
INVALID_USER_ID = "User ID must be a positive integer"

REPORT_FILTERS = [
    OpenApiParameter("status", str, enum=["fully", "partial", "unpaid"], required=False),
    OpenApiParameter("amount", str, required=False, description="Exact amount paid."),
]


class SendReminderSerializer(serializers.Serializer):
    userId = serializers.IntegerField(
        min_value=1,
        max_value=2**63 - 1,
        error_messages={
            "required": USER_ID_REQUIRED,
            "null": USER_ID_REQUIRED,
            "invalid": INVALID_USER_ID,
            "min_value": INVALID_USER_ID,
            "max_value": INVALID_USER_ID,
        },
    )


CSV_FILENAME = "rei-payments-report.csv"
PDF_FILENAME = "rei-payments-report.pdf"


class ReportFilterMixin:
    def get_filters(self, request):
        status_filter = request.query_params.get("status") or None
        amount = request.query_params.get("amount") or None
        return status_filter, amount

    def filter_error(self, exc):
        return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class PaymentReportView(ReportFilterMixin, APIView):
    """
    GET /api/reports/payments/?status=fully|partial|unpaid&amount=...
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Payment report",
        parameters=REPORT_FILTERS,
        responses={200: OpenApiResponse(description="Rows and summary.")},
    )
    def get(self, request):
        status_filter, amount = self.get_filters(request)
        try:
            rows = services.build_report_rows(status_filter, amount)
        except services.ReportFilterError as exc:
            return self.filter_error(exc)

        return Response(
            {
                "filter": services.filter_label(status_filter, amount),
                "summary": services.summarize(rows),
                "results": rows,
            }
        )


class ExportCSVView(ReportFilterMixin, APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Export the payment report as CSV",
        parameters=REPORT_FILTERS,
        responses={(200, "text/csv"): OpenApiResponse(description="CSV attachment.")},
    )
    def get(self, request):
        status_filter, amount = self.get_filters(request)
        try:
            rows = services.build_report_rows(status_filter, amount)
        except services.ReportFilterError as exc:
            return self.filter_error(exc)

        response = HttpResponse(services.export_csv(rows), content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{CSV_FILENAME}"'
        return response


class ExportPDFView(ReportFilterMixin, APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Export the payment report as PDF",
        parameters=REPORT_FILTERS,
        responses={(200, "application/pdf"): OpenApiResponse(description="PDF attachment.")},
    )
    def get(self, request):
        status_filter, amount = self.get_filters(request)
        try:
            rows = services.build_report_rows(status_filter, amount)
        except services.ReportFilterError as exc:
            return self.filter_error(exc)

        pdf = services.export_pdf(rows, services.filter_label(status_filter, amount))
        response = HttpResponse(pdf, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{PDF_FILENAME}"'
        return response


# --------------------------------------------------------------
# Напоминания
# --------------------------------------------------------------


class SendReminderView(APIView):
    """
    POST /api/email/send-reminder/
    Не чаще одного письма на участника за REMINDER_COOLDOWN_DAYS.
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Send a payment reminder",
        request=SendReminderSerializer,
        responses={
            200: OpenApiResponse(description="Reminder sent."),
            400: OpenApiResponse(description="Missing userId or nothing left to pay."),
            404: OpenApiResponse(description="User or registration not found."),
            429: OpenApiResponse(description="A reminder was sent recently."),
        },
    )
    def post(self, request):
        serializer = SendReminderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": serializer.errors["userId"][0]},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user_id = serializer.validated_data["userId"]

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)

        reminder = services.reminder_status_for(user)
        if not reminder["canSend"]:
            return Response(
                {
                    "error": "Reminder already sent recently",
                    "message": (
                        f"A reminder was sent to this member recently. "
                        f"Next reminder available in {reminder['daysUntilNext']} day(s)."
                    ),
                    "nextAvailable": reminder["nextAvailable"],
                    "lastSent": reminder["lastSent"],
                },
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )

        registration = Registration.objects.filter(user=user).order_by("-created_at").first()
        if registration is None:
            return Response({"error": "Registration not found"}, status=status.HTTP_404_NOT_FOUND)

        if registration.balance <= 0:
            return Response(
                {"error": "User has already completed payment"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            send_payment_reminder_email(
                user.email,
                user.full_name,
                registration.amount_paid,
                registration.balance,
            )
        except Exception:
            logger.exception("Failed to send reminder to user_id=%s", user.pk)
            return Response(
                {"error": "Failed to send reminder email"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        log = services.record_reminder(user)
        logger.info("Payment reminder sent to user_id=%s", user.pk)

        return Response(
            {
                "success": True,
                "message": "Reminder email sent successfully",
                "user": {"id": user.pk, "email": user.email, "fullName": user.full_name},
                "nextReminderAvailable": log.next_available.isoformat(),
            }
        )


class ReminderStatusView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Reminder cooldown per member",
        responses={200: OpenApiResponse(description="List of {userId, lastSent, canSend, daysUntilNext}.")},
    )
    def get(self, request):
        return Response(services.all_reminder_statuses())
