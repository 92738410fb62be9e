from django.urls import path

from .views import (
    ExportCSVView,
    ExportPDFView,
    PaymentReportView,
    ReminderStatusView,
    SendReminderView,
)

urlpatterns = [
    path("reports/payments/", PaymentReportView.as_view(), name="payment-report"),
    path("reports/export/csv/", ExportCSVView.as_view(), name="export-csv"),
    path("reports/export/pdf/", ExportPDFView.as_view(), name="export-pdf"),
    path("email/send-reminder/", SendReminderView.as_view(), name="send-reminder"),
    path("email/reminder-status/", ReminderStatusView.as_view(), name="reminder-status"),
]
