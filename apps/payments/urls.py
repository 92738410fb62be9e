from django.urls import path

from .views import (
    CheckPaymentStatusView,
    ProcessPaymentView,
    SavePaymentView,
    SendPaymentEmailView,
)

urlpatterns = [
    path("process-payment/", ProcessPaymentView.as_view(), name="process-payment"),
    path("check-payment-status/", CheckPaymentStatusView.as_view(), name="check-payment-status"),
    path("save-payment/", SavePaymentView.as_view(), name="save-payment"),
    path("send-payment-email/", SendPaymentEmailView.as_view(), name="send-payment-email"),
]
