from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    CheckEmailAPIView,
    MeAPIView,
    RegisterAPIView,
    ResendOTPAPIView,
    VerifyOTPAPIView,
)

urlpatterns = [
    path("register/", RegisterAPIView.as_view(), name="auth-register"),
    path("check-email/", CheckEmailAPIView.as_view(), name="auth-check-email"),
    path("resend-otp/", ResendOTPAPIView.as_view(), name="auth-resend-otp"),
    path("verify-otp/", VerifyOTPAPIView.as_view(), name="auth-verify-otp"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", MeAPIView.as_view(), name="me"),
]
