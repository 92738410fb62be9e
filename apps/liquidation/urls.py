from django.urls import path

from .views import (
    LiquidationRequestCreateView,
    LiquidationRequestListView,
    LiquidationRequestStatusView,
)

urlpatterns = [
    path("liquidation-request/", LiquidationRequestCreateView.as_view(), name="liquidation-request"),
    path("liquidation-requests/", LiquidationRequestListView.as_view(), name="liquidation-requests"),
    path(
        "liquidation-requests/<uuid:pk>/",
        LiquidationRequestStatusView.as_view(),
        name="liquidation-request-status",
    ),
]
