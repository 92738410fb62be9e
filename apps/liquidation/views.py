import logging

from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import OpenApiResponse, extend_schema

from .models import LiquidationRequest
from .permissions import HasAdminRole, IsApprover
from .serializers import LiquidationRequestSerializer, LiquidationStatusSerializer

logger = logging.getLogger(__name__)


class LiquidationRequestCreateView(APIView):
    """
    POST /api/liquidation-request/
    """

    permission_classes = [HasAdminRole]

    @extend_schema(
        summary="Submit a liquidation request",
        request=LiquidationRequestSerializer,
        responses={
            201: LiquidationRequestSerializer,
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Admin role required."),
        },
    )
    def post(self, request):
        serializer = LiquidationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        liquidation = serializer.save(
            requester=request.user,
            requester_name=request.user.full_name or request.user.email,
        )
        logger.info(
            "Liquidation request %s created by user_id=%s for %s",
            liquidation.pk,
            request.user.pk,
            liquidation.amount,
        )
        return Response(
            {"success": True, "request": LiquidationRequestSerializer(liquidation).data},
            status=status.HTTP_201_CREATED,
        )


class LiquidationRequestListView(APIView):
    permission_classes = [HasAdminRole]

    @extend_schema(
        summary="List liquidation requests",
        responses={200: LiquidationRequestSerializer(many=True)},
    )
    def get(self, request):
        qs = LiquidationRequest.objects.select_related("reviewed_by").order_by("-created_at")
        return Response(LiquidationRequestSerializer(qs, many=True).data)


class LiquidationRequestStatusView(APIView):
    """
    PATCH /api/liquidation-requests/<id>/

    pending -> approved | rejected, approved -> processed.
    """

    permission_classes = [IsApprover]

    @extend_schema(
        summary="Approve, reject or mark a liquidation request processed",
        request=LiquidationStatusSerializer,
        responses={
            200: LiquidationRequestSerializer,
            400: OpenApiResponse(description="Unknown status."),
            403: OpenApiResponse(description="Approver role required."),
            404: OpenApiResponse(description="Request not found."),
            409: OpenApiResponse(description="Transition not allowed from the current status."),
        },
    )
    def patch(self, request, pk):
        serializer = LiquidationStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": "Invalid status"}, status=status.HTTP_400_BAD_REQUEST)
        new_status = serializer.validated_data["status"]

        with transaction.atomic():
            liquidation = LiquidationRequest.objects.select_for_update().filter(pk=pk).first()
            if liquidation is None:
                return Response(
                    {"error": "Liquidation request not found"},
                    status=status.HTTP_404_NOT_FOUND,
                )

            if not liquidation.can_transition_to(new_status):
                return Response(
                    {"error": f"Cannot change status from {liquidation.status} to {new_status}"},
                    status=status.HTTP_409_CONFLICT,
                )

            previous = liquidation.status
            liquidation.status = new_status
            liquidation.reviewed_by = request.user
            liquidation.reviewed_at = timezone.now()
            liquidation.save(update_fields=["status", "reviewed_by", "reviewed_at", "updated_at"])

        logger.info(
            "Liquidation request %s: %s -> %s by user_id=%s",
            liquidation.pk,
            previous,
            new_status,
            request.user.pk,
        )
        return Response({"success": True, "request": LiquidationRequestSerializer(liquidation).data})
