import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.users.serializers import UserSerializer
from .models import Registration, RegistrationStatus
from .serializers import MemberRegistrationSerializer, RegistrationSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class MemberRegistrationView(APIView):
    """
    POST /api/member-registration/

    Сохраняет анкету в профиль пользователя и создаёт регистрацию
    с полной суммой взноса в balance.
    """

    @extend_schema(
        summary="Submit the registration form",
        request=MemberRegistrationSerializer,
        responses={
            201: OpenApiResponse(description="Registration created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="Member is already registered."),
        },
    )
    @transaction.atomic
    def post(self, request):
        serializer = MemberRegistrationSerializer(instance=request.user, data=request.data)
        serializer.is_valid(raise_exception=True)

        already_registered = Registration.objects.select_for_update().filter(
            user=request.user,
            registration_status=RegistrationStatus.REGISTERED,
        ).exists()
        if already_registered:
            return Response(
                {"error": "You are already registered for the conference."},
                status=status.HTTP_409_CONFLICT,
            )

        user = serializer.save()
        registration = Registration.objects.create(user=user)
        logger.info("Registration %s created for user_id=%s", registration.pk, user.pk)

        return Response(
            {
                "success": True,
                "user": UserSerializer(user).data,
                "registration": RegistrationSerializer(registration).data,
            },
            status=status.HTTP_201_CREATED,
        )


class CheckRegistrationView(APIView):
    """
    GET /api/check-registration/
    """

    @extend_schema(summary="Current user's registration", responses={200: OpenApiResponse(description="Registration state.")})
    def get(self, request):
        registration = (
            Registration.objects.filter(user=request.user)
            .order_by("-created_at")
            .first()
        )
        return Response(
            {
                "isRegistered": registration is not None,
                "registration": RegistrationSerializer(registration).data if registration else None,
                "user": UserSerializer(request.user).data,
            }
        )


class MemberDetailsView(APIView):
    """
    GET /api/member-details/?email=...

    Без email возвращает данные текущего пользователя; чужой email доступен только администраторам.
    """

    @extend_schema(
        summary="Member details with latest registration",
        parameters=[OpenApiParameter("email", str, required=False)],
        responses={
            200: OpenApiResponse(description="Member details."),
            403: OpenApiResponse(description="Only admins can look up other members."),
            404: OpenApiResponse(description="User not found."),
        },
    )
    def get(self, request):
        email = (request.query_params.get("email") or "").strip().lower()

        if email and email != request.user.email and not request.user.is_staff:
            return Response(
                {"error": "You can only view your own details."},
                status=status.HTTP_403_FORBIDDEN,
            )

        try:
            user = User.objects.get(email=email or request.user.email)
        except User.DoesNotExist:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)

        registration = user.registrations.order_by("-created_at").first()
        return Response(
            {
                "user": {
                    "fullName": user.full_name,
                    "phone_number": user.phone_number,
                    "club_name": user.club_name,
                },
                "registration": RegistrationSerializer(registration).data if registration else None,
            }
        )
