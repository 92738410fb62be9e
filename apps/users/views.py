import logging

from django.db import transaction
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import (
    OpenApiExample,
    OpenApiResponse,
    extend_schema,
)

from .models import User
from .serializers import (
    AuthTokensResponseSerializer,
    EmailSerializer,
    ErrorResponseSerializer,
    OTPStatusResponseSerializer,
    UserRegistrationSerializer,
    UserSerializer,
    UserVerifyOTPSerializer,
)
from .services import generate_token_pair, send_login_code

logger = logging.getLogger(__name__)

INVALID_EMAIL = {"status": False, "error": "Invalid email format"}


def build_auth_response(user: User, *, status_code=status.HTTP_200_OK) -> Response:
    """
    Вернуть пару JWT-токенов + сериализованного пользователя.
    """
    token_pair = generate_token_pair(user)
    payload = {
        **token_pair,
        "user": UserSerializer(user).data,
    }
    return Response(payload, status=status_code)


# --------------------------------------------------------------
# Регистрация и OTP по email
# --------------------------------------------------------------


class RegisterAPIView(APIView):
    """
    Регистрация нового участника по email.
    Создаёт аккаунт и отправляет PIN-код на почту.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Register a member",
        description="Creates an account for the email and sends a login PIN.",
        request=UserRegistrationSerializer,
        responses={
            201: OpenApiResponse(
                response=OTPStatusResponseSerializer,
                description="User registered, OTP sent.",
            ),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid input."),
            409: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="A user with this email already exists.",
            ),
        },
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data["email"]

        if User.objects.filter(email=email).exists():
            return Response(
                {"status": False, "error": "A user with this email already exists."},
                status=status.HTTP_409_CONFLICT,
            )

        with transaction.atomic():
            user = User.objects.create_user(email=email)
            user.set_full_name(serializer.validated_data["full_name"])
            user.save(update_fields=["first_name", "last_name"])

        sent = send_login_code(user)
        message = "User registered, OTP sent" if sent else "User registered but OTP email failed to send"

        return Response(
            {"status": True, "message": message},
            status=status.HTTP_201_CREATED,
        )


class CheckEmailAPIView(APIView):
    """
    Первый шаг входа: если email известен, отправляем PIN-код.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Start login",
        description="Sends a fresh PIN when the email belongs to a registered user.",
        request=EmailSerializer,
        responses={
            200: OpenApiResponse(
                response=OTPStatusResponseSerializer,
                description="Whether the email exists; PIN sent when it does.",
                examples=[
                    OpenApiExample(
                        "Unknown email",
                        value={"status": True, "exists": False, "message": "Email not found"},
                    )
                ],
            ),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid email."),
        },
    )
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(INVALID_EMAIL, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data["email"]
        user = User.objects.filter(email=email).first()

        if not user:
            return Response({"status": True, "exists": False, "message": "Email not found"})

        send_login_code(user)
        return Response({"status": True, "exists": True, "message": "OTP sent to your email"})


class ResendOTPAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Resend login PIN",
        request=EmailSerializer,
        responses={
            200: OTPStatusResponseSerializer,
            400: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
        },
    )
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(INVALID_EMAIL, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = User.objects.get(email=serializer.validated_data["email"])
        except User.DoesNotExist:
            return Response(
                {"status": False, "error": "Email not found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        send_login_code(user)
        return Response({"status": True, "message": "New OTP sent to your email"})


class VerifyOTPAPIView(APIView):
    """
    Подтверждение PIN-кода.
    При успехе выдаёт пару JWT-токенов.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Verify login PIN",
        description="Checks the emailed PIN and returns a JWT access/refresh pair.",
        request=UserVerifyOTPSerializer,
        responses={
            200: OpenApiResponse(
                response=AuthTokensResponseSerializer,
                description="PIN accepted, tokens returned.",
            ),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Invalid or expired PIN.",
            ),
            404: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="User not found.",
            ),
        },
    )
    def post(self, request):
        serializer = UserVerifyOTPSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = User.objects.get(email=serializer.validated_data["email"])
        except User.DoesNotExist:
            return Response(
                {"status": False, "error": "User not found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        if not user.otp_code:
            return Response(
                {"status": False, "error": "No PIN generated"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if not user.otp_matches(serializer.validated_data["pin_code"]):
            return Response(
                {"status": False, "error": "Invalid or expired PIN"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user.clear_otp()
        logger.info("User %s logged in with OTP", user.pk)
        return build_auth_response(user)


class MeAPIView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer})
    def get(self, request):
        return Response(UserSerializer(request.user).data)
