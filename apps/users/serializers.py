# users/serializers.py

from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()
    is_admin = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "full_name",
            "phone_number",
            "gender",
            "club_name",
            "country",
            "district",
            "designation",
            "delegate_type",
            "t_shirt_size",
            "dietary_needs",
            "accommodation",
            "is_admin",
            "admin_role",
        )

    def get_full_name(self, obj: User) -> str:
        return obj.full_name

    def get_is_admin(self, obj: User) -> bool:
        return bool(obj.is_staff or obj.admin_role)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class UserRegistrationSerializer(EmailSerializer):
    """
    Регистрация по email: создаёт аккаунт и отправляет PIN-код.
    """
    fullName = serializers.CharField(max_length=255, source="full_name")


class UserVerifyOTPSerializer(EmailSerializer):
    """
    Сериализатор для подтверждения PIN-кода из письма.
    """
    pinCode = serializers.CharField(max_length=6, source="pin_code")


class AuthTokensResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()


class OTPStatusResponseSerializer(serializers.Serializer):
    status = serializers.BooleanField()
    exists = serializers.BooleanField(required=False)
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    status = serializers.BooleanField(default=False)
    error = serializers.CharField()
