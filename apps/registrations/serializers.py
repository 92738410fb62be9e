from rest_framework import serializers

from apps.users.utils import normalize_phone
from .models import Registration


class RegistrationSerializer(serializers.ModelSerializer):
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Registration
        fields = [
            "id",
            "registration_status",
            "payment_status",
            "amount_paid",
            "balance",
            "total_amount",
            "created_at",
            "updated_at",
        ]


class MemberRegistrationSerializer(serializers.Serializer):
    """
    Анкета участника. Ключи совпадают с полями формы на фронтенде,
    source указывает на поля модели User.
    """

    fullName = serializers.CharField(min_length=2, max_length=255, source="full_name")
    phoneNumber = serializers.RegexField(
        r"^\+?\d{10,15}$",
        source="phone_number",
        error_messages={"invalid": "Enter valid phone number with country code"},
    )
    gender = serializers.ChoiceField(choices=["Male", "Female", "Other"])
    clubName = serializers.CharField(max_length=255, source="club_name", required=False, allow_blank=True)
    country = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    designation = serializers.CharField(max_length=100)
    delegateType = serializers.ChoiceField(
        choices=["Rotarian", "Rotaractor", "Guest"],
        source="delegate_type",
        required=False,
        allow_blank=True,
    )
    shirtSize = serializers.ChoiceField(
        choices=["XS", "S", "M", "L", "XL", "XXL"],
        source="t_shirt_size",
    )
    dietaryRestrictions = serializers.CharField(
        max_length=100, source="dietary_needs", required=False, allow_blank=True
    )
    accommodation = serializers.CharField(max_length=100, required=False, allow_blank=True)
    nextOfKin = serializers.CharField(max_length=255, source="next_of_kin", required=False, allow_blank=True)
    nextOfKinContact = serializers.CharField(
        max_length=20, source="next_of_kin_contact", required=False, allow_blank=True
    )
    specialMedicalConditions = serializers.CharField(
        source="special_medical_conditions", required=False, allow_blank=True
    )

    def validate_phoneNumber(self, value: str) -> str:
        return normalize_phone(value)

    def update(self, instance, validated_data):
        full_name = validated_data.pop("full_name", None)
        if full_name is not None:
            instance.set_full_name(full_name)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance
