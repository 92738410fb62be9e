import re

from django.utils import timezone
from rest_framework import serializers

from .models import LiquidationMethod, LiquidationRequest, LiquidationStatus

MOBILE_NUMBER_RE = re.compile(r"^0\d{9}$")
MIN_REASON_LENGTH = 20
MIN_ACCOUNT_NUMBER_LENGTH = 10


class LiquidationRequestSerializer(serializers.ModelSerializer):
    """
    Заявка на вывод средств. Ключи в camelCase, как их шлёт фронтенд.
    """

    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paymentMethod = serializers.ChoiceField(source="payment_method", choices=LiquidationMethod.choices)
    accountName = serializers.CharField(source="account_name", max_length=255)
    bankName = serializers.CharField(source="bank_name", max_length=255, required=False, allow_blank=True)
    accountNumber = serializers.CharField(source="account_number", max_length=64, required=False, allow_blank=True)
    mobileNumber = serializers.CharField(source="mobile_number", max_length=20, required=False, allow_blank=True)
    network = serializers.CharField(max_length=32, required=False, allow_blank=True)
    reason = serializers.CharField()
    disbursementDate = serializers.DateField(source="disbursement_date")

    requesterName = serializers.CharField(source="requester_name", read_only=True)
    reviewedBy = serializers.SerializerMethodField()
    reviewedAt = serializers.DateTimeField(source="reviewed_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = LiquidationRequest
        fields = (
            "id",
            "amount",
            "paymentMethod",
            "accountName",
            "bankName",
            "accountNumber",
            "mobileNumber",
            "network",
            "reason",
            "disbursementDate",
            "status",
            "requesterName",
            "reviewedBy",
            "reviewedAt",
            "createdAt",
        )
        read_only_fields = ("id", "status")

    def get_reviewedBy(self, obj):
        if obj.reviewed_by is None:
            return None
        return obj.reviewed_by.full_name or obj.reviewed_by.email

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0")
        return value

    def validate_reason(self, value):
        value = value.strip()
        if len(value) < MIN_REASON_LENGTH:
            raise serializers.ValidationError(
                f"Reason must be at least {MIN_REASON_LENGTH} characters"
            )
        return value

    def validate_disbursementDate(self, value):
        if value <= timezone.localdate():
            raise serializers.ValidationError("Disbursement date must be in the future")
        return value

    def validate(self, attrs):
        method = attrs.get("payment_method")
        errors = {}

        if method == LiquidationMethod.BANK:
            if not attrs.get("bank_name"):
                errors["bankName"] = "Bank name is required"
            account_number = attrs.get("account_number", "")
            if len(account_number) < MIN_ACCOUNT_NUMBER_LENGTH:
                errors["accountNumber"] = (
                    f"Account number must be at least {MIN_ACCOUNT_NUMBER_LENGTH} characters"
                )

        elif method == LiquidationMethod.MOBILE_MONEY:
            if not MOBILE_NUMBER_RE.match(attrs.get("mobile_number", "")):
                errors["mobileNumber"] = "Mobile number must be 10 digits starting with 0"
            if not attrs.get("network"):
                errors["network"] = "Network is required"

        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class LiquidationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LiquidationStatus.choices)
