from decimal import Decimal

from rest_framework import serializers

from .models import Payment, PaymentMethod

REQUIRED_PAYMENT_FIELDS = "Amount and phone number are required"


class ProcessPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("1"),
        error_messages={"required": REQUIRED_PAYMENT_FIELDS, "null": REQUIRED_PAYMENT_FIELDS},
    )
    phoneNumber = serializers.CharField(
        max_length=20,
        source="phone_number",
        error_messages={"required": REQUIRED_PAYMENT_FIELDS, "blank": REQUIRED_PAYMENT_FIELDS},
    )


class SavePaymentSerializer(serializers.Serializer):
    registrationId = serializers.IntegerField(source="registration_id")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("1"))
    transactionId = serializers.CharField(max_length=100, source="transaction_id")
    paymentMethod = serializers.ChoiceField(
        choices=PaymentMethod.choices,
        source="payment_method",
        default=PaymentMethod.MOBILE_MONEY,
    )
    provider = serializers.CharField(max_length=50, required=False, allow_blank=True)
    userId = serializers.IntegerField(source="user_id", required=False)


class PaymentEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()
    fullName = serializers.CharField(max_length=255, source="full_name")
    transactionId = serializers.CharField(max_length=100, source="transaction_id")
    amountPaid = serializers.DecimalField(max_digits=12, decimal_places=2, source="amount_paid", default=Decimal("0"))
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    totalAmount = serializers.DecimalField(max_digits=12, decimal_places=2, source="total_amount", default=Decimal("0"))
    paymentMethod = serializers.CharField(max_length=50, source="payment_method", required=False, allow_blank=True)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "registration",
            "user",
            "amount",
            "payment_method",
            "transaction_id",
            "provider",
            "created_at",
        ]


class PaymentErrorSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=False)
    error = serializers.CharField()
    message = serializers.CharField()
    details = serializers.JSONField(required=False)
