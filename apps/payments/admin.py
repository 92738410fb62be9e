from django.contrib import admin

from .models import DailyTransactionCounter, Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "registration", "amount", "payment_method", "provider", "created_at")
    list_filter = ("payment_method", "provider")
    search_fields = ("transaction_id", "registration__user__email")
    readonly_fields = ("created_at",)


@admin.register(DailyTransactionCounter)
class DailyTransactionCounterAdmin(admin.ModelAdmin):
    list_display = ("date", "counter")
