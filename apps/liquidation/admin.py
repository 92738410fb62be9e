from django.contrib import admin

from .models import LiquidationRequest


@admin.register(LiquidationRequest)
class LiquidationRequestAdmin(admin.ModelAdmin):
    list_display = ("requester_name", "amount", "payment_method", "status", "disbursement_date", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("requester_name", "account_name", "reason")
    readonly_fields = ("reviewed_by", "reviewed_at", "created_at", "updated_at")
