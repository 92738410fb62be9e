from django.contrib import admin

from .models import Registration


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ("user", "registration_status", "payment_status", "amount_paid", "balance", "created_at")
    list_filter = ("registration_status", "payment_status")
    search_fields = ("user__email", "user__first_name", "user__last_name", "user__club_name")
