# users/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.contrib.auth.models import Group

from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import User


class CustomUserAdmin(UserAdmin):
    model = User
    form = CustomUserChangeForm
    add_form = CustomUserCreationForm
    list_display = ['email', 'first_name', 'last_name', 'club_name', 'admin_role', 'is_staff']
    list_filter = ['admin_role', 'is_staff', 'delegate_type']
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'phone_number', 'gender')}),
        ('Conference profile', {
            'fields': (
                'club_name',
                'country',
                'district',
                'designation',
                'delegate_type',
                't_shirt_size',
                'dietary_needs',
                'accommodation',
                'next_of_kin',
                'next_of_kin_contact',
                'special_medical_conditions',
            )
        }),
        ('Permissions', {
            'fields': (
                'admin_role', 'is_active', 'is_staff', 'is_superuser',
                'user_permissions'
            )
        }),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email',
                'first_name',
                'last_name',
                'phone_number',
                'admin_role',
                'password1',
                'password2',
            ),
        }),
    )

    search_fields = ('email', 'first_name', 'last_name', 'phone_number')
    ordering = ('email',)


admin.site.register(User, CustomUserAdmin)
admin.site.unregister(Group)
