# apps/users/forms.py

from django.contrib.auth.forms import UserCreationForm, UserChangeForm
from .models import User


class CustomUserCreationForm(UserCreationForm):

    class Meta(UserCreationForm.Meta):
        model = User
        fields = (
            'email',
            'first_name',
            'last_name',
            'phone_number',
            'admin_role',
        )

    def save(self, commit=True):
        # username дублирует email, чтобы уникальный индекс не конфликтовал
        user = super().save(commit=False)
        user.email = user.email.lower()
        if not user.username:
            user.username = user.email
        if commit:
            user.save()
        return user


class CustomUserChangeForm(UserChangeForm):

    class Meta:
        model = User
        fields = (
            'email',
            'first_name',
            'last_name',
            'phone_number',
            'admin_role',
        )
