import django.utils.timezone
from django.db import migrations, models

import apps.users.managers


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("username", models.CharField(blank=True, max_length=150, null=True, unique=True)),
                ("email", models.EmailField(help_text="Email used to log in and receive OTP codes.", max_length=254, unique=True, verbose_name="Email")),
                ("phone_number", models.CharField(blank=True, max_length=20)),
                ("gender", models.CharField(blank=True, max_length=20)),
                ("club_name", models.CharField(blank=True, max_length=255)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("district", models.CharField(blank=True, max_length=100)),
                ("designation", models.CharField(blank=True, help_text="Position held in the club, e.g. Club President.", max_length=100)),
                ("delegate_type", models.CharField(blank=True, max_length=50)),
                ("t_shirt_size", models.CharField(blank=True, max_length=10)),
                ("dietary_needs", models.CharField(blank=True, max_length=100)),
                ("accommodation", models.CharField(blank=True, max_length=100)),
                ("next_of_kin", models.CharField(blank=True, max_length=255)),
                ("next_of_kin_contact", models.CharField(blank=True, max_length=20)),
                ("special_medical_conditions", models.TextField(blank=True)),
                ("otp_code", models.CharField(blank=True, help_text="One-time PIN for passwordless login.", max_length=6, null=True)),
                ("otp_expires_at", models.DateTimeField(blank=True, help_text="Moment the current OTP stops being valid.", null=True)),
                ("admin_role", models.CharField(blank=True, choices=[("", "None"), ("requester", "Requester"), ("approver", "Approver")], default="", help_text="Role in the fund liquidation workflow.", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "User",
                "verbose_name_plural": "Users",
            },
            managers=[
                ("objects", apps.users.managers.UserManager()),
            ],
        ),
    ]
