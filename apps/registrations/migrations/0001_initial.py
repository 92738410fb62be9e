import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

import apps.registrations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_status", models.CharField(choices=[("registered", "Registered"), ("cancelled", "Cancelled")], default="registered", max_length=20)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("partially_paid", "Partially paid"), ("fully_paid", "Fully paid")], default="pending", max_length=20)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("balance", models.DecimalField(decimal_places=2, default=apps.registrations.models.default_registration_fee, help_text="Outstanding amount in UGX. Not clamped at zero.", max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Registration",
                "verbose_name_plural": "Registrations",
                "ordering": ["-created_at"],
            },
        ),
    ]
