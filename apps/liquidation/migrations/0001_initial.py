import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LiquidationRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("payment_method", models.CharField(choices=[("bank", "Bank transfer"), ("mobile_money", "Mobile money")], max_length=20)),
                ("account_name", models.CharField(max_length=255)),
                ("bank_name", models.CharField(blank=True, max_length=255)),
                ("account_number", models.CharField(blank=True, max_length=64)),
                ("mobile_number", models.CharField(blank=True, max_length=20)),
                ("network", models.CharField(blank=True, max_length=32)),
                ("reason", models.TextField()),
                ("disbursement_date", models.DateField()),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("processed", "Processed")], db_index=True, default="pending", max_length=20)),
                ("requester_name", models.CharField(blank=True, max_length=255)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("requester", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="liquidation_requests", to=settings.AUTH_USER_MODEL)),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reviewed_liquidations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Liquidation request",
                "verbose_name_plural": "Liquidation requests",
                "ordering": ["-created_at"],
            },
        ),
    ]
