from django.apps import AppConfig


class LiquidationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.liquidation"
    label = "liquidation"
