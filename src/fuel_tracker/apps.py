from django.apps import AppConfig


class FuelTrackerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "fuel_tracker"
    verbose_name = "Fuel tracker"
