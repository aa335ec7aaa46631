from django.apps import AppConfig


class DevotionalConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "devotional"
    verbose_name = "Devotional records"
