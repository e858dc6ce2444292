from django.apps import AppConfig


class AftordleConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "aftordle"
    verbose_name = "Before & Aftordle"
