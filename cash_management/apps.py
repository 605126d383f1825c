from django.apps import AppConfig


class CashManagementConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cash_management'

    def ready(self):
        # Import signal handlers
        from . import signals  # noqa: F401
