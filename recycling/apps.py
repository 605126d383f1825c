from django.apps import AppConfig


class RecyclingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'recycling'

    def ready(self):
        # Import signal handlers
        from . import signals  # noqa: F401
