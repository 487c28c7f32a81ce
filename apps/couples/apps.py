from django.apps import AppConfig


class CouplesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.couples'
    verbose_name = 'Couples'

    def ready(self):
        # Import signals to register them
        import apps.couples.signals  # noqa: F401
