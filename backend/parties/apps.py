from django.apps import AppConfig


class PartiesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.parties'
    verbose_name = 'Suppliers'

    def ready(self):
        import backend.parties.signals  # noqa: F401
