from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.projects'
    verbose_name = 'Projects'

    def ready(self):
        from .signals import connect_summary_signals
        connect_summary_signals()
