"""
Recompute the daily cash-box summaries of one or all projects
Usage: python manage.py recalculate_balances [--project ID]
"""
from django.core.management.base import BaseCommand, CommandError
from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import invalidate_project_stats
from backend.projects.models import Project
from backend.projects.services import recalculate_all_balances


class Command(BaseCommand):
    help = 'Recalculate carried-forward balances of daily expense summaries'

    def add_arguments(self, parser):
        parser.add_argument(
            '--project',
            type=int,
            help='Only recalculate this project (default: every project)',
        )

    def handle(self, *args, **options):
        projects = Project.objects.all().order_by('id')
        if options.get('project'):
            projects = projects.filter(pk=options['project'])
            if not projects.exists():
                raise CommandError(f"Project {options['project']} not found")

        total = 0
        with suspend_cache_signals():
            for project in projects:
                count = recalculate_all_balances(project.id)
                total += count
                self.stdout.write(f'  {project.name}: {count} summaries')
        invalidate_project_stats(*projects.values_list('id', flat=True))

        self.stdout.write(self.style.SUCCESS(f'\nCompleted: {total} summaries recalculated'))
