from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission


# App labels whose models each group may change
FIELD_APPS = ['workers', 'purchasing', 'equipment', 'notifications']
FINANCE_APPS = ['projects', 'workers', 'parties', 'purchasing', 'reports', 'notifications']


class Command(BaseCommand):
    help = 'Create Django user groups for RBAC: Admin, ProjectManager, Accountant, SiteEngineer'

    def handle(self, *args, **options):
        groups_config = [
            {
                'name': 'Admin',
                'description': 'Owners and developers - full system access including backend',
            },
            {
                'name': 'ProjectManager',
                'description': 'Manages projects, transfers and equipment, sees every report',
            },
            {
                'name': 'Accountant',
                'description': 'Records transfers, purchases and supplier payments, sees every report',
            },
            {
                'name': 'SiteEngineer',
                'description': 'Records attendance, transport and site expenses, no reports',
            },
        ]

        created_count = 0
        existing_count = 0

        for group_config in groups_config:
            group, created = Group.objects.get_or_create(name=group_config['name'])

            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created group: {group_config["name"]}'))
                created_count += 1
            else:
                self.stdout.write(f'  Group already exists: {group_config["name"]}')
                existing_count += 1

            if group.name == 'Admin':
                permissions = Permission.objects.all()
            elif group.name == 'ProjectManager':
                permissions = Permission.objects.exclude(
                    content_type__app_label__in=['admin', 'auth', 'sessions', 'contenttypes']
                )
            elif group.name == 'Accountant':
                permissions = Permission.objects.filter(content_type__app_label__in=FINANCE_APPS)
            else:
                permissions = Permission.objects.filter(
                    content_type__app_label__in=FIELD_APPS
                ).exclude(codename__startswith='delete_')

            group.permissions.set(permissions)
            self.stdout.write(f'  {permissions.count()} permissions set for {group.name}')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} groups created, {existing_count} groups already existed'
        ))
