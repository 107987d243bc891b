"""
Management command to set up the default customer group.

Usage:
    python manage.py ensure_default_customer_group
    python manage.py ensure_default_customer_group --name "Walk-in"

Creates the default group when none exists. Exits with an error when more
than one group is flagged as default.
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.customers.models import CustomerGroup
from apps.customers.services import ErrorTracker, create_customer_group


class Command(BaseCommand):
    help = 'Create the default customer group if it does not exist'

    def add_arguments(self, parser):
        parser.add_argument(
            '--name',
            default='General',
            help='Name of the default customer group (default: General)',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        defaults = list(CustomerGroup.objects.default())

        if len(defaults) > 1:
            names = ', '.join(group.name for group in defaults)
            raise CommandError(f"More than one default customer group: {names}")

        if defaults:
            self.stdout.write(f"Default customer group already exists: {defaults[0].name}")
            return

        result = create_customer_group(
            CustomerGroup(name=options['name'], is_default=True),
            error_tracker=ErrorTracker('ensure_default_customer_group'),
        )
        if not result.success:
            raise CommandError('; '.join(result.errors))

        self.stdout.write(self.style.SUCCESS(f"Created default customer group: {result.result.name}"))
