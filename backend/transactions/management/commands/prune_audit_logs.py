"""
Management command to prune old ledger entries
Usage: python manage.py prune_audit_logs --before 2024-01-01 [--type create_item] [--dry-run]
"""
import datetime
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Count
from backend.transactions.models import Transaction


class Command(BaseCommand):
    help = 'Delete ledger entries created before a given date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--before',
            required=True,
            help='Delete entries created before this date (YYYY-MM-DD)',
        )
        parser.add_argument(
            '--type',
            action='append',
            dest='types',
            choices=[choice for choice, _ in Transaction.TYPE_CHOICES],
            help='Only prune entries of this type (repeatable)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )

    def handle(self, *args, **options):
        try:
            cutoff = datetime.date.fromisoformat(options['before'])
        except ValueError:
            raise CommandError(f"Invalid --before date '{options['before']}', expected YYYY-MM-DD")

        queryset = Transaction.objects.filter(created_at__date__lt=cutoff)
        if options['types']:
            queryset = queryset.filter(type__in=options['types'])

        count = queryset.count()
        self.stdout.write(f'Found {count} ledger entries created before {cutoff}')
        if options['dry_run']:
            for entry_type, entry_count in self._counts_by_type(queryset):
                self.stdout.write(f'  - {entry_type}: {entry_count}')
            self.stdout.write(self.style.WARNING('Dry run: nothing deleted'))
            return

        with transaction.atomic():
            deleted, _ = queryset.delete()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} ledger entries'))

    def _counts_by_type(self, queryset):
        rows = queryset.values('type').annotate(count=Count('id')).order_by('type')
        return [(row['type'], row['count']) for row in rows]
