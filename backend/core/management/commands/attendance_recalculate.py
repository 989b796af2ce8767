"""
Recalculate late minutes, undertime minutes and hours worked for attendance records with a time in.
Usage: python manage.py attendance_recalculate --start-date 2025-07-01 --end-date 2025-07-15 --dry-run
       python manage.py attendance_recalculate --date 2025-07-06 --employee-id 12
"""
from django.core.management.base import BaseCommand, CommandError

from core.attendance_repair import InvalidFilterError, recalculate_attendance_metrics
from core.audit_logging import log_batch_run

from ._attendance_batch import add_filter_arguments, filters_from_options, write_report


class Command(BaseCommand):
    help = 'Recalculate late minutes, undertime minutes, and hours worked for attendance records'

    def add_arguments(self, parser):
        add_filter_arguments(parser)

    def handle(self, *args, **options):
        filters = filters_from_options(options)
        dry_run = options.get('dry_run', False)

        self.stdout.write('Starting attendance metrics recalculation...')
        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made to the database'))
        for line in filters.describe():
            self.stdout.write(line)

        try:
            report = recalculate_attendance_metrics(
                filters, dry_run=dry_run, batch_size=options.get('batch_size'),
            )
        except InvalidFilterError as e:
            raise CommandError(str(e))
        self.stdout.write(f'Found {report.total_records} records to process')
        write_report(self, report, 'changed', verbosity=options.get('verbosity', 1))
        log_batch_run('recalculate', report, filters, actor='cli')
