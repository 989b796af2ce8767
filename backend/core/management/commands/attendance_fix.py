"""
Fix attendance data: night-shift flag / next_day_timeout inconsistencies, then late, undertime
and hours worked. Repaired rows are marked source=fixed_import.
Usage: python manage.py attendance_fix --employee-id 12 --dry-run
       python manage.py attendance_fix --date 2025-07-06
"""
from django.core.management.base import BaseCommand, CommandError

from core.attendance_repair import InvalidFilterError, fix_attendance_records
from core.audit_logging import log_batch_run

from ._attendance_batch import add_filter_arguments, filters_from_options, write_report


class Command(BaseCommand):
    help = 'Fix night-shift time out fields and recalculate metrics for attendance records'

    def add_arguments(self, parser):
        add_filter_arguments(parser)

    def handle(self, *args, **options):
        filters = filters_from_options(options)
        dry_run = options.get('dry_run', False)

        self.stdout.write('Starting attendance data fix...')
        if dry_run:
            self.stdout.write(self.style.WARNING('Running in dry-run mode - no changes will be made'))
        for line in filters.describe():
            self.stdout.write(line)

        try:
            report = fix_attendance_records(
                filters, dry_run=dry_run, batch_size=options.get('batch_size'),
            )
        except InvalidFilterError as e:
            raise CommandError(str(e))
        self.stdout.write(f'Found {report.total_records} attendance records to process')
        write_report(self, report, 'fixed', verbosity=options.get('verbosity', 1))
        log_batch_run('fix', report, filters, actor='cli')
