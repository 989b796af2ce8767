"""Options and report output shared by attendance_recalculate and attendance_fix."""
from django.core.management.base import CommandError

from core.attendance_repair import AttendanceFilter, InvalidFilterError


def add_filter_arguments(parser):
    parser.add_argument('--date', type=str, help='Specific date (YYYY-MM-DD); wins over a range')
    parser.add_argument('--start-date', type=str, dest='start_date', help='Start date for range (YYYY-MM-DD)')
    parser.add_argument('--end-date', type=str, dest='end_date', help='End date for range (YYYY-MM-DD)')
    parser.add_argument('--employee-id', type=str, dest='employee_id', help='Specific employee ID')
    parser.add_argument('--dry-run', action='store_true', dest='dry_run', help='Show what would be changed without making changes')
    parser.add_argument('--batch-size', type=int, dest='batch_size', default=None, help='Number of records to process at once (default: 100)')
    parser.add_argument('--skip-posted', action='store_true', dest='skip_posted', help='Leave records already posted to payroll untouched')


def filters_from_options(options):
    try:
        return AttendanceFilter.from_options(
            employee_id=options.get('employee_id'),
            date=options.get('date'),
            start_date=options.get('start_date'),
            end_date=options.get('end_date'),
            exclude_posted=options.get('skip_posted', False),
        )
    except InvalidFilterError as e:
        raise CommandError(str(e))


def write_report(command, report, changed_label, verbosity=1):
    style = command.style
    out = command.stdout
    dry_run = report.dry_run

    if report.total_records == 0:
        out.write(style.WARNING('No records found to process'))
        return

    if dry_run or verbosity > 1:
        for preview in report.previews:
            verb = 'Would update' if dry_run else 'Updated'
            out.write(f"{verb} Attendance ID {preview['id']} (Employee: {preview['employee_id']}, {preview['attendance_date']}):")
            for name, (before, after) in preview['changes'].items():
                out.write(f'  {name}: {before} -> {after}')

    out.write(f'Total processed: {report.processed} records')
    out.write(style.SUCCESS(
        f"Records that {'would be' if dry_run else 'were'} {changed_label}: {report.changed}"
    ))
    if report.errors:
        out.write(style.WARNING(f'Errors: {report.errors} records'))
        for row in report.error_rows:
            command.stderr.write(style.ERROR(
                f"  Attendance ID {row['id']} (Employee: {row['employee_id']}, {row['attendance_date']}): {row['error']}"
            ))
        ids = ','.join(str(row['id']) for row in report.error_rows)
        out.write(f'Failed IDs: {ids}')
    if dry_run and report.changed:
        out.write('Run the command without --dry-run to apply these changes')
