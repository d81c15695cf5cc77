"""
Management command to re-derive stored averages after the weights change.
Usage: python manage.py recalculate_averages [--term <id>] [--academic-year <id>]
"""
from django.core.management.base import BaseCommand

from gradebook.models import AssessmentRecord
from gradebook.services import recalculate_records


class Command(BaseCommand):
    help = 'Recalculate systematic and term averages for stored assessment records'

    def add_arguments(self, parser):
        parser.add_argument(
            '--term',
            type=int,
            help='Only recalculate records of this term',
        )
        parser.add_argument(
            '--academic-year',
            type=int,
            help='Only recalculate records of this academic year',
        )

    def handle(self, *args, **options):
        records = AssessmentRecord.objects.all()
        if options['term']:
            records = records.filter(term_id=options['term'])
        if options['academic_year']:
            records = records.filter(term__academic_year_id=options['academic_year'])

        changed = recalculate_records(records)
        self.stdout.write(self.style.SUCCESS(f'Recalculated averages: {changed} record(s) changed'))
