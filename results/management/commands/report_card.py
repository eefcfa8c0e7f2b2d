"""
Management command to assemble a report card from a JSON file of marks.

The file holds the same payload the report card endpoint accepts:
    {
        "student_name": "Ama Mensah", "roll_number": "12", "class_name": "JHS 2",
        "term1": [{"subject_name": "Maths", "total_marks": 100,
                   "obtained_marks": 64, "passing_marks": 33, "is_absent": false}],
        "term2": [...],
        "term3": [...]
    }

Usage:
    python manage.py report_card marks.json
    python manage.py report_card marks.json --indent 0
"""
import json

from django.core.management.base import BaseCommand, CommandError

from results.calculator import generate_report_card_data
from results.config import GradingRules
from results.forms import ReportCardRequestForm
from results.utils import serialize_report_card


class Command(BaseCommand):
    help = 'Compute term and final results for one student and print the report card as JSON'

    def add_arguments(self, parser):
        parser.add_argument(
            'path',
            type=str,
            help='JSON file with student details and term1/term2/term3 marks',
        )
        parser.add_argument(
            '--indent',
            type=int,
            default=2,
            help='JSON indentation (0 for compact output)',
        )

    def handle(self, *args, **options):
        payload = self._read_payload(options['path'])

        form = ReportCardRequestForm.from_payload(payload)
        if not form.is_valid():
            raise CommandError(f'Invalid marks file: {form.errors.as_text()}')

        data = form.cleaned_data
        card = generate_report_card_data(
            data['student_name'], data['roll_number'], data['class_name'],
            data['term1'], data['term2'], data['term3'],
            rules=GradingRules.from_settings(),
        )

        indent = options['indent'] or None
        self.stdout.write(json.dumps(serialize_report_card(card), indent=indent))

        final = card['final_result']
        message = f"{data['student_name']}: {final['remarks']} ({final['percentage']}%, {final['grade']})"
        if final['promotion_status']:
            self.stderr.write(self.style.SUCCESS(message))
        else:
            self.stderr.write(self.style.WARNING(message))

    def _read_payload(self, path):
        try:
            with open(path, encoding='utf-8') as f:
                payload = json.load(f)
        except FileNotFoundError:
            raise CommandError(f'File not found: {path}')
        except json.JSONDecodeError as e:
            raise CommandError(f'Invalid JSON in {path}: {e}')

        if not isinstance(payload, dict):
            raise CommandError(f'Expected a JSON object in {path}')
        return payload
