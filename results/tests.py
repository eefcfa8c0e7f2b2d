import io
import json
import os
import tempfile

from django.core.management import call_command
from django.core.management.base import CommandError
from django.template import Context, Template
from django.test import SimpleTestCase, RequestFactory, override_settings

from . import config
from .calculator import (
    SubjectMark, round_percentage, get_grade_from_percentage,
    calculate_subject_result, calculate_term_result, calculate_final_result,
    calculate_second_term_average, calculate_third_term_average,
    calculate_term_total, get_class_subjects, should_promote_student,
    get_grade_color, get_status_color, generate_report_card_data,
)
from .choices import ResultStatus
from .config import GradingRules
from .forms import SubjectMarkForm, ReportCardRequestForm
from .utils import (
    subject_mark_from_row, group_marks_by_term,
    term_result_summary, final_result_summary, serialize_report_card,
)
from . import views


def mark(subject, obtained, total=100, passing=33, absent=False):
    return SubjectMark(subject, total, obtained, passing, absent)


class GradeBandTests(SimpleTestCase):
    """Tests for percentage to grade mapping."""

    def test_band_boundaries(self):
        """Each band starts exactly at its minimum percentage."""
        cases = [
            (100, 'A+'), (90, 'A+'), (89.99, 'A'), (80, 'A'), (79.99, 'B'),
            (70, 'B'), (69.99, 'C'), (60, 'C'), (59.99, 'D'), (50, 'D'),
            (49.99, 'E'), (33, 'E'), (32.99, 'F'), (0, 'F'),
        ]
        for percentage, grade in cases:
            with self.subTest(percentage=percentage):
                self.assertEqual(get_grade_from_percentage(percentage), grade)

    def test_every_percentage_gets_one_grade(self):
        grades = {get_grade_from_percentage(p / 10) for p in range(0, 1001)}
        self.assertEqual(grades, {'A+', 'A', 'B', 'C', 'D', 'E', 'F'})

    def test_custom_bands(self):
        """Bands are evaluated highest first whatever order they are given in."""
        rules = GradingRules(grade_bands=[(40, 'PASS'), (75, 'DISTINCTION')], fail_grade='FAIL')
        self.assertEqual(get_grade_from_percentage(80, rules), 'DISTINCTION')
        self.assertEqual(get_grade_from_percentage(50, rules), 'PASS')
        self.assertEqual(get_grade_from_percentage(39, rules), 'FAIL')


class RoundPercentageTests(SimpleTestCase):
    """Tests for two-place rounding."""

    def test_rounds_half_up(self):
        self.assertEqual(round_percentage(2.675), 2.68)
        self.assertEqual(round_percentage(0.125), 0.13)

    def test_rounds_down_below_half(self):
        self.assertEqual(round_percentage(100 / 3), 33.33)

    def test_zero(self):
        self.assertEqual(round_percentage(0), 0)


class SubjectResultTests(SimpleTestCase):
    """Tests for calculate_subject_result."""

    def test_scored_subject(self):
        result = calculate_subject_result(72, 100, 33)
        self.assertEqual(result, {'percentage': 72.0, 'grade': 'B', 'is_passed': True})

    def test_percentage_is_rounded(self):
        result = calculate_subject_result(2, 3, 1)
        self.assertEqual(result['percentage'], 66.67)
        self.assertEqual(result['grade'], 'C')

    def test_passing_marks_inclusive(self):
        self.assertTrue(calculate_subject_result(33, 100, 33)['is_passed'])
        self.assertFalse(calculate_subject_result(32, 100, 33)['is_passed'])

    def test_grade_boundaries_from_marks(self):
        self.assertEqual(calculate_subject_result(90, 100, 33)['grade'], 'A+')
        self.assertEqual(calculate_subject_result(89.99, 100, 33)['grade'], 'A')
        self.assertEqual(calculate_subject_result(33, 100, 33)['grade'], 'E')
        self.assertEqual(calculate_subject_result(32.99, 100, 33)['grade'], 'F')

    def test_absent_short_circuits(self):
        """Absent subjects ignore whatever marks were stored."""
        for obtained in (0, 50, 100):
            with self.subTest(obtained=obtained):
                result = calculate_subject_result(obtained, 100, 33, True)
                self.assertEqual(result, {'percentage': 0, 'grade': 'ABS', 'is_passed': False})

    def test_zero_total_does_not_raise(self):
        """A zero total scores 0% instead of dividing by zero."""
        result = calculate_subject_result(0, 0, 0)
        self.assertEqual(result, {'percentage': 0, 'grade': 'F', 'is_passed': True})

    def test_obtained_above_total_not_rejected(self):
        result = calculate_subject_result(120, 100, 33)
        self.assertEqual(result['percentage'], 120.0)
        self.assertEqual(result['grade'], 'A+')


class TermResultTests(SimpleTestCase):
    """Tests for calculate_term_result."""

    def test_passing_term(self):
        marks = [mark('Maths', 80), mark('English', 70), mark('Science', 60)]
        result = calculate_term_result(marks)

        self.assertEqual(result['term_name'], '')
        self.assertIs(result['marks'], marks)
        self.assertEqual(result['total_marks'], 300)
        self.assertEqual(result['obtained_marks'], 210)
        self.assertEqual(result['percentage'], 70.0)
        self.assertEqual(result['subjects_failed'], 0)
        self.assertEqual(result['status'], ResultStatus.PASS)

    def test_empty_term_fails(self):
        """Known quirk: a term with no marks has 0% and so fails."""
        result = calculate_term_result([])

        self.assertEqual(result['total_marks'], 0)
        self.assertEqual(result['obtained_marks'], 0)
        self.assertEqual(result['percentage'], 0)
        self.assertEqual(result['subjects_failed'], 0)
        self.assertEqual(result['status'], 'fail')

    def test_absent_marks_not_added(self):
        marks = [mark('Maths', 80), mark('English', 75, absent=True)]
        result = calculate_term_result(marks)

        self.assertEqual(result['total_marks'], 200)
        self.assertEqual(result['obtained_marks'], 80)
        self.assertEqual(result['subjects_failed'], 1)

    def test_two_absent_fails_despite_percentage(self):
        marks = [
            mark('Maths', 95), mark('English', 95), mark('Science', 95),
            mark('History', 0, absent=True), mark('Art', 0, absent=True),
        ]
        result = calculate_term_result(marks)

        self.assertGreaterEqual(result['percentage'], 33)
        self.assertEqual(result['subjects_failed'], 2)
        self.assertEqual(result['status'], ResultStatus.FAIL)

    def test_four_absent_fails(self):
        marks = [mark(f'Subject {i}', 0, absent=True) for i in range(4)] + [mark('Maths', 90)]
        self.assertEqual(calculate_term_result(marks)['status'], ResultStatus.FAIL)

    def test_absent_and_score_failure_fails(self):
        """One absence plus one low score fails at 70% overall."""
        marks = [
            mark('Maths', 100), mark('English', 100), mark('Science', 100),
            mark('History', 0, absent=True), mark('Art', 50, passing=60),
        ]
        result = calculate_term_result(marks)

        # The absence counts as a failure too, so two subjects are failed
        self.assertEqual(result['subjects_failed'], 2)
        self.assertEqual(result['percentage'], 70.0)
        self.assertEqual(result['status'], ResultStatus.FAIL)

    def test_single_absence_fails(self):
        """A single absence is one fail and one absent at the same time."""
        marks = [mark('Maths', 90), mark('English', 90), mark('Science', 90),
                 mark('History', 90), mark('Art', 0, absent=True)]
        result = calculate_term_result(marks)

        self.assertEqual(result['percentage'], 72.0)
        self.assertEqual(result['subjects_failed'], 1)
        self.assertEqual(result['status'], ResultStatus.FAIL)

    def test_single_score_failure_passes(self):
        marks = [mark('Maths', 20), mark('English', 80), mark('Science', 80)]
        result = calculate_term_result(marks)

        self.assertEqual(result['subjects_failed'], 1)
        self.assertEqual(result['status'], ResultStatus.PASS)

    def test_low_percentage_fails(self):
        marks = [mark('Maths', 20, passing=10), mark('English', 20, passing=10)]
        result = calculate_term_result(marks)

        self.assertEqual(result['subjects_failed'], 0)
        self.assertEqual(result['percentage'], 20.0)
        self.assertEqual(result['status'], ResultStatus.FAIL)


class FinalResultTests(SimpleTestCase):
    """Tests for calculate_final_result."""

    def final(self, *term_marks):
        return calculate_final_result(*[
            calculate_term_result(marks) if marks is not None else None
            for marks in term_marks
        ])

    def test_no_terms(self):
        result = calculate_final_result(None, None, None)
        self.assertEqual(result, {
            'total_marks': 0,
            'obtained_marks': 0,
            'final_percentage': 0,
            'final_grade': 'N/A',
            'status': 'fail',
            'remarks': 'No term results available',
        })

    def test_promoted(self):
        result = self.final(
            [mark('Maths', 80), mark('English', 70), mark('Science', 60)],
            [mark('Maths', 90), mark('English', 60), mark('Science', 75)],
            [mark('Maths', 85), mark('English', 65), mark('Science', 70)],
        )
        self.assertEqual(result['total_marks'], 900)
        self.assertEqual(result['obtained_marks'], 655)
        self.assertEqual(result['final_percentage'], 72.78)
        self.assertEqual(result['final_grade'], 'B')
        self.assertEqual(result['status'], ResultStatus.PROMOTED)
        self.assertEqual(result['remarks'], 'Promoted to next class')

    def test_missing_terms_are_skipped(self):
        result = self.final([mark('Maths', 60)], None, [mark('Maths', 40)])
        self.assertEqual(result['total_marks'], 200)
        self.assertEqual(result['final_percentage'], 50.0)
        self.assertEqual(result['status'], ResultStatus.PROMOTED)

    def test_absences_add_up_across_terms(self):
        """Two absences in each of two terms reach the four-absence rule."""
        term1 = [mark('Maths', 0, absent=True), mark('English', 0, absent=True),
                 mark('Science', 80), mark('History', 80), mark('Art', 80)]
        term2 = [mark('Maths', 70), mark('English', 70), mark('Science', 0, absent=True),
                 mark('History', 0, absent=True), mark('Art', 70)]
        term3 = [mark('Maths', 60), mark('English', 60), mark('Science', 60),
                 mark('History', 60), mark('Art', 60)]
        result = self.final(term1, term2, term3)

        self.assertEqual(result['status'], ResultStatus.ABSENT)
        self.assertEqual(result['remarks'], 'Absent (4 or more subjects absent)')

    def test_two_absences_fail(self):
        result = self.final(
            [mark('Maths', 0, absent=True), mark('English', 80)],
            [mark('Maths', 80), mark('English', 0, absent=True)],
            None,
        )
        self.assertEqual(result['status'], ResultStatus.FAIL)
        self.assertEqual(result['remarks'], 'Failed (2-3 subjects absent)')

    def test_failures_add_up_across_terms(self):
        term1 = [mark('Maths', 20), mark('English', 80), mark('Science', 80)]
        term2 = [mark('Maths', 80), mark('English', 20), mark('Science', 80)]
        self.assertEqual(calculate_term_result(term1)['status'], ResultStatus.PASS)
        self.assertEqual(calculate_term_result(term2)['status'], ResultStatus.PASS)

        result = self.final(term1, term2, None)
        self.assertEqual(result['status'], ResultStatus.FAIL)
        self.assertEqual(result['remarks'], 'Failed (2 or more subjects failed)')

    def test_one_fail_one_absent(self):
        result = self.final(
            [mark('Maths', 0, absent=True), mark('English', 80),
             mark('Science', 80), mark('History', 80), mark('Art', 80)],
            None, None,
        )
        self.assertEqual(result['status'], ResultStatus.FAIL)
        self.assertEqual(result['remarks'], 'Failed (1 fail and 1 absent)')

    def test_low_percentage(self):
        result = self.final([mark('Maths', 20, passing=10), mark('English', 20, passing=10)], None, None)
        self.assertEqual(result['final_grade'], 'F')
        self.assertEqual(result['status'], ResultStatus.FAIL)
        self.assertEqual(result['remarks'], 'Failed (Overall percentage below 33%)')


class PromotionTests(SimpleTestCase):
    """Tests for should_promote_student."""

    def test_promoted_above_pass_line(self):
        self.assertTrue(should_promote_student({'status': 'promoted', 'final_percentage': 50}))

    def test_percentage_gate_enforced(self):
        self.assertFalse(should_promote_student({'status': 'promoted', 'final_percentage': 32.5}))

    def test_other_statuses_not_promoted(self):
        for status in ('pass', 'fail', 'absent'):
            with self.subTest(status=status):
                self.assertFalse(should_promote_student({'status': status, 'final_percentage': 90}))


class HelperTests(SimpleTestCase):
    """Tests for the aggregation and lookup helpers."""

    def test_term_averages(self):
        self.assertEqual(calculate_second_term_average(210, 225), 217.5)
        self.assertEqual(calculate_third_term_average(210, 225, 225), 220)

    def test_term_total_skips_absent(self):
        marks = [mark('Maths', 80), mark('English', 55, absent=True), mark('Science', 60)]
        self.assertEqual(calculate_term_total(marks), 140)
        self.assertEqual(calculate_term_total([]), 0)

    def test_class_subjects_distinct(self):
        marks = [mark('Maths', 80), mark('English', 70), mark('Maths', 60)]
        self.assertEqual(get_class_subjects(marks), ['Maths', 'English'])

    def test_grade_colors(self):
        self.assertEqual(get_grade_color('A+'), 'text-green-700 bg-green-100')
        self.assertEqual(get_grade_color('B'), 'text-blue-700 bg-blue-100')
        self.assertEqual(get_grade_color('F'), 'text-red-700 bg-red-100')
        self.assertEqual(get_grade_color('unknown'), 'text-gray-700 bg-gray-100')

    def test_status_colors(self):
        self.assertEqual(get_status_color('Promoted'), 'text-green-700 bg-green-100')
        self.assertEqual(get_status_color(ResultStatus.FAIL), 'text-red-700 bg-red-100')
        self.assertEqual(get_status_color('absent'), 'text-gray-700 bg-gray-100')


class ReportCardTests(SimpleTestCase):
    """Tests for generate_report_card_data."""

    def setUp(self):
        self.term1 = [mark('Maths', 80), mark('English', 70), mark('Science', 60)]
        self.term2 = [mark('Maths', 90), mark('English', 60), mark('Science', 75)]
        self.term3 = [mark('Maths', 85), mark('English', 65), mark('Science', 70, absent=True)]
        self.card = generate_report_card_data(
            'Ama Mensah', '12', 'JHS 2', self.term1, self.term2, self.term3
        )

    def test_student_info(self):
        self.assertEqual(self.card['student_info'], {
            'name': 'Ama Mensah', 'roll_number': '12', 'class_name': 'JHS 2',
        })

    def test_final_result_matches_calculator(self):
        expected = calculate_final_result(
            calculate_term_result(self.term1),
            calculate_term_result(self.term2),
            calculate_term_result(self.term3),
        )
        final = self.card['final_result']

        self.assertEqual(final['total_marks'], expected['total_marks'])
        self.assertEqual(final['obtained_marks'], expected['obtained_marks'])
        self.assertEqual(final['percentage'], expected['final_percentage'])
        self.assertEqual(final['grade'], expected['final_grade'])
        self.assertEqual(final['status'], expected['status'])
        self.assertEqual(final['remarks'], expected['remarks'])
        self.assertEqual(final['promotion_status'], should_promote_student(expected))

    def test_running_averages(self):
        terms = self.card['term_results']

        self.assertEqual(terms['term1']['total'], 210)
        self.assertEqual(terms['term2']['total'], 225)
        self.assertEqual(terms['term3']['total'], 150)
        self.assertEqual(terms['term1']['average'], 210)
        self.assertEqual(terms['term2']['average'], 217.5)
        self.assertAlmostEqual(terms['term3']['average'], 195.0)

    def test_term_statuses(self):
        terms = self.card['term_results']
        self.assertEqual(terms['term1']['status'], ResultStatus.PASS)
        self.assertEqual(terms['term3']['status'], ResultStatus.FAIL)
        self.assertEqual(terms['term3']['percentage'], 50.0)

    def test_single_absence_blocks_promotion(self):
        final = self.card['final_result']
        self.assertEqual(final['status'], ResultStatus.FAIL)
        self.assertEqual(final['remarks'], 'Failed (1 fail and 1 absent)')
        self.assertFalse(final['promotion_status'])

    def test_subject_marks_passed_through(self):
        self.assertIs(self.card['subject_marks']['term1'], self.term1)
        self.assertIs(self.card['subject_marks']['term3'], self.term3)


class GradingRulesTests(SimpleTestCase):
    """Tests for RESULTS_* configuration."""

    def test_defaults(self):
        self.assertEqual(config.PASS_PERCENTAGE, 33)
        rules = GradingRules.from_settings()
        self.assertEqual(rules.absent_limit, 4)
        self.assertEqual(rules.failed_subjects_limit, 2)

    def test_unknown_setting(self):
        with self.assertRaises(AttributeError):
            config.NOT_A_SETTING

    @override_settings(RESULTS_PASS_PERCENTAGE=40)
    def test_settings_override(self):
        marks = [mark('Maths', 35, passing=10), mark('English', 35, passing=10)]

        self.assertEqual(calculate_term_result(marks)['status'], ResultStatus.FAIL)
        result = calculate_final_result(calculate_term_result(marks))
        self.assertEqual(result['remarks'], 'Failed (Overall percentage below 40%)')
        self.assertFalse(should_promote_student({'status': 'promoted', 'final_percentage': 35}))

    def test_explicit_rules(self):
        rules = GradingRules(failed_subjects_limit=3)
        term1 = [mark('Maths', 20), mark('English', 80), mark('Science', 80)]
        term2 = [mark('Maths', 80), mark('English', 20), mark('Science', 80)]

        result = calculate_final_result(
            calculate_term_result(term1, rules), calculate_term_result(term2, rules), rules=rules
        )
        self.assertEqual(result['status'], ResultStatus.PROMOTED)


class SubjectMarkFormTests(SimpleTestCase):
    """Tests for SubjectMarkForm and the list field."""

    def test_valid_form(self):
        form = SubjectMarkForm.from_payload({
            'subjectName': 'Maths', 'totalMarks': 100, 'obtainedMarks': 64, 'passingMarks': 33,
        })
        self.assertTrue(form.is_valid())
        self.assertEqual(form.to_subject_mark(), SubjectMark('Maths', 100.0, 64.0, 33.0, False))

    def test_absent_zeroes_obtained(self):
        form = SubjectMarkForm(data={
            'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 64, 'is_absent': True,
        })
        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['obtained_marks'], 0)
        self.assertEqual(form.cleaned_data['passing_marks'], 0)

    def test_zero_total_invalid(self):
        form = SubjectMarkForm(data={'subject_name': 'Maths', 'total_marks': 0})
        self.assertFalse(form.is_valid())
        self.assertIn('Total marks must be greater than zero', str(form.errors))

    def test_non_numeric_invalid(self):
        form = SubjectMarkForm(data={'subject_name': 'Maths', 'total_marks': 'lots'})
        self.assertFalse(form.is_valid())

    def test_report_card_form_reports_bad_subject(self):
        form = ReportCardRequestForm.from_payload({
            'studentName': 'Kofi', 'rollNumber': 7, 'className': 'JHS 1',
            'term1Marks': [
                {'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 50},
                {'subject_name': 'English', 'total_marks': -1},
            ],
        })
        self.assertFalse(form.is_valid())
        self.assertIn('Subject 2', str(form.errors['term1']))

    def test_report_card_form_rejects_non_list(self):
        form = ReportCardRequestForm.from_payload({
            'student_name': 'Kofi', 'roll_number': '7', 'class_name': 'JHS 1', 'term1': 'Maths',
        })
        self.assertFalse(form.is_valid())
        self.assertIn('Enter a list of subject marks.', form.errors['term1'])

    def test_missing_terms_default_to_empty(self):
        form = ReportCardRequestForm.from_payload({
            'student_name': 'Kofi', 'roll_number': 7, 'class_name': 'JHS 1',
        })
        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['roll_number'], '7')
        self.assertEqual(form.cleaned_data['term2'], [])


class RowMappingTests(SimpleTestCase):
    """Tests for mapping stored rows onto the calculator's records."""

    def test_joined_subject_name(self):
        row = {
            'subject': {'subject_name': 'Maths'}, 'total_marks': 100,
            'obtained_marks': 55, 'passing_marks': 33, 'is_absent': False,
        }
        self.assertEqual(subject_mark_from_row(row), mark('Maths', 55))

    def test_missing_values_default(self):
        row = {'subject_name': 'Art', 'total_marks': 50, 'obtained_marks': None, 'is_absent': None}
        parsed = subject_mark_from_row(row)
        self.assertEqual(parsed.obtained_marks, 0)
        self.assertEqual(parsed.passing_marks, 0)
        self.assertFalse(parsed.is_absent)

    def test_group_by_term(self):
        rows = [
            {'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 50, 'term': {'term_type': 'first'}},
            {'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 60, 'term_type': 'third'},
            {'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 70, 'term_type': 'mock'},
        ]
        with self.assertLogs('results.utils', level='WARNING'):
            grouped = group_marks_by_term(rows)

        self.assertEqual(set(grouped), {'first', 'second', 'third'})
        self.assertEqual(grouped['first'][0].obtained_marks, 50)
        self.assertEqual(grouped['second'], [])
        self.assertEqual(len(grouped['third']), 1)

    def test_term_summary(self):
        result = calculate_term_result([mark('Maths', 80), mark('English', 70)])
        result['term_name'] = 'First Term'
        summary = term_result_summary(result)

        self.assertEqual(summary['term_name'], 'First Term')
        self.assertEqual(summary['percentage'], 75.0)
        self.assertEqual(summary['grade'], 'B')
        self.assertEqual(summary['result_status'], ResultStatus.PASS)
        self.assertEqual(summary['remarks'], 'Passed')

    def test_final_summary(self):
        term1 = calculate_term_result([mark('Maths', 80)])
        final = calculate_final_result(term1, None, None)
        summary = final_result_summary(final, term1)

        self.assertEqual(summary['term1_percentage'], 80.0)
        self.assertIsNone(summary['term2_percentage'])
        self.assertEqual(summary['final_grade'], 'A')
        self.assertEqual(summary['result_status'], ResultStatus.PROMOTED)

    def test_serialize_report_card(self):
        card = generate_report_card_data('Kofi', '7', 'JHS 1', [mark('Maths', 80)], [], [])
        data = serialize_report_card(card)

        self.assertEqual(data['subject_marks']['term1'], [mark('Maths', 80).to_dict()])
        self.assertIs(card['subject_marks']['term1'][0].__class__, SubjectMark)
        json.dumps(data)


class ViewTests(SimpleTestCase):
    """Tests for the JSON endpoints."""

    def setUp(self):
        self.factory = RequestFactory()

    def post(self, view, payload):
        body = payload if isinstance(payload, str) else json.dumps(payload)
        request = self.factory.post('/results/', data=body, content_type='application/json')
        return view(request)

    def test_report_card(self):
        response = self.post(views.report_card, {
            'student_name': 'Ama Mensah', 'roll_number': '12', 'class_name': 'JHS 2',
            'term1': [{'subjectName': 'Maths', 'totalMarks': 100, 'obtainedMarks': 80, 'passingMarks': 33}],
            'term2': [{'subjectName': 'Maths', 'totalMarks': 100, 'obtainedMarks': 60, 'passingMarks': 33}],
            'term3': [{'subjectName': 'Maths', 'totalMarks': 100, 'obtainedMarks': 70, 'passingMarks': 33}],
        })
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.content)
        self.assertEqual(data['final_result']['percentage'], 70.0)
        self.assertEqual(data['final_result']['status'], 'promoted')
        self.assertTrue(data['final_result']['promotion_status'])
        self.assertEqual(data['term_results']['term2']['average'], 70.0)
        self.assertEqual(data['subject_marks']['term1'][0]['subject_name'], 'Maths')

    def test_invalid_json(self):
        with self.assertLogs('results.views', level='WARNING'):
            response = self.post(views.report_card, '{not json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_marks(self):
        with self.assertLogs('results.views', level='WARNING'):
            response = self.post(views.report_card, {
                'student_name': 'Ama', 'roll_number': '1', 'class_name': 'JHS 2',
                'term1': [{'subject_name': 'Maths', 'total_marks': 0}],
            })
        self.assertEqual(response.status_code, 400)
        self.assertIn('term1', json.loads(response.content)['errors'])

    def test_get_not_allowed(self):
        response = views.report_card(self.factory.get('/results/report-card/'))
        self.assertEqual(response.status_code, 405)

    def test_term_result(self):
        response = self.post(views.term_result, {
            'termName': 'First Term',
            'marks': [
                {'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 91, 'passing_marks': 33},
                {'subject_name': 'English', 'total_marks': 100, 'obtained_marks': 0, 'is_absent': True},
            ],
        })
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.content)
        self.assertEqual(data['summary']['term_name'], 'First Term')
        self.assertEqual(data['summary']['result_status'], 'fail')
        self.assertEqual(data['summary']['remarks'], 'Failed')
        self.assertEqual(data['subjects'][0]['grade'], 'A+')
        self.assertEqual(data['subjects'][1]['grade'], 'ABS')
        self.assertEqual(data['subjects'][1]['grade_color'], 'text-gray-700 bg-gray-100')


class ReportCardCommandTests(SimpleTestCase):
    """Tests for the report_card management command."""

    def write_payload(self, payload):
        handle, path = tempfile.mkstemp(suffix='.json')
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            f.write(payload if isinstance(payload, str) else json.dumps(payload))
        self.addCleanup(os.remove, path)
        return path

    def test_outputs_report_card(self):
        path = self.write_payload({
            'student_name': 'Kofi', 'roll_number': '7', 'class_name': 'JHS 1',
            'term1': [{'subject_name': 'Maths', 'total_marks': 100, 'obtained_marks': 20, 'passing_marks': 10}],
        })
        stdout, stderr = io.StringIO(), io.StringIO()
        call_command('report_card', path, stdout=stdout, stderr=stderr)

        data = json.loads(stdout.getvalue())
        self.assertEqual(data['student_info']['name'], 'Kofi')
        self.assertEqual(data['final_result']['status'], 'fail')
        self.assertIn('Failed (Overall percentage below 33%)', stderr.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('report_card', '/nonexistent/marks.json')

    def test_invalid_json(self):
        path = self.write_payload('[1, 2')
        with self.assertRaises(CommandError):
            call_command('report_card', path)

    def test_invalid_marks(self):
        path = self.write_payload({'student_name': 'Kofi', 'term1': []})
        with self.assertRaises(CommandError):
            call_command('report_card', path)


class TemplateTagTests(SimpleTestCase):
    """Tests for the results template filters."""

    def test_filters(self):
        template = Template(
            '{% load results_tags %}{{ grade|grade_color }}|{{ status|status_color }}'
        )
        rendered = template.render(Context({'grade': 'A', 'status': 'fail'}))
        self.assertEqual(rendered, 'text-green-700 bg-green-100|text-red-700 bg-red-100')
