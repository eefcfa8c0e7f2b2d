"""
Academic result calculation.

Turns per-subject marks into subject outcomes, term results and a final
promotion decision, and packages them into report card data. Everything
here is pure: callers pass SubjectMark records in and get plain dicts back.
Thresholds come from GradingRules (RESULTS_* settings by default).
"""
from decimal import Decimal, ROUND_HALF_UP
import logging

from .choices import ResultStatus
from .config import GradingRules

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


class SubjectMark:
    """One subject's marks for one student in one term."""

    def __init__(
        self,
        subject_name,
        total_marks,
        obtained_marks=0,
        passing_marks=0,
        is_absent=False
    ):
        self.subject_name = subject_name
        self.total_marks = total_marks
        self.obtained_marks = obtained_marks
        self.passing_marks = passing_marks
        self.is_absent = is_absent

    def to_dict(self):
        return {
            'subject_name': self.subject_name,
            'total_marks': self.total_marks,
            'obtained_marks': self.obtained_marks,
            'passing_marks': self.passing_marks,
            'is_absent': self.is_absent,
        }

    def is_failed(self):
        """Absent subjects count as failed alongside marks below the pass line."""
        return self.is_absent or self.obtained_marks < self.passing_marks

    def __eq__(self, other):
        if not isinstance(other, SubjectMark):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        absent = ', absent' if self.is_absent else ''
        return (
            f"SubjectMark({self.subject_name!r}, "
            f"{self.obtained_marks}/{self.total_marks}{absent})"
        )


def round_percentage(value):
    """Round to two decimal places, halves going up."""
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _percentage(obtained, total):
    return obtained / total * 100 if total > 0 else 0


def _resolve(rules):
    return rules if rules is not None else GradingRules.from_settings()


def get_grade_from_percentage(percentage, rules=None):
    """Map a percentage onto the grade bands, highest band first."""
    rules = _resolve(rules)
    for minimum, grade in rules.grade_bands:
        if percentage >= minimum:
            return grade
    return rules.fail_grade


def calculate_subject_result(obtained_marks, total_marks, passing_marks, is_absent=False, rules=None):
    """
    Score a single subject.

    Returns:
        dict: {'percentage', 'grade', 'is_passed'}; an absent subject is
        always {0, 'ABS', False} whatever its stored marks.
    """
    rules = _resolve(rules)
    if is_absent:
        return {
            'percentage': 0,
            'grade': rules.absent_grade,
            'is_passed': False,
        }

    percentage = _percentage(obtained_marks, total_marks)
    return {
        'percentage': round_percentage(percentage),
        'grade': get_grade_from_percentage(percentage, rules),
        'is_passed': obtained_marks >= passing_marks,
    }


def _decide(absent_count, failed_count, percentage, rules):
    """
    Apply the absence/failure rules in priority order.

    The conditions overlap (every absence is also a failure), so the order
    of the checks is part of the rule set.

    Returns:
        tuple: (status, remarks) with status ABSENT, FAIL or PROMOTED
    """
    if absent_count >= rules.absent_limit:
        return ResultStatus.ABSENT, f'Absent ({rules.absent_limit} or more subjects absent)'
    if rules.absent_fail_min <= absent_count < rules.absent_limit:
        return ResultStatus.FAIL, (
            f'Failed ({rules.absent_fail_min}-{rules.absent_limit - 1} subjects absent)'
        )
    if failed_count >= rules.failed_subjects_limit:
        return ResultStatus.FAIL, (
            f'Failed ({rules.failed_subjects_limit} or more subjects failed)'
        )
    if failed_count == 1 and absent_count == 1:
        return ResultStatus.FAIL, 'Failed (1 fail and 1 absent)'
    if percentage < rules.pass_percentage:
        return ResultStatus.FAIL, (
            f'Failed (Overall percentage below {rules.pass_percentage}%)'
        )
    return ResultStatus.PROMOTED, 'Promoted to next class'


def calculate_term_result(marks, rules=None):
    """
    Fold one term's subject marks into a pass/fail result.

    Absent subjects add their total marks but nothing to obtained marks,
    and are counted both as absent and as failed. A term with no marks at
    all has a percentage of 0 and therefore fails.

    Returns:
        dict: {'term_name', 'marks', 'total_marks', 'obtained_marks',
               'percentage', 'subjects_failed', 'status'}
    """
    rules = _resolve(rules)
    total_marks = 0
    obtained_marks = 0
    subjects_failed = 0
    subjects_absent = 0

    for mark in marks:
        total_marks += mark.total_marks
        if mark.is_absent:
            subjects_absent += 1
        else:
            obtained_marks += mark.obtained_marks
        if mark.is_failed():
            subjects_failed += 1

    percentage = _percentage(obtained_marks, total_marks)
    decision, _remarks = _decide(subjects_absent, subjects_failed, percentage, rules)
    status = ResultStatus.PASS if decision == ResultStatus.PROMOTED else ResultStatus.FAIL

    logger.debug(
        f'Term result: {obtained_marks}/{total_marks} ({percentage:.2f}%), '
        f'{subjects_absent} absent, {subjects_failed} failed -> {status}'
    )

    return {
        'term_name': '',
        'marks': marks,
        'total_marks': total_marks,
        'obtained_marks': obtained_marks,
        'percentage': round_percentage(percentage),
        'subjects_failed': subjects_failed,
        'status': status,
    }


def calculate_final_result(term1=None, term2=None, term3=None, rules=None):
    """
    Combine up to three term results into the year's promotion decision.

    Absent and failed subjects are recounted from each term's marks and
    summed across terms, so two absences in each of two terms trigger the
    four-absence rule even though neither term crossed it alone.

    Returns:
        dict: {'total_marks', 'obtained_marks', 'final_percentage',
               'final_grade', 'status', 'remarks'}
    """
    rules = _resolve(rules)
    terms = [term for term in (term1, term2, term3) if term is not None]

    if not terms:
        return {
            'total_marks': 0,
            'obtained_marks': 0,
            'final_percentage': 0,
            'final_grade': rules.no_result_grade,
            'status': ResultStatus.FAIL,
            'remarks': 'No term results available',
        }

    total_marks = 0
    obtained_marks = 0
    total_absent_subjects = 0
    total_failed_subjects = 0

    for term in terms:
        total_marks += term['total_marks']
        obtained_marks += term['obtained_marks']
        total_absent_subjects += sum(1 for mark in term['marks'] if mark.is_absent)
        total_failed_subjects += sum(1 for mark in term['marks'] if mark.is_failed())

    final_percentage = _percentage(obtained_marks, total_marks)
    status, remarks = _decide(
        total_absent_subjects, total_failed_subjects, final_percentage, rules
    )

    logger.debug(
        f'Final result over {len(terms)} term(s): {final_percentage:.2f}%, '
        f'{total_absent_subjects} absent, {total_failed_subjects} failed -> {status}'
    )

    return {
        'total_marks': total_marks,
        'obtained_marks': obtained_marks,
        'final_percentage': round_percentage(final_percentage),
        'final_grade': get_grade_from_percentage(final_percentage, rules),
        'status': status,
        'remarks': remarks,
    }


GRADE_COLORS = {
    'A+': 'text-green-700 bg-green-100',
    'A': 'text-green-700 bg-green-100',
    'B': 'text-blue-700 bg-blue-100',
    'C': 'text-yellow-700 bg-yellow-100',
    'D': 'text-orange-700 bg-orange-100',
    'E': 'text-orange-700 bg-orange-100',
    'F': 'text-red-700 bg-red-100',
    'ABS': 'text-gray-700 bg-gray-100',
}

STATUS_COLORS = {
    'pass': 'text-green-700 bg-green-100',
    'promoted': 'text-green-700 bg-green-100',
    'fail': 'text-red-700 bg-red-100',
    'absent': 'text-gray-700 bg-gray-100',
}

DEFAULT_COLOR = 'text-gray-700 bg-gray-100'


def get_grade_color(grade):
    return GRADE_COLORS.get(grade, DEFAULT_COLOR)


def get_status_color(status):
    return STATUS_COLORS.get(str(status).lower(), DEFAULT_COLOR)


def calculate_second_term_average(term1_total, term2_total):
    return (term1_total + term2_total) / 2


def calculate_third_term_average(term1_total, term2_total, term3_total):
    return (term1_total + term2_total + term3_total) / 3


def calculate_term_total(marks):
    """Sum of obtained marks; absent subjects contribute nothing."""
    return sum(mark.obtained_marks for mark in marks if not mark.is_absent)


def get_class_subjects(marks):
    """Distinct subject names, in the order first seen."""
    return list(dict.fromkeys(mark.subject_name for mark in marks))


def should_promote_student(final_result, rules=None):
    rules = _resolve(rules)
    return (
        final_result['status'] == ResultStatus.PROMOTED
        and final_result['final_percentage'] >= rules.pass_percentage
    )


def generate_report_card_data(
    student_name, roll_number, class_name,
    term1_marks, term2_marks, term3_marks,
    rules=None
):
    """
    Build everything a report card shows from three terms of raw marks.

    Term averages are running averages of the term totals: term 1 shows its
    own total, term 2 the mean of terms 1-2, term 3 the mean of terms 1-3.

    Returns:
        dict: {'student_info', 'term_results', 'final_result', 'subject_marks'}
    """
    rules = _resolve(rules)

    term1_result = calculate_term_result(term1_marks, rules)
    term2_result = calculate_term_result(term2_marks, rules)
    term3_result = calculate_term_result(term3_marks, rules)

    final_result = calculate_final_result(term1_result, term2_result, term3_result, rules)

    term1_total = calculate_term_total(term1_marks)
    term2_total = calculate_term_total(term2_marks)
    term3_total = calculate_term_total(term3_marks)

    logger.info(
        f'Report card for {student_name} ({class_name}, roll {roll_number}): '
        f'{final_result["status"]}'
    )

    return {
        'student_info': {
            'name': student_name,
            'roll_number': roll_number,
            'class_name': class_name,
        },
        'term_results': {
            'term1': {
                'total': term1_total,
                'percentage': term1_result['percentage'],
                'status': term1_result['status'],
                'average': term1_total,
            },
            'term2': {
                'total': term2_total,
                'percentage': term2_result['percentage'],
                'status': term2_result['status'],
                'average': calculate_second_term_average(term1_total, term2_total),
            },
            'term3': {
                'total': term3_total,
                'percentage': term3_result['percentage'],
                'status': term3_result['status'],
                'average': calculate_third_term_average(term1_total, term2_total, term3_total),
            },
        },
        'final_result': {
            'total_marks': final_result['total_marks'],
            'obtained_marks': final_result['obtained_marks'],
            'percentage': final_result['final_percentage'],
            'grade': final_result['final_grade'],
            'status': final_result['status'],
            'remarks': final_result['remarks'],
            'promotion_status': should_promote_student(final_result, rules),
        },
        'subject_marks': {
            'term1': term1_marks,
            'term2': term2_marks,
            'term3': term3_marks,
        },
    }
