"""
Utility functions for the results app.
Mapping between stored mark rows and the calculator's records. Rows are
the marks table joined with subject(subject_name) and term(term_type);
the summaries match the per-term results and final_results columns.
"""
import logging

from .calculator import SubjectMark, get_grade_from_percentage
from .choices import ResultStatus, TermType

logger = logging.getLogger(__name__)


def subject_mark_from_row(row):
    """
    Map one stored mark row onto a SubjectMark.

    Args:
        row: dict with total_marks, obtained_marks, passing_marks, is_absent
             and either a flat subject_name or a joined
             subject {'subject_name': ...}

    Returns:
        SubjectMark
    """
    subject = row.get('subject') or {}
    subject_name = row.get('subject_name') or subject.get('subject_name') or ''

    return SubjectMark(
        subject_name=subject_name,
        total_marks=row['total_marks'],
        obtained_marks=row.get('obtained_marks') or 0,
        passing_marks=row.get('passing_marks') or 0,
        is_absent=bool(row.get('is_absent')),
    )


def _term_type_of(row):
    term = row.get('term') or {}
    return row.get('term_type') or term.get('term_type')


def group_marks_by_term(rows):
    """
    Split a student's mark rows for one academic year by term type.

    Rows without a recognised term type are skipped.

    Returns:
        dict: {'first': [SubjectMark], 'second': [...], 'third': [...]}
    """
    grouped = {term_type: [] for term_type in TermType.values}

    for row in rows:
        term_type = _term_type_of(row)
        if term_type not in grouped:
            logger.warning(f"Skipping mark row with unknown term type: {term_type!r}")
            continue
        grouped[term_type].append(subject_mark_from_row(row))

    return grouped


def term_result_summary(term_result, rules=None):
    """
    Flatten a term result into the columns stored for a term.

    Returns:
        dict: totals, percentage, grade, subjects_failed,
              result_status and remarks
    """
    passed = term_result['status'] == ResultStatus.PASS
    return {
        'term_name': term_result['term_name'],
        'total_marks': term_result['total_marks'],
        'obtained_marks': term_result['obtained_marks'],
        'percentage': term_result['percentage'],
        'grade': get_grade_from_percentage(term_result['percentage'], rules),
        'subjects_failed': term_result['subjects_failed'],
        'result_status': ResultStatus.PASS if passed else ResultStatus.FAIL,
        'remarks': 'Passed' if passed else 'Failed',
    }


def final_result_summary(final_result, term1=None, term2=None, term3=None):
    """Flatten a final result, with each term's percentage alongside."""
    return {
        'term1_percentage': term1['percentage'] if term1 else None,
        'term2_percentage': term2['percentage'] if term2 else None,
        'term3_percentage': term3['percentage'] if term3 else None,
        'total_marks': final_result['total_marks'],
        'obtained_marks': final_result['obtained_marks'],
        'final_percentage': final_result['final_percentage'],
        'final_grade': final_result['final_grade'],
        'result_status': final_result['status'],
        'remarks': final_result['remarks'],
    }


def serialize_report_card(report_card):
    """Return report card data with SubjectMark records turned into dicts."""
    data = dict(report_card)
    data['subject_marks'] = {
        term: [mark.to_dict() for mark in marks]
        for term, marks in report_card['subject_marks'].items()
    }
    return data
