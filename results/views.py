"""JSON endpoints for computing results from caller-supplied marks."""
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .calculator import (
    calculate_subject_result, calculate_term_result,
    generate_report_card_data, get_grade_color,
)
from .config import GradingRules
from .forms import ReportCardRequestForm, TermResultRequestForm
from .utils import serialize_report_card, term_result_summary

logger = logging.getLogger(__name__)


def _load_json(request):
    """Return the decoded body, or None when it is not a JSON object."""
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def _invalid(errors):
    logger.warning(f'Rejected results payload: {errors}')
    return JsonResponse({'errors': errors}, status=400)


@csrf_exempt
@require_POST
def term_result(request):
    """Score one term's marks subject by subject and as a whole."""
    payload = _load_json(request)
    if payload is None:
        return _invalid({'__all__': [{'message': 'Invalid JSON', 'code': 'invalid'}]})

    form = TermResultRequestForm.from_payload(payload)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())

    rules = GradingRules.from_settings()
    marks = form.cleaned_data['marks']
    result = calculate_term_result(marks, rules)
    result['term_name'] = form.cleaned_data['term_name']

    subjects = []
    for mark in marks:
        outcome = calculate_subject_result(
            mark.obtained_marks, mark.total_marks, mark.passing_marks, mark.is_absent, rules
        )
        subjects.append({
            'subject_name': mark.subject_name,
            **outcome,
            'grade_color': get_grade_color(outcome['grade']),
        })

    return JsonResponse({
        'summary': term_result_summary(result, rules),
        'subjects': subjects,
    })


@csrf_exempt
@require_POST
def report_card(request):
    """Assemble report card data from three terms of marks."""
    payload = _load_json(request)
    if payload is None:
        return _invalid({'__all__': [{'message': 'Invalid JSON', 'code': 'invalid'}]})

    form = ReportCardRequestForm.from_payload(payload)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())

    data = form.cleaned_data
    card = generate_report_card_data(
        data['student_name'], data['roll_number'], data['class_name'],
        data['term1'], data['term2'], data['term3'],
        rules=GradingRules.from_settings(),
    )
    return JsonResponse(serialize_report_card(card))
