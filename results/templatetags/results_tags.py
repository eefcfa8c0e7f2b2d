from django import template

from results.calculator import get_grade_color, get_status_color

register = template.Library()


@register.filter
def grade_color(grade):
    """CSS classes for a grade badge, e.g. {{ subject.grade|grade_color }}."""
    return get_grade_color(grade)


@register.filter
def status_color(status):
    """CSS classes for a pass/fail/promoted/absent badge."""
    return get_status_color(status)
