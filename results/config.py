"""
Configuration settings for the results app.

These values can be overridden in Django settings by prefixing with RESULTS_.
For example, to lower the overall pass line:
    RESULTS_PASS_PERCENTAGE = 30

All configuration values are lazily loaded to avoid Django setup issues.
When Django settings are not configured at all (the calculator used as a
plain library), the defaults below apply.
"""


def _get_setting(name, default):
    """Get a results setting from Django settings or use default."""
    from django.conf import settings
    if not settings.configured:
        return default
    return getattr(settings, f'RESULTS_{name}', default)


_DEFAULTS = {
    # Overall percentage below which a term or final result fails
    'PASS_PERCENTAGE': 33,

    # Absence rules: ABSENT_LIMIT or more absences marks the final result
    # 'absent'; ABSENT_FAIL_MIN up to ABSENT_LIMIT - 1 absences fail it
    'ABSENT_LIMIT': 4,
    'ABSENT_FAIL_MIN': 2,

    # Failed-or-absent subjects at or above this count fail the result
    'FAILED_SUBJECTS_LIMIT': 2,

    # (minimum percentage, grade) evaluated top-down; anything lower is FAIL_GRADE
    'GRADE_BANDS': (
        (90, 'A+'),
        (80, 'A'),
        (70, 'B'),
        (60, 'C'),
        (50, 'D'),
        (33, 'E'),
    ),
    'FAIL_GRADE': 'F',
    'ABSENT_GRADE': 'ABS',
    'NO_RESULT_GRADE': 'N/A',
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


# Module-level proxy object for attribute access
_config = _ConfigProxy()


class GradingRules:
    """
    Business-rule thresholds used by the result calculator.

    Build one explicitly to evaluate results under a school's own policy,
    or use GradingRules.from_settings() to pick up RESULTS_* overrides.
    """

    def __init__(
        self,
        pass_percentage=_DEFAULTS['PASS_PERCENTAGE'],
        absent_limit=_DEFAULTS['ABSENT_LIMIT'],
        absent_fail_min=_DEFAULTS['ABSENT_FAIL_MIN'],
        failed_subjects_limit=_DEFAULTS['FAILED_SUBJECTS_LIMIT'],
        grade_bands=_DEFAULTS['GRADE_BANDS'],
        fail_grade=_DEFAULTS['FAIL_GRADE'],
        absent_grade=_DEFAULTS['ABSENT_GRADE'],
        no_result_grade=_DEFAULTS['NO_RESULT_GRADE'],
    ):
        self.pass_percentage = pass_percentage
        self.absent_limit = absent_limit
        self.absent_fail_min = absent_fail_min
        self.failed_subjects_limit = failed_subjects_limit
        # Highest band first so the first match wins
        self.grade_bands = tuple(
            sorted(grade_bands, key=lambda band: band[0], reverse=True)
        )
        self.fail_grade = fail_grade
        self.absent_grade = absent_grade
        self.no_result_grade = no_result_grade

    @classmethod
    def from_settings(cls):
        return cls(
            pass_percentage=_config.PASS_PERCENTAGE,
            absent_limit=_config.ABSENT_LIMIT,
            absent_fail_min=_config.ABSENT_FAIL_MIN,
            failed_subjects_limit=_config.FAILED_SUBJECTS_LIMIT,
            grade_bands=_config.GRADE_BANDS,
            fail_grade=_config.FAIL_GRADE,
            absent_grade=_config.ABSENT_GRADE,
            no_result_grade=_config.NO_RESULT_GRADE,
        )

    def __repr__(self):
        return (
            f"GradingRules(pass_percentage={self.pass_percentage}, "
            f"absent_limit={self.absent_limit}, "
            f"absent_fail_min={self.absent_fail_min}, "
            f"failed_subjects_limit={self.failed_subjects_limit})"
        )


# For direct attribute access (config.PASS_PERCENTAGE)
def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
