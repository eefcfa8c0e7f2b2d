from django.db import models
from django.utils.translation import gettext_lazy as _

class ResultStatus(models.TextChoices):
    PASS = 'pass', _('Pass')
    FAIL = 'fail', _('Fail')
    PROMOTED = 'promoted', _('Promoted')
    ABSENT = 'absent', _('Absent')

class TermType(models.TextChoices):
    FIRST = 'first', _('First Term')
    SECOND = 'second', _('Second Term')
    THIRD = 'third', _('Third Term')
