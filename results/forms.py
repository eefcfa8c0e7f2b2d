from django import forms
from django.core.exceptions import ValidationError

from .calculator import SubjectMark


# JSON callers may send either naming style
CAMEL_CASE_KEYS = {
    'subjectName': 'subject_name',
    'totalMarks': 'total_marks',
    'obtainedMarks': 'obtained_marks',
    'passingMarks': 'passing_marks',
    'isAbsent': 'is_absent',
}


class SubjectMarkForm(forms.Form):
    """Validates one subject's marks before they reach the calculator."""

    subject_name = forms.CharField(max_length=100)
    total_marks = forms.FloatField()
    obtained_marks = forms.FloatField(required=False)
    passing_marks = forms.FloatField(required=False)
    is_absent = forms.BooleanField(required=False)

    @classmethod
    def from_payload(cls, payload):
        data = {CAMEL_CASE_KEYS.get(key, key): value for key, value in payload.items()}
        return cls(data=data)

    def clean_total_marks(self):
        total_marks = self.cleaned_data['total_marks']
        if total_marks <= 0:
            raise ValidationError('Total marks must be greater than zero.')
        return total_marks

    def clean(self):
        cleaned_data = super().clean()
        # Absent subjects score nothing whatever was typed in
        if cleaned_data.get('is_absent') or cleaned_data.get('obtained_marks') is None:
            cleaned_data['obtained_marks'] = 0
        if cleaned_data.get('passing_marks') is None:
            cleaned_data['passing_marks'] = 0
        return cleaned_data

    def to_subject_mark(self):
        return SubjectMark(
            subject_name=self.cleaned_data['subject_name'],
            total_marks=self.cleaned_data['total_marks'],
            obtained_marks=self.cleaned_data['obtained_marks'],
            passing_marks=self.cleaned_data['passing_marks'],
            is_absent=self.cleaned_data['is_absent'],
        )


class SubjectMarkListField(forms.Field):
    """A list of subject mark mappings, cleaned into SubjectMark records."""

    default_error_messages = {
        'invalid': 'Enter a list of subject marks.',
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages['invalid'], code='invalid')

        marks = []
        errors = []
        for index, item in enumerate(value, start=1):
            if not isinstance(item, dict):
                errors.append(ValidationError(f'Subject {index}: expected an object.'))
                continue
            form = SubjectMarkForm.from_payload(item)
            if form.is_valid():
                marks.append(form.to_subject_mark())
            else:
                details = '; '.join(
                    f"{field}: {' '.join(messages)}" for field, messages in form.errors.items()
                )
                errors.append(ValidationError(f'Subject {index}: {details}'))

        if errors:
            raise ValidationError(errors)
        return marks


class ReportCardRequestForm(forms.Form):
    """Student details plus three terms of marks for report card assembly."""

    student_name = forms.CharField(max_length=200)
    roll_number = forms.CharField(max_length=50)
    class_name = forms.CharField(max_length=100)
    term1 = SubjectMarkListField(required=False)
    term2 = SubjectMarkListField(required=False)
    term3 = SubjectMarkListField(required=False)

    @classmethod
    def from_payload(cls, payload):
        data = dict(payload)
        for snake, camel in (
            ('student_name', 'studentName'),
            ('roll_number', 'rollNumber'),
            ('class_name', 'className'),
            ('term1', 'term1Marks'),
            ('term2', 'term2Marks'),
            ('term3', 'term3Marks'),
        ):
            if snake not in data and camel in data:
                data[snake] = data.pop(camel)
        return cls(data=data)


class TermResultRequestForm(forms.Form):
    """One term's marks, optionally labelled with the term's name."""

    term_name = forms.CharField(max_length=100, required=False)
    marks = SubjectMarkListField(required=False)

    @classmethod
    def from_payload(cls, payload):
        data = dict(payload)
        if 'term_name' not in data and 'termName' in data:
            data['term_name'] = data.pop('termName')
        return cls(data=data)
