from django import forms

from .models import AssessmentRecord

SCORE_FIELDS = ('as1', 'as2', 'as3', 'at')


class AssessmentRecordForm(forms.ModelForm):
    """Validates one student's scores for a subject and term before saving."""

    class Meta:
        model = AssessmentRecord
        fields = ['student', 'subject', 'term', 'as1', 'as2', 'as3', 'at', 'remarks']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            # The record's identity is fixed once created
            for name in ('student', 'subject', 'term'):
                self.fields[name].disabled = True

    def clean(self):
        cleaned_data = super().clean()
        term = cleaned_data.get('term')

        if term is not None and term.grades_locked:
            raise forms.ValidationError(
                'Grades are locked for this term.', code='locked'
            )

        if not self.instance.pk and all(cleaned_data.get(name) is None for name in SCORE_FIELDS):
            raise forms.ValidationError('Enter at least one score.', code='empty')

        return cleaned_data
