from django import forms

from academics.models import Class

from .services import DECISIONS


class EnrollmentDecisionForm(forms.Form):
    """Validates a bulk enrollment decision request."""
    enrollment_ids = forms.CharField(
        help_text="Comma-separated enrollment ids"
    )
    decision = forms.ChoiceField(choices=[(d, d.title()) for d in DECISIONS])
    class_assigned = forms.ModelChoiceField(
        queryset=Class.objects.filter(is_active=True),
        required=False
    )
    remarks = forms.CharField(max_length=500, required=False)

    def clean_enrollment_ids(self):
        raw = self.cleaned_data['enrollment_ids']
        try:
            ids = [int(part) for part in raw.split(',') if part.strip()]
        except ValueError:
            raise forms.ValidationError("Enrollment ids must be integers.")
        if not ids:
            raise forms.ValidationError("Select at least one enrollment.")
        # Keep order, drop duplicates
        return list(dict.fromkeys(ids))

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('decision') == 'reject' and cleaned_data.get('class_assigned'):
            raise forms.ValidationError("A class can only be assigned when approving.")
        return cleaned_data
