from django import forms

from .models import LedgerEntry


class LedgerEntryForm(forms.ModelForm):
    """Form for recording income and expenses."""

    class Meta:
        model = LedgerEntry
        fields = ['kind', 'category', 'amount', 'description', 'date', 'student']

    def clean(self):
        cleaned_data = super().clean()
        kind = cleaned_data.get('kind')
        category = cleaned_data.get('category')

        # Student fees can only be income
        income_only = {
            LedgerEntry.Category.ENROLLMENT,
            LedgerEntry.Category.TUITION,
            LedgerEntry.Category.CONTRIBUTION,
        }
        if kind == LedgerEntry.Kind.EXPENSE and category in income_only:
            raise forms.ValidationError(
                f"{LedgerEntry.Category(category).label} can only be recorded as income."
            )
        return cleaned_data


class PaymentRejectionForm(forms.Form):
    reason = forms.CharField(max_length=255)


class LedgerFilterForm(forms.Form):
    """Query-string filters for the ledger listing."""
    kind = forms.ChoiceField(choices=LedgerEntry.Kind.choices, required=False)
    category = forms.ChoiceField(choices=LedgerEntry.Category.choices, required=False)
    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    student = forms.IntegerField(required=False)
    confirmation_status = forms.ChoiceField(choices=LedgerEntry.Confirmation.choices, required=False)

    def filter(self, queryset):
        data = self.cleaned_data
        if data.get('kind'):
            queryset = queryset.filter(kind=data['kind'])
        if data.get('category'):
            queryset = queryset.filter(category=data['category'])
        if data.get('date_from'):
            queryset = queryset.filter(date__gte=data['date_from'])
        if data.get('date_to'):
            queryset = queryset.filter(date__lte=data['date_to'])
        if data.get('student'):
            queryset = queryset.filter(student_id=data['student'])
        if data.get('confirmation_status'):
            queryset = queryset.filter(confirmation_status=data['confirmation_status'])
        return queryset
