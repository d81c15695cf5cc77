from django import forms
from django.contrib.auth import get_user_model
from django.db.models import Q

from .models import InventoryItem


class InventoryItemForm(forms.ModelForm):
    """Form for registering and editing inventory items."""

    class Meta:
        model = InventoryItem
        fields = [
            'name', 'category', 'description', 'quantity', 'unit_value',
            'condition', 'location', 'acquired_on', 'custodian',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Only active staff can be held responsible for school property
        self.fields['custodian'].queryset = get_user_model().objects.filter(
            Q(is_employee=True) | Q(is_school_admin=True), is_active=True
        )

    def clean_name(self):
        return self.cleaned_data['name'].strip()


class InventoryFilterForm(forms.Form):
    """Query-string filters for the inventory listing."""
    search = forms.CharField(required=False)
    category = forms.ChoiceField(choices=InventoryItem.Category.choices, required=False)
    condition = forms.ChoiceField(choices=InventoryItem.Condition.choices, required=False)

    def filter(self, queryset):
        data = self.cleaned_data
        if data.get('search'):
            term = data['search']
            queryset = queryset.filter(
                Q(name__icontains=term) | Q(description__icontains=term) | Q(location__icontains=term)
            )
        if data.get('category'):
            queryset = queryset.filter(category=data['category'])
        if data.get('condition'):
            queryset = queryset.filter(condition=data['condition'])
        return queryset
