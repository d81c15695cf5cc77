from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class InventoryItem(models.Model):
    """School property: furniture, equipment, vehicles and supplies."""

    class Category(models.TextChoices):
        FURNITURE = 'furniture', 'Furniture'
        IT_EQUIPMENT = 'it_equipment', 'IT Equipment'
        TEACHING_MATERIAL = 'teaching_material', 'Teaching Material'
        OFFICE_SUPPLIES = 'office_supplies', 'Office Supplies'
        SPORTS_EQUIPMENT = 'sports_equipment', 'Sports Equipment'
        LAB_EQUIPMENT = 'lab_equipment', 'Laboratory Equipment'
        VEHICLES = 'vehicles', 'Vehicles'
        OTHER = 'other', 'Other'

    class Condition(models.TextChoices):
        GOOD = 'good', 'Good'
        FAIR = 'fair', 'Fair'
        POOR = 'poor', 'Poor'
        UNDER_REPAIR = 'under_repair', 'Under Repair'
        WRITTEN_OFF = 'written_off', 'Written Off'

    # Conditions that show up in the "needs attention" count
    ATTENTION_CONDITIONS = (Condition.POOR, Condition.UNDER_REPAIR)

    name = models.CharField(max_length=150)
    category = models.CharField(max_length=20, choices=Category.choices)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Value of a single unit"
    )
    condition = models.CharField(max_length=15, choices=Condition.choices, default=Condition.GOOD)
    location = models.CharField(max_length=100, blank=True)
    acquired_on = models.DateField(null=True, blank=True)

    custodian = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='inventory_items',
        help_text="Employee responsible for the item"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Inventory Item'
        verbose_name_plural = 'Inventory Items'
        indexes = [
            models.Index(fields=['category', 'condition'], name='inventory_cat_condition_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.quantity})"

    @property
    def total_value(self):
        return self.quantity * (self.unit_value or Decimal('0.00'))

    @property
    def needs_attention(self):
        return self.condition in self.ATTENTION_CONDITIONS

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'category': self.category,
            'description': self.description,
            'quantity': self.quantity,
            'unit_value': self.unit_value,
            'total_value': self.total_value,
            'condition': self.condition,
            'location': self.location,
            'acquired_on': self.acquired_on.isoformat() if self.acquired_on else None,
            'custodian': self.custodian_id,
            'custodian_name': str(self.custodian) if self.custodian_id else None,
        }
