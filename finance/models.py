from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class LedgerEntry(models.Model):
    """A single income or expense movement in the school's cash book."""

    class Kind(models.TextChoices):
        INCOME = 'income', 'Income'
        EXPENSE = 'expense', 'Expense'

    class Category(models.TextChoices):
        ENROLLMENT = 'enrollment', 'Enrollment'
        TUITION = 'tuition', 'Tuition'
        CONTRIBUTION = 'contribution', 'Contribution'
        SERVICES = 'services', 'Services'
        SCHOOL_PRODUCTION = 'school_production', 'School Production'
        MAINTENANCE = 'maintenance', 'Maintenance'
        MATERIALS = 'materials', 'Materials'
        EVENTS = 'events', 'Events'
        PAYMENTS = 'payments', 'Payments'
        OTHER = 'other', 'Other'

    class Confirmation(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        REJECTED = 'rejected', 'Rejected'

    reference = models.CharField(max_length=50, unique=True, editable=False)
    kind = models.CharField(max_length=10, choices=Kind.choices)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    description = models.CharField(max_length=255)
    date = models.DateField(default=timezone.localdate)

    student = models.ForeignKey(
        'students.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries'
    )
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='ledger_entries'
    )

    # Student payment confirmation
    confirmation_status = models.CharField(
        max_length=10,
        choices=Confirmation.choices,
        default=Confirmation.PENDING
    )
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_ledger_entries'
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        verbose_name = 'Ledger Entry'
        verbose_name_plural = 'Ledger Entries'
        indexes = [
            # Monthly summaries filter by kind and date
            models.Index(fields=['kind', 'date'], name='ledger_kind_date_idx'),
            models.Index(fields=['confirmation_status', 'student'], name='ledger_confirmation_idx'),
        ]

    def __str__(self):
        return f"{self.reference} - {self.get_kind_display()} {self.amount}"

    def save(self, *args, **kwargs):
        if not self.reference:
            # Generate reference: ENT-YYYY-XXXXX / SAI-YYYY-XXXXX
            prefix = 'ENT' if self.kind == self.Kind.INCOME else 'SAI'
            year = (self.date or timezone.localdate()).year
            last_entry = LedgerEntry.objects.filter(
                reference__startswith=f'{prefix}-{year}'
            ).order_by('-reference').first()

            if last_entry:
                last_num = int(last_entry.reference.split('-')[-1])
                new_num = last_num + 1
            else:
                new_num = 1

            self.reference = f'{prefix}-{year}-{new_num:05d}'

        super().save(*args, **kwargs)

    @property
    def is_student_payment(self):
        return self.kind == self.Kind.INCOME and self.student_id is not None

    @property
    def signed_amount(self):
        """Amount with expenses negative."""
        return self.amount if self.kind == self.Kind.INCOME else -self.amount

    def to_dict(self):
        return {
            'id': self.pk,
            'reference': self.reference,
            'kind': self.kind,
            'category': self.category,
            'amount': self.amount,
            'description': self.description,
            'date': self.date.isoformat(),
            'student': self.student_id,
            'recorded_by': str(self.recorded_by) if self.recorded_by_id else None,
            'confirmation_status': self.confirmation_status,
            'confirmed_by': str(self.confirmed_by) if self.confirmed_by_id else None,
            'confirmed_at': self.confirmed_at.isoformat() if self.confirmed_at else None,
            'rejection_reason': self.rejection_reason,
        }
