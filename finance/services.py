"""
Treasury confirmation of student payments.

A student payment (income linked to a student) starts out pending. The
treasurer confirms it once the money is checked, or rejects it with a
reason; either way the student is told.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from communications.models import Notification
from communications.services import notify

from .models import LedgerEntry

logger = logging.getLogger(__name__)


def _lock_pending_payment(entry_id):
    entry = LedgerEntry.objects.select_for_update().select_related('student', 'student__user').get(pk=entry_id)
    if not entry.is_student_payment:
        raise ValidationError('Only student payments can be confirmed or rejected.')
    if entry.confirmation_status != LedgerEntry.Confirmation.PENDING:
        raise ValidationError(
            f"Payment {entry.reference} is already {entry.get_confirmation_status_display().lower()}."
        )
    return entry


def confirm_payment(entry_id, confirmed_by):
    """Mark a pending student payment confirmed and notify the student."""
    with transaction.atomic():
        entry = _lock_pending_payment(entry_id)
        entry.confirmation_status = LedgerEntry.Confirmation.CONFIRMED
        entry.confirmed_by = confirmed_by
        entry.confirmed_at = timezone.now()
        entry.rejection_reason = ''
        entry.save(update_fields=[
            'confirmation_status', 'confirmed_by', 'confirmed_at', 'rejection_reason', 'updated_at'
        ])

    logger.info(f"Payment {entry.reference} confirmed by {confirmed_by}")
    notify(
        entry.student.user,
        'Payment confirmed',
        f"Your payment of {entry.amount} ({entry.get_category_display()}) was confirmed.",
        kind=Notification.Kind.FINANCE,
    )
    return entry


def reject_payment(entry_id, rejected_by, reason):
    """Mark a pending student payment rejected, keeping the reason, and notify the student."""
    reason = (reason or '').strip()
    if not reason:
        raise ValidationError('A reason is required to reject a payment.')

    with transaction.atomic():
        entry = _lock_pending_payment(entry_id)
        entry.confirmation_status = LedgerEntry.Confirmation.REJECTED
        entry.confirmed_by = rejected_by
        entry.confirmed_at = timezone.now()
        entry.rejection_reason = reason
        entry.save(update_fields=[
            'confirmation_status', 'confirmed_by', 'confirmed_at', 'rejection_reason', 'updated_at'
        ])

    logger.warning(f"Payment {entry.reference} rejected by {rejected_by}: {reason}")
    notify(
        entry.student.user,
        'Payment rejected',
        f"Your payment of {entry.amount} was rejected. Reason: {reason}",
        kind=Notification.Kind.FINANCE,
    )
    return entry
