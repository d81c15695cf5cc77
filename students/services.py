"""
Enrollment decisions made by the secretariat.

A batch of pending enrollment requests is approved or rejected in one
call. Every enrollment is written on its own: one bad id does not undo
the decisions already recorded for the others.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from communications.models import Notification
from communications.services import notify, send_email

from .models import Enrollment, Student

logger = logging.getLogger(__name__)

APPROVE = 'approve'
REJECT = 'reject'
DECISIONS = (APPROVE, REJECT)


class BulkDecisionResult:
    """Outcome of a bulk decision: ids updated and ``(id, reason)`` failures."""

    def __init__(self):
        self.updated = []
        self.failed = []

    def __repr__(self):
        return f"<BulkDecisionResult updated={len(self.updated)} failed={len(self.failed)}>"

    @property
    def ok(self):
        return not self.failed

    def to_dict(self):
        return {
            'updated': self.updated,
            'failed': [{'id': pk, 'reason': reason} for pk, reason in self.failed],
        }


def decide_enrollments(enrollment_ids, decision, class_assigned=None, decided_by=None, remarks=''):
    """
    Approve or reject pending enrollments.

    Approving sets the status to approved and, when ``class_assigned`` is
    given, assigns the class and moves the student into it. Rejecting sets
    the status to cancelled. Only pending enrollments can be decided.

    Raises ValueError for an unknown ``decision``; per-enrollment problems
    are collected in ``result.failed`` instead of being raised.
    """
    if decision not in DECISIONS:
        raise ValueError(f"Unknown decision {decision!r}; expected one of {DECISIONS}")

    result = BulkDecisionResult()

    # Bulk fetch (avoid N+1)
    enrollments = {
        e.pk: e for e in Enrollment.objects.filter(pk__in=enrollment_ids).select_related(
            'student', 'student__user', 'academic_year'
        )
    }

    for enrollment_id in enrollment_ids:
        enrollment = enrollments.get(enrollment_id)
        if enrollment is None:
            result.failed.append((enrollment_id, 'Enrollment not found.'))
            continue

        try:
            with transaction.atomic():
                _apply_decision(enrollment, decision, class_assigned, decided_by, remarks)
        except ValidationError as e:
            reason = ' '.join(e.messages)
            logger.warning(f"Enrollment {enrollment_id} not {decision}d: {reason}")
            result.failed.append((enrollment_id, reason))
            continue

        result.updated.append(enrollment_id)
        _announce_decision(enrollment, decided_by)

    logger.info(
        f"Enrollment decision '{decision}' by {decided_by}: "
        f"{len(result.updated)} updated, {len(result.failed)} failed"
    )
    return result


def _apply_decision(enrollment, decision, class_assigned, decided_by, remarks):
    if enrollment.status != Enrollment.Status.PENDING:
        raise ValidationError(f"Enrollment is already {enrollment.get_status_display().lower()}.")

    if decision == APPROVE:
        if class_assigned is not None and class_assigned.academic_year_id != enrollment.academic_year_id:
            raise ValidationError('The class belongs to a different academic year.')
        enrollment.status = Enrollment.Status.APPROVED
        if class_assigned is not None:
            enrollment.class_assigned = class_assigned
    else:
        enrollment.status = Enrollment.Status.CANCELLED

    if remarks:
        enrollment.remarks = remarks
    enrollment.decided_by = decided_by
    enrollment.decided_at = timezone.now()
    enrollment.save()

    if decision == APPROVE and enrollment.class_assigned_id:
        Student.objects.filter(pk=enrollment.student_id).update(
            current_class_id=enrollment.class_assigned_id
        )


def _announce_decision(enrollment, decided_by):
    """Tell the student (in-app) and the guardian (e-mail) about the decision."""
    student = enrollment.student
    if enrollment.status == Enrollment.Status.APPROVED:
        title = 'Enrollment approved'
        message = f"The enrollment of {student.full_name} for {enrollment.academic_year} was approved."
        if enrollment.class_assigned_id:
            message += f" Class: {enrollment.class_assigned}."
    else:
        title = 'Enrollment rejected'
        message = f"The enrollment of {student.full_name} for {enrollment.academic_year} was rejected."
    if enrollment.remarks:
        message += f" Remarks: {enrollment.remarks}"

    notify(student.user, title, message, kind=Notification.Kind.ENROLLMENT)

    if student.contact_email:
        send_email(
            student.contact_email,
            title,
            message,
            student=student,
            message_type=Notification.Kind.ENROLLMENT,
            created_by=decided_by,
        )
