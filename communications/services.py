"""
Notification helpers.

Notifications are plain rows; clients poll ``feed`` with the id of the
newest notification they have seen to pick up new ones.
"""
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from gradebook import config

from .models import EmailMessage, Notification

logger = logging.getLogger(__name__)


def notify(user, title, message, kind=Notification.Kind.GENERAL, link=''):
    """Create a notification for ``user``. Returns None when there is no user."""
    if user is None:
        return None
    return Notification.objects.create(
        recipient=user,
        title=title,
        message=message,
        kind=kind,
        link=link,
    )


def unread_count(user):
    return Notification.objects.filter(recipient=user, is_read=False).count()


def latest(user, limit=None):
    """Most recent notifications for ``user``, newest first."""
    limit = limit or config.NOTIFICATION_FEED_LIMIT
    return list(Notification.objects.filter(recipient=user)[:limit])


def feed(user, after=0, limit=None):
    """
    Notifications created after the notification with id ``after``, oldest first.

    At most ``limit`` rows are returned; clients keep polling from the last
    id they received to page through a backlog.
    """
    limit = limit or config.NOTIFICATION_FEED_LIMIT
    return list(
        Notification.objects.filter(recipient=user, pk__gt=after).order_by('pk')[:limit]
    )


def mark_read(user, notification_ids):
    """Mark the given notifications read. Rows owned by other users are ignored."""
    return Notification.objects.filter(
        recipient=user, pk__in=notification_ids, is_read=False
    ).update(is_read=True)


def mark_all_read(user):
    return Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)


def send_email(to_email, subject, message, student=None, message_type=Notification.Kind.GENERAL, created_by=None):
    """
    Queue an e-mail for delivery.

    Args:
        to_email: Recipient address
        subject: Subject line
        message: Plain-text body
        student: Optional Student the message is about
        message_type: Notification kind the e-mail belongs to
        created_by: Optional User who initiated the send

    Returns:
        dict: Result with 'success', 'message_id', 'error' keys

    Note:
        Delivery happens in a Celery task; a failure to queue is logged and
        reported in the result instead of being raised to the caller.
    """
    from .tasks import send_email_task

    try:
        validate_email(to_email)
    except ValidationError:
        return {'success': False, 'error': f'Invalid e-mail address: {to_email!r}'}

    email_record = EmailMessage.objects.create(
        recipient_email=to_email,
        recipient_name=student.guardian_name if student else '',
        student=student,
        subject=subject,
        message=message,
        message_type=message_type,
        created_by=created_by,
    )

    try:
        send_email_task.delay(email_record.pk)
    except Exception as e:
        logger.error(f"Failed to queue e-mail to {to_email}: {e}")
        email_record.mark_failed(e)
        return {'success': False, 'message_id': email_record.pk, 'error': str(e)}

    return {'success': True, 'message_id': email_record.pk}
