import logging
import ssl
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from gradebook import config

logger = logging.getLogger(__name__)

# Transient errors that should trigger retry
RETRYABLE_EXCEPTIONS = (SMTPException, ssl.SSLError, ConnectionError, TimeoutError)


@shared_task(
    bind=True,
    max_retries=config.TASK_MAX_RETRIES,
    default_retry_delay=config.TASK_RETRY_DELAY,
)
def send_email_task(self, email_message_id):
    """
    Deliver a queued EmailMessage.

    Retries with exponential backoff for transient SMTP failures; anything
    else marks the message failed.
    """
    from .models import EmailMessage

    try:
        email = EmailMessage.objects.get(pk=email_message_id)
    except EmailMessage.DoesNotExist:
        # Non-retryable
        logger.error(f"EmailMessage {email_message_id} not found")
        return {'status': 'missing'}

    if email.status == EmailMessage.Status.SENT:
        return {'status': 'sent'}

    try:
        send_mail(
            subject=email.subject,
            message=email.message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email.recipient_email],
        )
    except RETRYABLE_EXCEPTIONS as e:
        if self.request.retries >= self.max_retries:
            logger.error(f"E-mail to {email.recipient_email} failed after {self.max_retries} retries: {e}")
            email.mark_failed(e)
            return {'status': 'failed', 'error': str(e)}
        logger.warning(f"Retryable error sending e-mail {email_message_id}: {e}")
        email.error_message = f"Retry {self.request.retries + 1}: {str(e)[:450]}"
        email.save(update_fields=['error_message'])
        raise self.retry(exc=e, countdown=config.TASK_RETRY_DELAY * (2 ** self.request.retries))
    except Exception as e:
        # Non-retryable error
        logger.error(f"Failed to send e-mail {email_message_id} to {email.recipient_email}: {str(e)}")
        email.mark_failed(e)
        return {'status': 'failed', 'error': str(e)}

    email.mark_sent()
    logger.info(f"E-mail sent to {email.recipient_email}: {email.subject}")
    return {'status': 'sent'}
