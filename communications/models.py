from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """In-app notification shown in a user's notification panel."""

    class Kind(models.TextChoices):
        GENERAL = 'general', 'General'
        GRADE = 'grade', 'Grade'
        ENROLLMENT = 'enrollment', 'Enrollment'
        FINANCE = 'finance', 'Finance'

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    kind = models.CharField(
        max_length=20,
        choices=Kind.choices,
        default=Kind.GENERAL
    )
    is_read = models.BooleanField(default=False)
    link = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        indexes = [
            # Unread badge and feed polling
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient}"

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'message': self.message,
            'kind': self.kind,
            'is_read': self.is_read,
            'link': self.link,
            'created_at': self.created_at.isoformat(),
        }


class EmailMessage(models.Model):
    """Log of all e-mails queued for delivery."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SENT = 'sent', 'Sent'
        FAILED = 'failed', 'Failed'

    recipient_email = models.EmailField()
    recipient_name = models.CharField(max_length=200, blank=True)
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_messages'
    )
    subject = models.CharField(max_length=200)
    message = models.TextField()
    message_type = models.CharField(
        max_length=20,
        choices=Notification.Kind.choices,
        default=Notification.Kind.GENERAL
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    error_message = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_emails'
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'E-mail Message'
        verbose_name_plural = 'E-mail Messages'
        indexes = [
            models.Index(fields=['created_at', 'status'], name='email_created_status_idx'),
        ]

    def __str__(self):
        return f"E-mail to {self.recipient_email} - {self.get_status_display()}"

    def mark_sent(self):
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at'])

    def mark_failed(self, error=''):
        self.status = self.Status.FAILED
        self.error_message = str(error)
        self.save(update_fields=['status', 'error_message'])
