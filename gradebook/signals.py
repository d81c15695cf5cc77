"""
Signals for assessment records.

When a record gains a term average the student is notified. Bulk
operations wrap their writes in ``signals_disabled()``.
"""
import logging
import threading

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)

# Thread-local storage for signal disabling (thread-safe)
_thread_locals = threading.local()


def _is_signals_disabled():
    """Check if signals are disabled for the current thread."""
    return getattr(_thread_locals, 'signals_disabled', False)


def disable_signals():
    """Disable record signals for the current thread (for bulk operations)."""
    _thread_locals.signals_disabled = True


def enable_signals():
    """Re-enable record signals for the current thread."""
    _thread_locals.signals_disabled = False


class signals_disabled:
    """Context manager to temporarily disable signals (thread-safe)."""

    def __enter__(self):
        self._previous_state = _is_signals_disabled()
        disable_signals()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._previous_state:
            enable_signals()
        return False


@receiver(pre_save, sender='gradebook.AssessmentRecord')
def remember_term_average(sender, instance, **kwargs):
    """Keep the stored term average so post_save can tell whether it changed."""
    if _is_signals_disabled() or kwargs.get('raw') or instance.pk is None:
        instance._previous_term_average = None
        return
    instance._previous_term_average = (
        sender.objects.filter(pk=instance.pk).values_list('term_average', flat=True).first()
    )


@receiver(post_save, sender='gradebook.AssessmentRecord')
def assessment_record_saved(sender, instance, created, **kwargs):
    """Notify the student when a term average is published or changed."""
    if _is_signals_disabled() or kwargs.get('raw'):
        return
    if instance.term_average is None:
        return
    if not created and instance.term_average == getattr(instance, '_previous_term_average', None):
        return

    from communications.models import Notification
    from communications.services import notify

    student = instance.student
    if not student.user_id:
        return

    verb = 'published' if created else 'updated'
    notify(
        student.user,
        f"Grade {verb}: {instance.subject.name}",
        f"{instance.term.name}: term average {instance.term_average}/20.",
        kind=Notification.Kind.GRADE,
    )
    logger.debug(f"Grade notification sent to {student} for {instance.subject.name}")
