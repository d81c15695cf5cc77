"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to change the exam-bearing grade levels:
    GRADEBOOK_EXAM_GRADE_LEVELS = frozenset({9, 12})

All configuration values are lazily loaded to avoid Django setup issues.
"""
from decimal import Decimal


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


# Define defaults as constants for direct use when Django settings are not needed
_DEFAULTS = {
    # Term average weighting: MT = MAS * 0.4 + AT * 0.6
    'SYSTEMATIC_WEIGHT': Decimal('0.4'),
    'EXAM_WEIGHT': Decimal('0.6'),

    # Score scale (0-20)
    'MIN_SCORE': Decimal('0'),
    'MAX_SCORE': Decimal('20'),

    # Status thresholds
    'PASS_MARK': Decimal('10'),
    'EXAM_MARK': Decimal('7'),

    # Grade levels ending in a national exam
    'EXAM_GRADE_LEVELS': frozenset({9, 10, 12}),
    # Grade levels the school recognises
    'GRADE_LEVELS': range(1, 14),

    'TERMS_PER_YEAR': 3,

    # Notification feed
    'NOTIFICATION_FEED_LIMIT': 20,

    # Celery task settings
    'TASK_MAX_RETRIES': 3,
    'TASK_RETRY_DELAY': 60,  # seconds
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


# Module-level proxy object for attribute access
_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
