"""Permission helpers and decorators shared by the JSON views."""
import logging
from functools import wraps

from django.http import JsonResponse

logger = logging.getLogger(__name__)


def is_school_admin(user):
    """Check if user is a school admin or superuser."""
    return user.is_superuser or getattr(user, 'is_school_admin', False)


def has_any_role(user, *roles):
    """Admins pass every check; everyone else needs one of the role flags."""
    if is_school_admin(user):
        return True
    return any(getattr(user, f'is_{role}', False) for role in roles)


def role_required(*roles):
    """
    Decorator to require an authenticated user holding one of ``roles``.

    Usage:
        @role_required('secretary')
        def decide(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse({'error': 'Authentication required.'}, status=401)
            if not has_any_role(request.user, *roles):
                logger.warning(f"Permission denied for {request.user} on {view_func.__name__}")
                return JsonResponse({'error': "You don't have permission to perform this action."}, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped_view
    return decorator


admin_required = role_required()
