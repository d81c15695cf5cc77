
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from . import services


@login_required
@require_GET
def notification_list(request):
    """Latest notifications for the current user plus the unread badge count."""
    notifications = services.latest(request.user)
    return JsonResponse({
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': services.unread_count(request.user),
    })


@login_required
@require_GET
def notification_feed(request):
    """Notifications created after ``?after=<id>``; clients poll this."""
    try:
        after = int(request.GET.get('after', 0))
    except ValueError:
        return JsonResponse({'error': 'after must be an integer.'}, status=400)

    notifications = services.feed(request.user, after=after)
    return JsonResponse({
        'notifications': [n.to_dict() for n in notifications],
        'last_id': notifications[-1].pk if notifications else after,
        'unread_count': services.unread_count(request.user),
    })


@login_required
@require_POST
def mark_read(request, pk):
    updated = services.mark_read(request.user, [pk])
    return JsonResponse({'updated': updated, 'unread_count': services.unread_count(request.user)})


@login_required
@require_POST
def mark_all_read(request):
    updated = services.mark_all_read(request.user)
    return JsonResponse({'updated': updated, 'unread_count': 0})
