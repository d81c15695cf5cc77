import json

from django.http import JsonResponse
from django.views.decorators.http import require_POST

from core.utils import role_required

from .forms import EnrollmentDecisionForm
from .services import decide_enrollments


def _request_data(request):
    """Form-encoded or JSON body; JSON lists of ids become comma-separated."""
    if request.content_type == 'application/json':
        data = json.loads(request.body or '{}')
        if not isinstance(data, dict):
            raise ValueError('Expected a JSON object')
        if isinstance(data.get('enrollment_ids'), list):
            data['enrollment_ids'] = ','.join(str(pk) for pk in data['enrollment_ids'])
        return data
    return request.POST


@require_POST
@role_required('secretary')
def enrollment_decide(request):
    """Approve or reject a batch of pending enrollments."""
    try:
        data = _request_data(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    form = EnrollmentDecisionForm(data)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    result = decide_enrollments(
        form.cleaned_data['enrollment_ids'],
        form.cleaned_data['decision'],
        class_assigned=form.cleaned_data['class_assigned'],
        decided_by=request.user,
        remarks=form.cleaned_data['remarks'],
    )
    return JsonResponse(result.to_dict())
