import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from .procedures import UnknownProcedure, available_procedures, call_procedure
from .utils import admin_required

logger = logging.getLogger(__name__)


@require_GET
@admin_required
def procedure_call(request, name):
    """
    Run a named aggregate procedure and return its result as JSON.

    Query-string parameters are passed through as keyword arguments; a
    trailing ``_id`` parameter is converted to an integer.
    """
    params = {}
    for key, value in request.GET.items():
        if key.endswith('_id'):
            try:
                value = int(value)
            except ValueError:
                return JsonResponse({'error': f'{key} must be an integer.'}, status=400)
        params[key] = value

    try:
        result = call_procedure(name, **params)
    except UnknownProcedure as e:
        return JsonResponse({'error': str(e), 'available': available_procedures()}, status=404)
    except TypeError as e:
        logger.warning(f"Bad parameters for procedure {name}: {e}")
        return JsonResponse({'error': f'Invalid parameters for {name}.'}, status=400)

    return JsonResponse({'procedure': name, 'result': result})
