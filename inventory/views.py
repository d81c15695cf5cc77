import json
import logging
from decimal import Decimal

from django.core.paginator import Paginator
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from core.utils import role_required

from .forms import InventoryFilterForm, InventoryItemForm
from .models import InventoryItem

logger = logging.getLogger(__name__)


def _json_or_post(request):
    if request.content_type == 'application/json':
        return json.loads(request.body or '{}')
    return request.POST


def inventory_totals(queryset):
    """Units held, their value, and how many items are in good shape or need attention."""
    line_value = ExpressionWrapper(
        F('quantity') * F('unit_value'),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )
    totals = queryset.aggregate(
        total_units=Sum('quantity'),
        total_value=Sum(line_value),
        good_condition=Count('id', filter=Q(condition=InventoryItem.Condition.GOOD)),
        needs_attention=Count('id', filter=Q(condition__in=InventoryItem.ATTENTION_CONDITIONS)),
    )
    return {
        'total_units': totals['total_units'] or 0,
        'total_value': totals['total_value'] or Decimal('0.00'),
        'good_condition': totals['good_condition'],
        'needs_attention': totals['needs_attention'],
    }


@require_GET
@role_required('secretary')
def item_list(request):
    """Inventory items, filtered and paginated, with totals for the whole inventory."""
    filter_form = InventoryFilterForm(request.GET)
    if not filter_form.is_valid():
        return JsonResponse({'errors': filter_form.errors}, status=400)

    items = filter_form.filter(InventoryItem.objects.select_related('custodian'))

    paginator = Paginator(items, 25)
    page = paginator.get_page(request.GET.get('page'))

    return JsonResponse({
        'items': [item.to_dict() for item in page],
        'page': page.number,
        'num_pages': paginator.num_pages,
        'count': paginator.count,
        'totals': inventory_totals(InventoryItem.objects.all()),
    })


@require_POST
@role_required('secretary')
def item_create(request):
    """Register a new inventory item."""
    try:
        data = _json_or_post(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    form = InventoryItemForm(data)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    item = form.save()
    logger.info(f"Inventory item {item.pk} ({item.name} x{item.quantity}) added by {request.user}")
    return JsonResponse(item.to_dict(), status=201)


@require_POST
@role_required('secretary')
def item_update(request, pk):
    item = get_object_or_404(InventoryItem, pk=pk)
    try:
        data = _json_or_post(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    form = InventoryItemForm(data, instance=item)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    item = form.save()
    logger.info(f"Inventory item {item.pk} updated by {request.user}")
    return JsonResponse(item.to_dict())


@require_POST
@role_required('secretary')
def item_delete(request, pk):
    item = get_object_or_404(InventoryItem, pk=pk)
    logger.info(f"Inventory item {item.pk} ({item.name}) deleted by {request.user}")
    item.delete()
    return JsonResponse({'deleted': pk})
