import json
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.db.models import Q, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from communications.models import Notification
from communications.services import notify
from core.utils import role_required

from .forms import LedgerEntryForm, LedgerFilterForm, PaymentRejectionForm
from .models import LedgerEntry
from .services import confirm_payment, reject_payment

logger = logging.getLogger(__name__)


def _json_or_post(request):
    if request.content_type == 'application/json':
        return json.loads(request.body or '{}')
    return request.POST


@require_GET
@role_required('treasurer')
def entry_list(request):
    """Ledger entries, filtered and paginated, with income/expense totals."""
    filter_form = LedgerFilterForm(request.GET)
    if not filter_form.is_valid():
        return JsonResponse({'errors': filter_form.errors}, status=400)

    entries = filter_form.filter(
        LedgerEntry.objects.select_related('recorded_by', 'confirmed_by')
    )

    totals = entries.aggregate(
        income=Sum('amount', filter=Q(kind=LedgerEntry.Kind.INCOME)),
        expense=Sum('amount', filter=Q(kind=LedgerEntry.Kind.EXPENSE)),
        pending_payments=Sum('amount', filter=Q(
            kind=LedgerEntry.Kind.INCOME,
            student__isnull=False,
            confirmation_status=LedgerEntry.Confirmation.PENDING,
        )),
    )
    income = totals['income'] or Decimal('0.00')
    expense = totals['expense'] or Decimal('0.00')

    paginator = Paginator(entries, 25)
    page = paginator.get_page(request.GET.get('page'))

    return JsonResponse({
        'entries': [entry.to_dict() for entry in page],
        'page': page.number,
        'num_pages': paginator.num_pages,
        'count': paginator.count,
        'totals': {
            'income': income,
            'expense': expense,
            'balance': income - expense,
            'pending_payments': totals['pending_payments'] or Decimal('0.00'),
        },
    })


@require_POST
@role_required('treasurer')
def entry_create(request):
    """Record a new income or expense."""
    try:
        data = _json_or_post(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    form = LedgerEntryForm(data)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    entry = form.save(commit=False)
    entry.recorded_by = request.user
    entry.save()

    logger.info(f"Ledger entry {entry.reference} ({entry.kind} {entry.amount}) recorded by {request.user}")

    if entry.kind == LedgerEntry.Kind.INCOME and entry.student_id and entry.student.user_id:
        notify(
            entry.student.user,
            'Payment recorded',
            f"{entry.get_category_display()}: {entry.amount} received ({entry.reference}).",
            kind=Notification.Kind.FINANCE,
        )

    return JsonResponse(entry.to_dict(), status=201)


@require_POST
@role_required('treasurer')
def payment_confirm(request, pk):
    """Confirm a pending student payment."""
    get_object_or_404(LedgerEntry, pk=pk)
    try:
        entry = confirm_payment(pk, request.user)
    except ValidationError as e:
        return JsonResponse({'error': ' '.join(e.messages)}, status=409)
    return JsonResponse(entry.to_dict())


@require_POST
@role_required('treasurer')
def payment_reject(request, pk):
    """Reject a pending student payment; a reason is required."""
    get_object_or_404(LedgerEntry, pk=pk)
    try:
        data = _json_or_post(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    form = PaymentRejectionForm(data)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    try:
        entry = reject_payment(pk, request.user, form.cleaned_data['reason'])
    except ValidationError as e:
        return JsonResponse({'error': ' '.join(e.messages)}, status=409)
    return JsonResponse(entry.to_dict())
