"""
Named aggregate queries ("procedures") callable by name.

Dashboards and reports ask for school-wide numbers by name instead of
building the queries themselves:

    call_procedure('school_statistics')
    call_procedure('students_per_grade_level', academic_year_id=3)

New procedures are added with the ``@procedure`` decorator.
"""
import logging
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.utils import timezone

logger = logging.getLogger(__name__)

_registry = {}


class UnknownProcedure(LookupError):
    """Raised when no procedure is registered under the requested name."""


def procedure(name):
    """Register a function as a named procedure."""
    def decorator(func):
        _registry[name] = func
        return func
    return decorator


def available_procedures():
    return sorted(_registry)


def call_procedure(name, **params):
    """Run the procedure registered under ``name`` with keyword ``params``."""
    try:
        func = _registry[name]
    except KeyError:
        raise UnknownProcedure(f"Unknown procedure: {name}") from None

    logger.debug(f"Calling procedure {name} with {params}")
    return func(**params)


@procedure('school_statistics')
def school_statistics():
    """Head counts shown on the administration dashboard."""
    from django.contrib.auth import get_user_model
    from students.models import Student
    from academics.models import Class, Subject

    User = get_user_model()
    staff = User.objects.filter(is_active=True).aggregate(
        teachers=Count('id', filter=Q(is_teacher=True)),
        employees=Count('id', filter=Q(is_employee=True)),
    )

    return {
        'total_students': Student.objects.filter(status=Student.Status.ACTIVE).count(),
        'total_teachers': staff['teachers'],
        'total_employees': staff['employees'],
        'total_classes': Class.objects.filter(is_active=True).count(),
        'total_subjects': Subject.objects.filter(is_active=True).count(),
    }


@procedure('financial_summary')
def financial_summary():
    """Ledger totals overall and for the current calendar month."""
    from finance.models import LedgerEntry

    today = timezone.localdate()
    in_month = Q(date__year=today.year, date__month=today.month)
    income = Q(kind=LedgerEntry.Kind.INCOME)
    expense = Q(kind=LedgerEntry.Kind.EXPENSE)

    totals = LedgerEntry.objects.aggregate(
        total_income=Sum('amount', filter=income),
        total_expense=Sum('amount', filter=expense),
        income_current_month=Sum('amount', filter=income & in_month),
        expense_current_month=Sum('amount', filter=expense & in_month),
    )
    totals = {key: value or Decimal('0.00') for key, value in totals.items()}
    totals['balance'] = totals['total_income'] - totals['total_expense']
    return totals


@procedure('students_per_grade_level')
def students_per_grade_level(academic_year_id=None):
    """Active students grouped by the grade level of their current class."""
    from students.models import Student

    students = Student.objects.filter(
        status=Student.Status.ACTIVE,
        current_class__isnull=False,
    )
    if academic_year_id is not None:
        students = students.filter(current_class__academic_year_id=academic_year_id)

    rows = students.values('current_class__grade_level').annotate(
        total=Count('id')
    ).order_by('current_class__grade_level')

    return [
        {'grade_level': row['current_class__grade_level'], 'total': row['total']}
        for row in rows
    ]
