import json
import logging
from functools import wraps

from django.core.cache import cache
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from academics.models import Class, ClassSubject
from core.models import AcademicYear, Term
from core.utils import admin_required, has_any_role, is_school_admin, role_required
from students.models import Student

from .forms import AssessmentRecordForm
from .models import AssessmentRecord
from .services import class_summary, student_annual_report

logger = logging.getLogger(__name__)


def ratelimit(key='user', rate='100/h', block=True):
    """
    Simple cache-based rate limiter decorator.

    Args:
        key: 'user' for user-based, 'ip' for IP-based limiting
        rate: Format "number/period" where period is s/m/h/d (second/minute/hour/day)
        block: If True, return 429 error; if False, just log warning
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            try:
                limit, period = rate.split('/')
                limit = int(limit)
                period_seconds = {
                    's': 1, 'm': 60, 'h': 3600, 'd': 86400
                }.get(period, 3600)
            except (ValueError, AttributeError):
                limit, period_seconds = 100, 3600

            if key == 'user' and request.user.is_authenticated:
                cache_key = f"ratelimit:{view_func.__name__}:user:{request.user.pk}"
            else:
                cache_key = f"ratelimit:{view_func.__name__}:ip:{get_client_ip(request)}"

            # Atomically create the key if it doesn't exist
            if not cache.add(cache_key, 1, period_seconds):
                try:
                    current = cache.incr(cache_key)
                except ValueError:
                    # Key expired between add and incr, recreate
                    cache.set(cache_key, 1, period_seconds)
                    current = 1

                if current > limit:
                    logger.warning(f"Rate limit exceeded for {cache_key}")
                    if block:
                        return JsonResponse(
                            {'error': 'Too many requests. Please try again later.'},
                            status=429
                        )

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def can_edit_scores(user, student, subject):
    """
    Check if a user can enter scores for a student in a subject.

    Returns True if:
    - User is superuser or school admin
    - User is the teacher assigned to this subject for the student's class
    """
    if is_school_admin(user):
        return True
    if not getattr(user, 'is_teacher', False) or not student.current_class_id:
        return False
    return ClassSubject.objects.filter(
        class_assigned_id=student.current_class_id,
        subject=subject,
        teacher=user
    ).exists()


def _request_data(request):
    if request.content_type == 'application/json':
        data = json.loads(request.body or '{}')
        if not isinstance(data, dict):
            raise ValueError('Expected a JSON object')
        return data
    return request.POST


def _record_json(record, created=False):
    return {
        'id': record.pk,
        'student': record.student_id,
        'subject': record.subject_id,
        'term': record.term_id,
        'as1': record.as1,
        'as2': record.as2,
        'as3': record.as3,
        'at': record.at,
        'systematic_average': record.systematic_average,
        'term_average': record.term_average,
        'remarks': record.remarks,
        'created': created,
    }


@require_POST
@role_required('teacher')
@ratelimit(key='user', rate='600/h')
def record_save(request):
    """
    Create or update the scores of one student for a subject and term.

    Responds with the stored record including its derived averages.
    """
    try:
        data = _request_data(request)
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON body.'}, status=400)

    try:
        student = get_object_or_404(Student, pk=int(data.get('student')))
        term_id = int(data.get('term'))
        subject_id = int(data.get('subject'))
    except (TypeError, ValueError):
        return JsonResponse({'errors': {'__all__': ['student, subject and term are required.']}}, status=400)

    existing = AssessmentRecord.objects.filter(
        student=student, subject_id=subject_id, term_id=term_id
    ).first()

    form = AssessmentRecordForm(data, instance=existing)
    if not form.is_valid():
        if form.has_error('__all__', code='locked'):
            return JsonResponse({'error': 'Grades are locked for this term.'}, status=423)
        return JsonResponse({'errors': form.errors}, status=400)

    if not can_edit_scores(request.user, student, form.cleaned_data['subject']):
        logger.warning(f"{request.user} tried to edit scores for {student} without an allocation")
        return JsonResponse({'error': 'You are not authorized to edit scores for this subject.'}, status=403)

    with transaction.atomic():
        # Re-check grade lock inside transaction with row lock
        term = Term.objects.select_for_update().get(pk=form.cleaned_data['term'].pk)
        if term.grades_locked:
            return JsonResponse({'error': 'Grades are locked for this term.'}, status=423)

        record = form.save(commit=False)
        record.recorded_by = request.user
        record.save()

    logger.info(
        f"Scores saved for {student} in {record.subject} ({term.name}) by {request.user}: "
        f"MAS={record.systematic_average} MT={record.term_average}"
    )
    return JsonResponse(_record_json(record, created=existing is None), status=201 if existing is None else 200)


@require_GET
@role_required('teacher', 'secretary', 'student')
def student_report(request, student_id, year_id):
    """Annual report for a student; students may only read their own."""
    student = get_object_or_404(Student, pk=student_id)
    academic_year = get_object_or_404(AcademicYear, pk=year_id)

    if not has_any_role(request.user, 'teacher', 'secretary') and student.user_id != request.user.pk:
        return JsonResponse({'error': "You don't have permission to view this report."}, status=403)

    return JsonResponse(student_annual_report(student, academic_year))


@require_GET
@role_required('teacher')
def class_overview(request, class_id):
    """Class summary for the class director, subject teachers and admins."""
    class_obj = get_object_or_404(Class, pk=class_id)
    return JsonResponse(class_summary(class_obj))


@require_POST
@admin_required
def toggle_grade_lock(request, term_id):
    """Toggle grade lock status for a term."""
    term = get_object_or_404(Term, pk=term_id)

    if term.grades_locked:
        term.unlock_grades()
        message = f"Grades unlocked for {term.name}"
    else:
        term.lock_grades(request.user)
        message = f"Grades locked for {term.name}"

    logger.info(f"{message} by {request.user}")
    return JsonResponse({
        'term': term.pk,
        'grades_locked': term.grades_locked,
        'message': message,
    })
