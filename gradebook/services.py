"""
Annual roll-ups built on the stored term averages.

These read AssessmentRecord rows and hand the numbers to the pure
functions in :mod:`gradebook.calculations`; nothing here writes scores
except ``recalculate_records``.
"""
import logging
from collections import defaultdict

from . import config
from .calculations import (
    AcademicStatus,
    UnknownGradeLevel,
    check_grade_level,
    classify_status,
    compute_final_average,
)
from .models import AssessmentRecord
from .signals import signals_disabled

logger = logging.getLogger(__name__)


def grade_level_for(student, academic_year):
    """
    Grade level the student is enrolled in for ``academic_year``.

    Uses the approved enrollment's class, falling back to the current class
    when it belongs to that year.
    """
    from students.models import Enrollment

    enrollment = Enrollment.objects.filter(
        student=student,
        academic_year=academic_year,
        status=Enrollment.Status.APPROVED,
        class_assigned__isnull=False,
    ).select_related('class_assigned').first()
    if enrollment:
        return enrollment.class_assigned.grade_level

    current_class = student.current_class
    if current_class and current_class.academic_year_id == academic_year.pk:
        return current_class.grade_level
    return None


def grade_level_error(grade_level):
    """
    Message describing why ``grade_level`` cannot be classified, or ``None``.

    A class saved without validation, or settings narrowed after classes
    exist, can leave a level the status rules do not know. Reports still
    render; the message is returned for the caller to surface.
    """
    if grade_level is None:
        return None
    try:
        check_grade_level(grade_level)
    except UnknownGradeLevel as e:
        logger.warning(f"Cannot classify status: {e}")
        return str(e)
    return None


def _status_or_none(final_average, grade_level):
    if final_average is None or grade_level is None:
        return None
    try:
        return classify_status(final_average, grade_level)
    except UnknownGradeLevel:
        return None


def _subject_result(subject, records, grade_level, configuration_error=None):
    terms = {record.term.term_number: record.term_average for record in records}
    term_averages = [value for value in terms.values() if value is not None]
    final_average = compute_final_average(term_averages)
    return {
        'subject_id': subject.pk,
        'subject': subject.name,
        'terms': terms,
        'final_average': final_average,
        'status': _status_or_none(final_average, grade_level),
        'complete': len(term_averages) >= config.TERMS_PER_YEAR,
        'configuration_error': configuration_error,
    }


def subject_result(student, subject, academic_year, grade_level=None):
    """Term averages, final average and status for one subject over a year."""
    if grade_level is None:
        grade_level = grade_level_for(student, academic_year)
    configuration_error = grade_level_error(grade_level)
    records = AssessmentRecord.objects.filter(
        student=student,
        subject=subject,
        term__academic_year=academic_year,
    ).select_related('term')
    return _subject_result(subject, list(records), grade_level, configuration_error)


def student_annual_report(student, academic_year):
    """
    Report card data for a student's year: one result per subject with
    records, the overall mean of the subject final averages and its status.
    """
    grade_level = grade_level_for(student, academic_year)
    configuration_error = grade_level_error(grade_level)

    records = AssessmentRecord.objects.filter(
        student=student,
        term__academic_year=academic_year,
    ).select_related('subject', 'term').order_by('subject__name', 'term__term_number')

    by_subject = defaultdict(list)
    subjects = {}
    for record in records:
        by_subject[record.subject_id].append(record)
        subjects[record.subject_id] = record.subject

    results = [
        _subject_result(subjects[subject_id], subject_records, grade_level, configuration_error)
        for subject_id, subject_records in by_subject.items()
    ]
    final_average = compute_final_average(r['final_average'] for r in results)

    return {
        'student_id': student.pk,
        'student': student.full_name,
        'admission_number': student.admission_number,
        'academic_year': str(academic_year),
        'grade_level': grade_level,
        'subjects': results,
        'final_average': final_average,
        'status': _status_or_none(final_average, grade_level),
        'configuration_error': configuration_error,
    }


def class_summary(class_obj):
    """
    Class director overview: gender counts, each student's overall average
    and status, status counts and per-subject class averages.

    A student is counted as pending until every subject with records has a
    term average for each term of the year.
    When the class's grade level cannot be classified every student is
    left without a status and ``configuration_error`` says why.
    """
    from students.models import Student

    students = list(
        class_obj.students.filter(status=Student.Status.ACTIVE).order_by('last_name', 'first_name')
    )
    records = AssessmentRecord.objects.filter(
        student__in=students,
        term__academic_year_id=class_obj.academic_year_id,
    ).select_related('subject', 'term')

    by_student = defaultdict(lambda: defaultdict(list))
    subject_averages = defaultdict(list)
    subjects = {}
    for record in records:
        by_student[record.student_id][record.subject_id].append(record)
        subjects[record.subject_id] = record.subject
        if record.term_average is not None:
            subject_averages[record.subject_id].append(record.term_average)

    configuration_error = grade_level_error(class_obj.grade_level)

    status_counts = {'pending': 0}
    status_counts.update({status.value: 0 for status in _status_choices(class_obj)})
    gender_counts = {Student.Gender.MALE.value: 0, Student.Gender.FEMALE.value: 0}

    rows = []
    for student in students:
        gender_counts[student.gender] = gender_counts.get(student.gender, 0) + 1
        results = [
            _subject_result(
                subjects[subject_id], subject_records, class_obj.grade_level, configuration_error
            )
            for subject_id, subject_records in by_student[student.pk].items()
        ]
        final_average = compute_final_average(r['final_average'] for r in results)
        pending = not results or not all(r['complete'] for r in results)
        status = None if pending else _status_or_none(final_average, class_obj.grade_level)

        status_counts['pending' if status is None else status.value] += 1
        rows.append({
            'student_id': student.pk,
            'student': student.full_name,
            'gender': student.gender,
            'final_average': final_average,
            'status': status,
        })

    return {
        'class_id': class_obj.pk,
        'class': class_obj.name,
        'grade_level': class_obj.grade_level,
        'configuration_error': configuration_error,
        'total_students': len(students),
        'gender_counts': gender_counts,
        'status_counts': status_counts,
        'class_average': compute_final_average(row['final_average'] for row in rows),
        'students': rows,
        'subjects': [
            {
                'subject_id': subject_id,
                'subject': subjects[subject_id].name,
                'average': compute_final_average(averages),
            }
            for subject_id, averages in sorted(
                subject_averages.items(), key=lambda item: subjects[item[0]].name
            )
        ],
    }


def _status_choices(class_obj):
    if class_obj.is_exam_bearing:
        return [AcademicStatus.APPROVED, AcademicStatus.EXAM_REQUIRED, AcademicStatus.FAILED]
    return [AcademicStatus.APPROVED, AcademicStatus.PROGRESSES, AcademicStatus.RETAINED]


def recalculate_records(queryset=None):
    """
    Re-derive MAS and MT for stored records, e.g. after the weights change.

    Notifications are suppressed while the records are rewritten.
    """
    if queryset is None:
        queryset = AssessmentRecord.objects.all()

    changed = 0
    with signals_disabled():
        for record in queryset.iterator():
            before = (record.systematic_average, record.term_average)
            record.derive_averages()
            if (record.systematic_average, record.term_average) != before:
                record.save(update_fields=['systematic_average', 'term_average'])
                changed += 1

    logger.info(f"Recalculated averages: {changed} record(s) changed")
    return changed
