import json
from datetime import date
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse

from academics.models import Class, ClassSubject, Subject
from communications.models import Notification
from core.models import AcademicYear, Term
from students.models import Student

from .calculations import (
    AcademicStatus,
    GradeCalculationError,
    InvalidScore,
    UnknownGradeLevel,
    classify_status,
    compute_final_average,
    compute_systematic_average,
    compute_term_average,
)
from .forms import AssessmentRecordForm
from .models import AssessmentRecord
from .services import class_summary, recalculate_records, student_annual_report, subject_result
from .signals import signals_disabled

User = get_user_model()


class SystematicAverageTest(SimpleTestCase):
    """Tests for compute_systematic_average."""

    def test_no_scores_is_none(self):
        self.assertIsNone(compute_systematic_average())
        self.assertIsNone(compute_systematic_average(None, None, None))

    def test_single_score(self):
        self.assertEqual(compute_systematic_average(10), Decimal('10'))

    def test_two_scores(self):
        self.assertEqual(compute_systematic_average(10, 20), Decimal('15'))

    def test_three_scores(self):
        self.assertEqual(compute_systematic_average(12, 14, 16), Decimal('14'))

    def test_exact_mean_has_no_float_drift(self):
        self.assertEqual(compute_systematic_average(10, 11, 12), Decimal('11.00'))

    def test_rounds_to_two_places(self):
        self.assertEqual(compute_systematic_average(10, 10, 11), Decimal('10.33'))

    def test_rounds_half_up(self):
        # 10.125 -> 10.13 (banker's rounding would give 10.12)
        self.assertEqual(compute_systematic_average(Decimal('10.25'), 10), Decimal('10.13'))

    def test_missing_scores_are_skipped_not_zero(self):
        self.assertEqual(compute_systematic_average(None, 12, None), Decimal('12'))
        self.assertEqual(compute_systematic_average(0, None, None), Decimal('0'))

    def test_accepts_floats_and_strings(self):
        self.assertEqual(compute_systematic_average(10.5, '9.5'), Decimal('10.00'))

    def test_out_of_range_raises(self):
        with self.assertRaises(InvalidScore):
            compute_systematic_average(21)
        with self.assertRaises(InvalidScore):
            compute_systematic_average(10, -1)

    def test_non_numeric_raises(self):
        for value in ('abc', True, float('nan'), float('inf')):
            with self.subTest(value=value):
                with self.assertRaises(InvalidScore):
                    compute_systematic_average(value)

    def test_boundaries_are_accepted(self):
        self.assertEqual(compute_systematic_average(0, 20), Decimal('10'))

    def test_idempotent(self):
        self.assertEqual(
            compute_systematic_average(13, 17, 9),
            compute_systematic_average(13, 17, 9),
        )


class TermAverageTest(SimpleTestCase):
    """Tests for compute_term_average."""

    def test_neither_component(self):
        self.assertIsNone(compute_term_average(None, None))

    def test_only_systematic_average(self):
        self.assertEqual(compute_term_average(10, None), Decimal('10'))

    def test_only_exam(self):
        self.assertEqual(compute_term_average(None, 16), Decimal('16'))

    def test_weighted_combination(self):
        # 10 * 0.4 + 16 * 0.6
        self.assertEqual(compute_term_average(10, 16), Decimal('13.60'))
        self.assertEqual(compute_term_average(Decimal('10.33'), 12), Decimal('11.33'))

    def test_result_is_rounded(self):
        self.assertEqual(compute_term_average(Decimal('10.33'), Decimal('10.33')), Decimal('10.33'))

    def test_single_component_is_rounded(self):
        self.assertEqual(compute_term_average(Decimal('10.333'), None), Decimal('10.33'))
        self.assertEqual(compute_term_average(None, Decimal('15.555')), Decimal('15.56'))

    def test_idempotent(self):
        self.assertEqual(compute_term_average(Decimal('10.33'), 12), compute_term_average(Decimal('10.33'), 12))
        self.assertEqual(compute_term_average(None, 16), compute_term_average(None, 16))

    def test_invalid_component_raises(self):
        with self.assertRaises(InvalidScore):
            compute_term_average(10, 25)
        with self.assertRaises(InvalidScore):
            compute_term_average(-0.01, 10)

    @override_settings(GRADEBOOK_SYSTEMATIC_WEIGHT=Decimal('0.5'), GRADEBOOK_EXAM_WEIGHT=Decimal('0.5'))
    def test_weights_from_settings(self):
        self.assertEqual(compute_term_average(10, 16), Decimal('13'))


class FinalAverageTest(SimpleTestCase):

    def test_mean_of_present_terms(self):
        self.assertEqual(compute_final_average([12, None, 15]), Decimal('13.50'))

    def test_no_terms(self):
        self.assertIsNone(compute_final_average([]))
        self.assertIsNone(compute_final_average([None, None]))

    def test_accepts_generators(self):
        self.assertEqual(compute_final_average(x for x in (10, 10, 11)), Decimal('10.33'))


class ClassifyStatusTest(SimpleTestCase):
    """Tests for classify_status with the default exam-bearing levels (9, 10, 12)."""

    def test_exam_bearing_levels(self):
        self.assertEqual(classify_status(10, 9), AcademicStatus.APPROVED)
        self.assertEqual(classify_status(Decimal('9.99'), 9), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(7, 9), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(Decimal('6.99'), 9), AcademicStatus.FAILED)

    def test_non_exam_levels(self):
        self.assertEqual(classify_status(10, 11), AcademicStatus.APPROVED)
        self.assertEqual(classify_status(8, 11), AcademicStatus.PROGRESSES)
        self.assertEqual(classify_status(7, 11), AcademicStatus.PROGRESSES)
        self.assertEqual(classify_status(Decimal('6.99'), 11), AcademicStatus.RETAINED)

    def test_all_default_exam_levels(self):
        for level in (9, 10, 12):
            with self.subTest(level=level):
                self.assertEqual(classify_status(8, level), AcademicStatus.EXAM_REQUIRED)

    def test_float_boundaries(self):
        self.assertEqual(classify_status(9.99, 12), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(6.99, 7), AcademicStatus.RETAINED)

    def test_extremes(self):
        self.assertEqual(classify_status(20, 10), AcademicStatus.APPROVED)
        self.assertEqual(classify_status(0, 10), AcademicStatus.FAILED)
        self.assertEqual(classify_status(0, 8), AcademicStatus.RETAINED)

    def test_explicit_exam_levels(self):
        self.assertEqual(classify_status(8, 11, exam_grade_levels={11}), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(8, 9, exam_grade_levels=set()), AcademicStatus.PROGRESSES)

    @override_settings(GRADEBOOK_EXAM_GRADE_LEVELS=frozenset({6, 9, 12}))
    def test_exam_levels_from_settings(self):
        self.assertEqual(classify_status(8, 6), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(8, 10), AcademicStatus.PROGRESSES)

    @override_settings(GRADEBOOK_PASS_MARK=Decimal('12'), GRADEBOOK_EXAM_MARK=Decimal('8'))
    def test_thresholds_from_settings(self):
        self.assertEqual(classify_status(11, 9), AcademicStatus.EXAM_REQUIRED)
        self.assertEqual(classify_status(Decimal('7.99'), 11), AcademicStatus.RETAINED)

    def test_unknown_grade_level(self):
        for level in (0, 14, -1, '9', None, 9.0):
            with self.subTest(level=level):
                with self.assertRaises(UnknownGradeLevel):
                    classify_status(10, level)

    def test_invalid_average(self):
        with self.assertRaises(InvalidScore):
            classify_status(20.01, 9)
        with self.assertRaises(InvalidScore):
            classify_status(None, 9)

    def test_errors_are_value_errors(self):
        self.assertTrue(issubclass(InvalidScore, GradeCalculationError))
        self.assertTrue(issubclass(UnknownGradeLevel, GradeCalculationError))
        self.assertTrue(issubclass(GradeCalculationError, ValueError))

    def test_idempotent(self):
        self.assertEqual(classify_status(Decimal('8.5'), 10), classify_status(Decimal('8.5'), 10))


class GradebookTestCase(TestCase):
    """Base test case with a year, three terms, a class 10-A and two subjects."""

    def setUp(self):
        self.admin = User.objects.create_school_admin(email='admin@school.com', password='testpass123')
        self.teacher = User.objects.create_teacher(email='teacher@school.com', password='testpass123')
        self.year = AcademicYear.objects.create(
            name='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
            is_current=True,
        )
        self.terms = [
            Term.objects.create(
                academic_year=self.year,
                name=f'{n}º Trimestre',
                term_number=n,
                start_date=date(2024 + (n > 1), (9, 1, 4)[n - 1], 1),
                end_date=date(2024 + (n > 1), (12, 3, 7)[n - 1], 28),
            )
            for n in (1, 2, 3)
        ]
        self.class_10a = Class.objects.create(
            academic_year=self.year, grade_level=10, section='A', class_teacher=self.teacher
        )
        self.math = Subject.objects.create(name='Matemática', code='MAT')
        self.physics = Subject.objects.create(name='Física', code='FIS')
        ClassSubject.objects.create(class_assigned=self.class_10a, subject=self.math, teacher=self.teacher)

        self.student_user = User.objects.create_student(email='ana@school.com', password='testpass123')
        self.student = self._create_student('Ana', 'F', '2024001', user=self.student_user)

    def _create_student(self, name, gender, number, **kwargs):
        return Student.objects.create(
            first_name=name,
            last_name='Silva',
            date_of_birth=date(2009, 3, 10),
            gender=gender,
            guardian_name='Guardian',
            guardian_phone='923000000',
            admission_number=number,
            admission_date=date(2024, 9, 1),
            current_class=self.class_10a,
            **kwargs
        )

    def _record(self, student, subject, term_number, **scores):
        return AssessmentRecord.objects.create(
            student=student, subject=subject, term=self.terms[term_number - 1], **scores
        )


class AssessmentRecordModelTest(GradebookTestCase):

    def test_save_derives_averages(self):
        record = self._record(self.student, self.math, 1, as1=10, as2=10, as3=11, at=12)
        record.refresh_from_db()
        self.assertEqual(record.systematic_average, Decimal('10.33'))
        self.assertEqual(record.term_average, Decimal('11.33'))

    def test_edit_replaces_derived_values(self):
        record = self._record(self.student, self.math, 1, as1=10, at=16)
        self.assertEqual(record.term_average, Decimal('13.60'))

        record.at = None
        record.save()
        record.refresh_from_db()
        self.assertEqual(record.term_average, Decimal('10'))

    def test_update_fields_include_derived(self):
        record = self._record(self.student, self.math, 1, as1=10)
        record.as2 = 20
        record.save(update_fields=['as2'])
        record.refresh_from_db()
        self.assertEqual(record.systematic_average, Decimal('15'))

    def test_no_scores_leaves_averages_empty(self):
        record = self._record(self.student, self.math, 1)
        self.assertIsNone(record.systematic_average)
        self.assertIsNone(record.term_average)
        self.assertFalse(record.has_scores)

    def test_full_clean_rejects_out_of_range(self):
        record = AssessmentRecord(student=self.student, subject=self.math, term=self.terms[0], as1=Decimal('20.5'))
        with self.assertRaises(Exception) as ctx:
            record.full_clean()
        self.assertIn('as1', ctx.exception.message_dict)

    def test_unique_per_student_subject_term(self):
        self._record(self.student, self.math, 1, as1=10)
        with self.assertRaises(Exception):
            self._record(self.student, self.math, 1, as1=12)

    def test_academic_year(self):
        record = self._record(self.student, self.math, 2, at=10)
        self.assertEqual(record.academic_year, self.year)


class GradeNotificationSignalTest(GradebookTestCase):

    def test_term_average_notifies_student(self):
        self._record(self.student, self.math, 1, at=14)
        notification = Notification.objects.get(recipient=self.student_user)
        self.assertEqual(notification.kind, Notification.Kind.GRADE)
        self.assertIn('Matemática', notification.title)
        self.assertIn('14', notification.message)

    def test_no_notification_without_average(self):
        self._record(self.student, self.math, 1)
        self.assertFalse(Notification.objects.exists())

    def test_no_notification_without_user(self):
        other = self._create_student('Rui', 'M', '2024002')
        self._record(other, self.math, 1, at=10)
        self.assertFalse(Notification.objects.exists())

    def test_signals_disabled(self):
        with signals_disabled():
            self._record(self.student, self.math, 1, at=14)
        self.assertFalse(Notification.objects.exists())

    def test_changed_average_notifies_again(self):
        record = self._record(self.student, self.math, 1, at=14)
        record.at = 16
        record.save()
        titles = list(Notification.objects.values_list('title', flat=True).order_by('pk'))
        self.assertEqual(titles, ['Grade published: Matemática', 'Grade updated: Matemática'])

    def test_remarks_only_edit_does_not_notify(self):
        record = self._record(self.student, self.math, 1, at=14)
        record.remarks = 'Good progress'
        record.save()
        self.assertEqual(Notification.objects.count(), 1)


class AssessmentRecordFormTest(GradebookTestCase):

    def _data(self, **overrides):
        data = {
            'student': self.student.pk,
            'subject': self.math.pk,
            'term': self.terms[0].pk,
            'as1': '12', 'as2': '', 'as3': '', 'at': '14',
            'remarks': '',
        }
        data.update(overrides)
        return data

    def test_valid(self):
        form = AssessmentRecordForm(self._data())
        self.assertTrue(form.is_valid(), form.errors)
        record = form.save()
        self.assertEqual(record.term_average, Decimal('13.20'))

    def test_score_above_scale(self):
        form = AssessmentRecordForm(self._data(at='20.01'))
        self.assertFalse(form.is_valid())
        self.assertIn('at', form.errors)

    def test_negative_score(self):
        form = AssessmentRecordForm(self._data(as1='-1'))
        self.assertFalse(form.is_valid())
        self.assertIn('as1', form.errors)

    def test_locked_term(self):
        self.terms[0].lock_grades(self.admin)
        form = AssessmentRecordForm(self._data())
        self.assertFalse(form.is_valid())
        self.assertTrue(form.has_error('__all__', code='locked'))

    def test_new_record_needs_a_score(self):
        form = AssessmentRecordForm(self._data(as1='', at=''))
        self.assertFalse(form.is_valid())
        self.assertTrue(form.has_error('__all__', code='empty'))


class ServicesTest(GradebookTestCase):

    def setUp(self):
        super().setUp()
        for term_number, (math_at, physics_at) in enumerate([(12, 8), (14, 8), (16, 8)], start=1):
            self._record(self.student, self.math, term_number, at=math_at)
            self._record(self.student, self.physics, term_number, at=physics_at)

    def test_subject_result(self):
        result = subject_result(self.student, self.math, self.year)
        self.assertEqual(result['terms'], {1: Decimal('12'), 2: Decimal('14'), 3: Decimal('16')})
        self.assertEqual(result['final_average'], Decimal('14'))
        self.assertEqual(result['status'], AcademicStatus.APPROVED)
        self.assertTrue(result['complete'])

    def test_subject_result_exam_required_at_exam_level(self):
        result = subject_result(self.student, self.physics, self.year)
        self.assertEqual(result['status'], AcademicStatus.EXAM_REQUIRED)

    def test_subject_result_without_records(self):
        chemistry = Subject.objects.create(name='Química', code='QUI')
        result = subject_result(self.student, chemistry, self.year)
        self.assertIsNone(result['final_average'])
        self.assertIsNone(result['status'])
        self.assertFalse(result['complete'])

    def test_student_annual_report(self):
        report = student_annual_report(self.student, self.year)
        self.assertEqual(report['grade_level'], 10)
        self.assertEqual([s['subject'] for s in report['subjects']], ['Física', 'Matemática'])
        self.assertEqual(report['final_average'], Decimal('11'))
        self.assertEqual(report['status'], AcademicStatus.APPROVED)

    def test_report_without_class_has_no_status(self):
        self.student.current_class = None
        self.student.save()
        report = student_annual_report(self.student, self.year)
        self.assertIsNone(report['grade_level'])
        self.assertIsNone(report['status'])
        self.assertEqual(report['final_average'], Decimal('11'))

    def test_class_summary(self):
        other = self._create_student('Rui', 'M', '2024002')
        self._record(other, self.math, 1, at=10)

        summary = class_summary(self.class_10a)

        self.assertEqual(summary['total_students'], 2)
        self.assertEqual(summary['gender_counts'], {'M': 1, 'F': 1})
        self.assertEqual(summary['status_counts'], {
            'pending': 1, 'approved': 1, 'exam_required': 0, 'failed': 0,
        })
        rows = {row['student_id']: row for row in summary['students']}
        self.assertEqual(rows[self.student.pk]['status'], AcademicStatus.APPROVED)
        self.assertIsNone(rows[other.pk]['status'])
        self.assertEqual(rows[other.pk]['final_average'], Decimal('10'))
        self.assertEqual(summary['class_average'], Decimal('10.50'))
        self.assertEqual(summary['subjects'], [
            {'subject_id': self.physics.pk, 'subject': 'Física', 'average': Decimal('8')},
            {'subject_id': self.math.pk, 'subject': 'Matemática', 'average': Decimal('13')},
        ])

    def test_class_summary_non_exam_level_counts(self):
        class_7a = Class.objects.create(academic_year=self.year, grade_level=7, section='A')
        summary = class_summary(class_7a)
        self.assertEqual(summary['total_students'], 0)
        self.assertEqual(set(summary['status_counts']), {'pending', 'approved', 'progresses', 'retained'})
        self.assertIsNone(summary['class_average'])

    @override_settings(GRADEBOOK_GRADE_LEVELS=range(1, 10))
    def test_class_summary_with_unrecognised_level(self):
        summary = class_summary(self.class_10a)
        self.assertEqual(summary['configuration_error'], 'Grade level 10 is not recognised')
        self.assertIsNone(summary['students'][0]['status'])
        self.assertEqual(summary['students'][0]['final_average'], Decimal('11'))
        self.assertEqual(summary['status_counts']['pending'], 1)

    def test_report_with_unrecognised_level(self):
        # Saved without full_clean, so Class.clean never ran
        self.class_10a.grade_level = 14
        self.class_10a.save()

        report = student_annual_report(self.student, self.year)

        self.assertEqual(report['grade_level'], 14)
        self.assertIsNone(report['status'])
        self.assertEqual(report['final_average'], Decimal('11'))
        self.assertEqual(report['configuration_error'], 'Grade level 14 is not recognised')
        for result in report['subjects']:
            self.assertIsNone(result['status'])
            self.assertEqual(result['configuration_error'], 'Grade level 14 is not recognised')

    def test_report_has_no_configuration_error_for_known_level(self):
        report = student_annual_report(self.student, self.year)
        self.assertIsNone(report['configuration_error'])

    @override_settings(GRADEBOOK_SYSTEMATIC_WEIGHT=Decimal('0.5'), GRADEBOOK_EXAM_WEIGHT=Decimal('0.5'))
    def test_recalculate_records(self):
        record = AssessmentRecord.objects.get(student=self.student, subject=self.math, term=self.terms[0])
        record.as1 = 10
        with override_settings(GRADEBOOK_SYSTEMATIC_WEIGHT=Decimal('0.4'), GRADEBOOK_EXAM_WEIGHT=Decimal('0.6')):
            record.save()
        self.assertEqual(record.term_average, Decimal('11.20'))
        Notification.objects.all().delete()

        changed = recalculate_records()

        self.assertEqual(changed, 1)
        record.refresh_from_db()
        self.assertEqual(record.term_average, Decimal('11'))
        self.assertFalse(Notification.objects.exists())

    def test_recalculate_command(self):
        out = StringIO()
        call_command('recalculate_averages', '--term', str(self.terms[0].pk), stdout=out)
        self.assertIn('0 record(s) changed', out.getvalue())


class RecordSaveViewTest(GradebookTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('gradebook:record_save')
        self.client.login(email='teacher@school.com', password='testpass123')

    def _post(self, **overrides):
        data = {
            'student': self.student.pk,
            'subject': self.math.pk,
            'term': self.terms[0].pk,
            'as1': 10, 'as2': 10, 'as3': 11, 'at': 16,
        }
        data.update(overrides)
        return self.client.post(self.url, data=json.dumps(data), content_type='application/json')

    def test_create_returns_derived_averages(self):
        response = self._post()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(Decimal(data['systematic_average']), Decimal('10.33'))
        self.assertEqual(Decimal(data['term_average']), Decimal('13.73'))
        self.assertTrue(data['created'])

        record = AssessmentRecord.objects.get()
        self.assertEqual(record.recorded_by, self.teacher)

    def test_update_existing_record(self):
        self._post()
        response = self._post(as2=None, as3=None, at=None)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['created'])
        self.assertEqual(AssessmentRecord.objects.count(), 1)
        self.assertEqual(AssessmentRecord.objects.get().term_average, Decimal('10'))

    def test_invalid_score(self):
        response = self._post(at=21)
        self.assertEqual(response.status_code, 400)
        self.assertIn('at', response.json()['errors'])

    def test_locked_term(self):
        self.terms[0].lock_grades(self.admin)
        response = self._post()
        self.assertEqual(response.status_code, 423)
        self.assertFalse(AssessmentRecord.objects.exists())

    def test_teacher_without_allocation(self):
        response = self._post(subject=self.physics.pk)
        self.assertEqual(response.status_code, 403)

    def test_admin_can_enter_any_subject(self):
        self.client.login(email='admin@school.com', password='testpass123')
        response = self._post(subject=self.physics.pk)
        self.assertEqual(response.status_code, 201)

    def test_student_forbidden(self):
        self.client.login(email='ana@school.com', password='testpass123')
        self.assertEqual(self._post().status_code, 403)

    def test_missing_identifiers(self):
        response = self._post(student=None)
        self.assertEqual(response.status_code, 400)


class ReportViewsTest(GradebookTestCase):

    def setUp(self):
        super().setUp()
        self._record(self.student, self.math, 1, at=14)

    def test_student_reads_own_report(self):
        self.client.login(email='ana@school.com', password='testpass123')
        url = reverse('gradebook:student_report', args=[self.student.pk, self.year.pk])
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['subjects'][0]['subject'], 'Matemática')

    def test_student_cannot_read_other_report(self):
        other = self._create_student('Rui', 'M', '2024002')
        self.client.login(email='ana@school.com', password='testpass123')
        url = reverse('gradebook:student_report', args=[other.pk, self.year.pk])
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_unknown_year(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        url = reverse('gradebook:student_report', args=[self.student.pk, 9999])
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_class_summary(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        response = self.client.get(reverse('gradebook:class_summary', args=[self.class_10a.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status_counts']['pending'], 1)

    @override_settings(GRADEBOOK_GRADE_LEVELS=range(1, 10))
    def test_class_summary_with_unrecognised_level(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        response = self.client.get(reverse('gradebook:class_summary', args=[self.class_10a.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['configuration_error'], 'Grade level 10 is not recognised')

    def test_report_with_unrecognised_level(self):
        self.class_10a.grade_level = 14
        self.class_10a.save()
        self.client.login(email='ana@school.com', password='testpass123')
        url = reverse('gradebook:student_report', args=[self.student.pk, self.year.pk])
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['status'])
        self.assertEqual(response.json()['configuration_error'], 'Grade level 14 is not recognised')


class GradeLockViewTest(GradebookTestCase):

    def test_toggle(self):
        self.client.login(email='admin@school.com', password='testpass123')
        url = reverse('gradebook:toggle_grade_lock', args=[self.terms[0].pk])

        response = self.client.post(url)
        self.assertTrue(response.json()['grades_locked'])
        self.terms[0].refresh_from_db()
        self.assertEqual(self.terms[0].grades_locked_by, self.admin)

        response = self.client.post(url)
        self.assertFalse(response.json()['grades_locked'])

    def test_teacher_cannot_lock(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        url = reverse('gradebook:toggle_grade_lock', args=[self.terms[0].pk])
        self.assertEqual(self.client.post(url).status_code, 403)
