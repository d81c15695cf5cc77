import json
from datetime import date

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.urls import reverse

from academics.models import Class
from communications.models import EmailMessage, Notification
from core.models import AcademicYear
from students.forms import EnrollmentDecisionForm
from students.models import Enrollment, Student
from students.services import decide_enrollments

User = get_user_model()


class EnrollmentTestCase(TestCase):
    """Base test case with an academic year, classes and pending enrollments."""

    def setUp(self):
        self.secretary = User.objects.create_secretary(email='secretary@school.com', password='testpass123')
        self.year = AcademicYear.objects.create(
            name='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
            is_current=True,
        )
        self.other_year = AcademicYear.objects.create(
            name='2025/2026',
            start_date=date(2025, 9, 1),
            end_date=date(2026, 7, 31),
        )
        self.class_10a = Class.objects.create(academic_year=self.year, grade_level=10, section='A')
        self.class_next = Class.objects.create(academic_year=self.other_year, grade_level=11, section='A')

        self.enrollments = [
            self._create_enrollment(n) for n in range(1, 4)
        ]

    def _create_enrollment(self, n, **kwargs):
        user = User.objects.create_student(email=f'student{n}@school.com', password='testpass123')
        student = Student.objects.create(
            first_name=f'Student{n}',
            last_name='Test',
            date_of_birth=date(2009, 1, n),
            gender=Student.Gender.FEMALE if n % 2 else Student.Gender.MALE,
            guardian_name=f'Guardian {n}',
            guardian_phone='923000000',
            guardian_email=f'guardian{n}@example.com',
            admission_number=f'2024{n:03d}',
            admission_date=date(2024, 9, 1),
            user=user,
        )
        defaults = {'student': student, 'academic_year': self.year}
        defaults.update(kwargs)
        return Enrollment.objects.create(**defaults)


class DecideEnrollmentsTests(EnrollmentTestCase):

    def test_approve_sets_status_and_class(self):
        ids = [e.pk for e in self.enrollments]
        result = decide_enrollments(ids, 'approve', class_assigned=self.class_10a, decided_by=self.secretary)

        self.assertEqual(result.updated, ids)
        self.assertEqual(result.failed, [])
        for enrollment in Enrollment.objects.filter(pk__in=ids):
            self.assertEqual(enrollment.status, Enrollment.Status.APPROVED)
            self.assertEqual(enrollment.class_assigned, self.class_10a)
            self.assertEqual(enrollment.decided_by, self.secretary)
            self.assertIsNotNone(enrollment.decided_at)
            self.assertEqual(enrollment.student.current_class, self.class_10a)

    def test_approve_without_class_keeps_class_empty(self):
        enrollment = self.enrollments[0]
        result = decide_enrollments([enrollment.pk], 'approve')

        self.assertTrue(result.ok)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, Enrollment.Status.APPROVED)
        self.assertIsNone(enrollment.class_assigned)

    def test_reject_maps_to_cancelled(self):
        enrollment = self.enrollments[0]
        decide_enrollments([enrollment.pk], 'reject', remarks='Missing documents')

        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, Enrollment.Status.CANCELLED)
        self.assertEqual(enrollment.remarks, 'Missing documents')
        self.assertIsNone(enrollment.student.current_class)

    def test_partial_failure_keeps_other_updates(self):
        decided = self.enrollments[1]
        decided.status = Enrollment.Status.APPROVED
        decided.save()
        ids = [self.enrollments[0].pk, decided.pk, 99999, self.enrollments[2].pk]

        result = decide_enrollments(ids, 'reject')

        self.assertEqual(result.updated, [self.enrollments[0].pk, self.enrollments[2].pk])
        self.assertEqual([pk for pk, _ in result.failed], [decided.pk, 99999])
        self.assertEqual(
            Enrollment.objects.filter(status=Enrollment.Status.CANCELLED).count(), 2
        )
        decided.refresh_from_db()
        self.assertEqual(decided.status, Enrollment.Status.APPROVED)

    def test_class_from_another_year_fails(self):
        enrollment = self.enrollments[0]
        result = decide_enrollments([enrollment.pk], 'approve', class_assigned=self.class_next)

        self.assertEqual(result.updated, [])
        self.assertEqual(len(result.failed), 1)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, Enrollment.Status.PENDING)

    def test_unknown_decision_raises(self):
        with self.assertRaises(ValueError):
            decide_enrollments([self.enrollments[0].pk], 'maybe')

    def test_decision_notifies_student_and_emails_guardian(self):
        enrollment = self.enrollments[0]
        decide_enrollments([enrollment.pk], 'approve', class_assigned=self.class_10a, decided_by=self.secretary)

        notification = Notification.objects.get(recipient=enrollment.student.user)
        self.assertEqual(notification.kind, Notification.Kind.ENROLLMENT)
        self.assertIn('10-A', notification.message)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['guardian1@example.com'])
        self.assertEqual(EmailMessage.objects.get().status, EmailMessage.Status.SENT)

    def test_failed_records_send_nothing(self):
        decide_enrollments([99999], 'approve')
        self.assertEqual(Notification.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_result_to_dict(self):
        result = decide_enrollments([self.enrollments[0].pk, 424242], 'reject')
        data = result.to_dict()
        self.assertEqual(data['updated'], [self.enrollments[0].pk])
        self.assertEqual(data['failed'][0]['id'], 424242)


class EnrollmentDecisionFormTests(EnrollmentTestCase):

    def test_parses_and_deduplicates_ids(self):
        form = EnrollmentDecisionForm({'enrollment_ids': '3, 1,3', 'decision': 'approve'})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['enrollment_ids'], [3, 1])

    def test_rejects_non_integer_ids(self):
        form = EnrollmentDecisionForm({'enrollment_ids': '1,abc', 'decision': 'approve'})
        self.assertFalse(form.is_valid())
        self.assertIn('enrollment_ids', form.errors)

    def test_class_only_on_approve(self):
        form = EnrollmentDecisionForm({
            'enrollment_ids': '1',
            'decision': 'reject',
            'class_assigned': self.class_10a.pk,
        })
        self.assertFalse(form.is_valid())


class EnrollmentDecideViewTests(EnrollmentTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('students:enrollment_decide')

    def test_requires_login(self):
        response = self.client.post(self.url, {'enrollment_ids': '1', 'decision': 'approve'})
        self.assertEqual(response.status_code, 401)

    def test_teacher_forbidden(self):
        User.objects.create_teacher(email='teacher@school.com', password='testpass123')
        self.client.login(email='teacher@school.com', password='testpass123')
        response = self.client.post(self.url, {'enrollment_ids': '1', 'decision': 'approve'})
        self.assertEqual(response.status_code, 403)

    def test_get_not_allowed(self):
        self.client.login(email='secretary@school.com', password='testpass123')
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 405)

    def test_json_body(self):
        self.client.login(email='secretary@school.com', password='testpass123')
        ids = [e.pk for e in self.enrollments]
        response = self.client.post(
            self.url,
            data=json.dumps({'enrollment_ids': ids + [99999], 'decision': 'approve', 'class_assigned': self.class_10a.pk}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['updated'], ids)
        self.assertEqual(data['failed'], [{'id': 99999, 'reason': 'Enrollment not found.'}])

    def test_invalid_form_returns_errors(self):
        self.client.login(email='secretary@school.com', password='testpass123')
        response = self.client.post(self.url, {'enrollment_ids': '', 'decision': 'approve'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('enrollment_ids', response.json()['errors'])
