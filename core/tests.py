from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from academics.models import Class, Subject
from core.models import AcademicYear, Term
from core.procedures import UnknownProcedure, available_procedures, call_procedure
from finance.models import LedgerEntry
from students.models import Student

User = get_user_model()


class AcademicYearModelTests(TestCase):
    """Tests for the AcademicYear model."""

    def _create_year(self, **kwargs):
        defaults = {
            'name': '2024/2025',
            'start_date': date(2024, 9, 1),
            'end_date': date(2025, 7, 31),
            'is_current': False,
        }
        defaults.update(kwargs)
        return AcademicYear.objects.create(**defaults)

    def test_end_date_must_be_after_start_date(self):
        year = AcademicYear(name='bad', start_date=date(2025, 7, 31), end_date=date(2024, 9, 1))
        with self.assertRaises(ValidationError):
            year.full_clean()

    def test_only_one_current(self):
        ay1 = self._create_year(is_current=True)
        ay2 = self._create_year(
            name='2025/2026',
            start_date=date(2025, 9, 1),
            end_date=date(2026, 7, 31),
            is_current=True,
        )
        ay1.refresh_from_db()
        self.assertFalse(ay1.is_current)
        self.assertTrue(ay2.is_current)
        self.assertEqual(AcademicYear.get_current(), ay2)

    def test_get_current_none(self):
        self._create_year()
        self.assertIsNone(AcademicYear.get_current())


class TermModelTests(TestCase):
    """Tests for the Term model."""

    def setUp(self):
        self.ay = AcademicYear.objects.create(
            name='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
            is_current=True,
        )

    def _create_term(self, **kwargs):
        defaults = {
            'academic_year': self.ay,
            'name': '1º Trimestre',
            'term_number': 1,
            'start_date': date(2024, 9, 1),
            'end_date': date(2024, 12, 20),
        }
        defaults.update(kwargs)
        return Term.objects.create(**defaults)

    def test_str(self):
        self.assertEqual(str(self._create_term()), '1º Trimestre - 2024/2025')

    def test_only_one_current_term(self):
        t1 = self._create_term(is_current=True)
        t2 = self._create_term(name='2º Trimestre', term_number=2, is_current=True)
        t1.refresh_from_db()
        self.assertFalse(t1.is_current)
        self.assertEqual(Term.get_current(), t2)

    def test_lock_and_unlock_grades(self):
        term = self._create_term()
        user = User.objects.create_school_admin(email='admin@test.com', password='pass')

        term.lock_grades(user)
        term.refresh_from_db()
        self.assertTrue(term.grades_locked)
        self.assertIsNotNone(term.grades_locked_at)
        self.assertEqual(term.grades_locked_by, user)

        term.unlock_grades()
        term.refresh_from_db()
        self.assertFalse(term.grades_locked)
        self.assertIsNone(term.grades_locked_at)
        self.assertIsNone(term.grades_locked_by)


class ProcedureTests(TestCase):

    def setUp(self):
        self.ay = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31), is_current=True
        )
        self.class_9a = Class.objects.create(academic_year=self.ay, grade_level=9, section='A')
        self.class_10a = Class.objects.create(academic_year=self.ay, grade_level=10, section='A')
        Class.objects.create(academic_year=self.ay, grade_level=11, section='A', is_active=False)
        Subject.objects.create(name='Matemática', code='MAT')

        User.objects.create_teacher(email='t1@school.com', password='pass')
        User.objects.create_teacher(email='t2@school.com', password='pass')
        User.objects.create_user(email='e1@school.com', password='pass', is_employee=True)

        for n, klass in enumerate([self.class_9a, self.class_10a, self.class_10a], start=1):
            self._student(n, klass)
        self._student(4, self.class_10a, status=Student.Status.TRANSFERRED)

    def _student(self, n, klass, **kwargs):
        return Student.objects.create(
            first_name=f'S{n}', last_name='Test', date_of_birth=date(2010, 1, 1), gender='F',
            guardian_name='G', guardian_phone='9', admission_number=f'A{n}',
            admission_date=date(2024, 9, 1), current_class=klass, **kwargs
        )

    def test_registry(self):
        self.assertEqual(
            available_procedures(),
            ['financial_summary', 'school_statistics', 'students_per_grade_level'],
        )

    def test_unknown_procedure(self):
        with self.assertRaises(UnknownProcedure):
            call_procedure('drop_everything')

    def test_school_statistics(self):
        self.assertEqual(call_procedure('school_statistics'), {
            'total_students': 3,
            'total_teachers': 2,
            'total_employees': 1,
            'total_classes': 2,
            'total_subjects': 1,
        })

    def test_students_per_grade_level(self):
        self.assertEqual(call_procedure('students_per_grade_level', academic_year_id=self.ay.pk), [
            {'grade_level': 9, 'total': 1},
            {'grade_level': 10, 'total': 2},
        ])
        self.assertEqual(call_procedure('students_per_grade_level', academic_year_id=9999), [])

    def test_financial_summary(self):
        today = timezone.localdate()
        last_year = date(today.year - 1, today.month, 1)
        LedgerEntry.objects.create(kind='income', amount=Decimal('1000'), description='a', date=today)
        LedgerEntry.objects.create(kind='income', amount=Decimal('500'), description='b', date=last_year)
        LedgerEntry.objects.create(kind='expense', amount=Decimal('300'), description='c', date=today)

        summary = call_procedure('financial_summary')

        self.assertEqual(summary['total_income'], Decimal('1500'))
        self.assertEqual(summary['total_expense'], Decimal('300'))
        self.assertEqual(summary['balance'], Decimal('1200'))
        self.assertEqual(summary['income_current_month'], Decimal('1000'))
        self.assertEqual(summary['expense_current_month'], Decimal('300'))

    def test_financial_summary_empty_ledger(self):
        summary = call_procedure('financial_summary')
        self.assertEqual(summary['balance'], Decimal('0'))


class ProcedureViewTests(TestCase):

    def setUp(self):
        User.objects.create_school_admin(email='admin@school.com', password='pass')
        User.objects.create_secretary(email='secretary@school.com', password='pass')

    def test_requires_login(self):
        response = self.client.get(reverse('core:procedure_call', args=['school_statistics']))
        self.assertEqual(response.status_code, 401)

    def test_admin_only(self):
        self.client.login(email='secretary@school.com', password='pass')
        response = self.client.get(reverse('core:procedure_call', args=['school_statistics']))
        self.assertEqual(response.status_code, 403)

    def test_call(self):
        self.client.login(email='admin@school.com', password='pass')
        response = self.client.get(reverse('core:procedure_call', args=['school_statistics']))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['result']['total_students'], 0)

    def test_unknown(self):
        self.client.login(email='admin@school.com', password='pass')
        response = self.client.get(reverse('core:procedure_call', args=['nope']))
        self.assertEqual(response.status_code, 404)
        self.assertIn('school_statistics', response.json()['available'])

    def test_bad_parameters(self):
        self.client.login(email='admin@school.com', password='pass')
        url = reverse('core:procedure_call', args=['students_per_grade_level'])
        self.assertEqual(self.client.get(url, {'academic_year_id': 'x'}).status_code, 400)
        self.assertEqual(self.client.get(url, {'colour': 'red'}).status_code, 400)


class HealthCheckTests(TestCase):

    def test_health(self):
        self.assertEqual(self.client.get('/health/').json(), {'status': 'healthy'})

    def test_ready(self):
        response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['checks']['database']['status'], 'healthy')
