import json
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from communications.models import Notification
from finance.forms import LedgerEntryForm
from finance.models import LedgerEntry
from finance.services import confirm_payment, reject_payment
from students.models import Student

User = get_user_model()


class FinanceTestBase(TestCase):
    """Base class with common setup for finance tests."""

    def setUp(self):
        self.treasurer = User.objects.create_treasurer(email='treasurer@school.com', password='testpass123')
        self.student_user = User.objects.create_student(email='kiala@school.com', password='testpass123')
        self.student = Student.objects.create(
            first_name='Kiala',
            last_name='Mbala',
            date_of_birth=date(2010, 5, 15),
            gender='M',
            guardian_name='Maria Mbala',
            guardian_phone='923111222',
            admission_number='2024010',
            admission_date=date(2024, 9, 1),
            user=self.student_user,
        )


class LedgerEntryModelTest(FinanceTestBase):

    def test_reference_sequence_per_kind_and_year(self):
        first = LedgerEntry.objects.create(
            kind=LedgerEntry.Kind.INCOME, amount=Decimal('100'), description='Propina', date=date(2025, 3, 1)
        )
        second = LedgerEntry.objects.create(
            kind=LedgerEntry.Kind.INCOME, amount=Decimal('50'), description='Propina', date=date(2025, 3, 2)
        )
        expense = LedgerEntry.objects.create(
            kind=LedgerEntry.Kind.EXPENSE, amount=Decimal('20'), description='Giz', date=date(2025, 3, 2)
        )
        self.assertEqual(first.reference, 'ENT-2025-00001')
        self.assertEqual(second.reference, 'ENT-2025-00002')
        self.assertEqual(expense.reference, 'SAI-2025-00001')

    def test_signed_amount(self):
        expense = LedgerEntry(kind=LedgerEntry.Kind.EXPENSE, amount=Decimal('20.00'))
        self.assertEqual(expense.signed_amount, Decimal('-20.00'))


class LedgerEntryFormTest(FinanceTestBase):

    def test_valid_income(self):
        form = LedgerEntryForm({
            'kind': 'income', 'category': 'tuition', 'amount': '1500.00',
            'description': 'Propina de Março', 'date': '2025-03-05', 'student': self.student.pk,
        })
        self.assertTrue(form.is_valid(), form.errors)

    def test_amount_must_be_positive(self):
        form = LedgerEntryForm({
            'kind': 'expense', 'category': 'materials', 'amount': '0',
            'description': 'Giz', 'date': '2025-03-05',
        })
        self.assertFalse(form.is_valid())
        self.assertIn('amount', form.errors)

    def test_fee_categories_are_income_only(self):
        form = LedgerEntryForm({
            'kind': 'expense', 'category': 'tuition', 'amount': '10',
            'description': 'Refund', 'date': '2025-03-05',
        })
        self.assertFalse(form.is_valid())


class LedgerViewsTest(FinanceTestBase):

    def setUp(self):
        super().setUp()
        self.client.login(email='treasurer@school.com', password='testpass123')

    def test_create_entry_notifies_student(self):
        response = self.client.post(
            reverse('finance:entry_create'),
            data=json.dumps({
                'kind': 'income', 'category': 'tuition', 'amount': '1500.00',
                'description': 'Propina', 'date': '2025-03-05', 'student': self.student.pk,
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        entry = LedgerEntry.objects.get()
        self.assertEqual(entry.recorded_by, self.treasurer)
        self.assertEqual(response.json()['reference'], 'ENT-2025-00001')

        notification = Notification.objects.get(recipient=self.student_user)
        self.assertEqual(notification.kind, Notification.Kind.FINANCE)

    def test_create_invalid(self):
        response = self.client.post(reverse('finance:entry_create'), {'kind': 'income', 'amount': '-5'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('amount', response.json()['errors'])

    def test_list_with_totals_and_filters(self):
        LedgerEntry.objects.create(kind='income', category='tuition', amount=Decimal('1000'), description='A', date=date(2025, 3, 1))
        LedgerEntry.objects.create(kind='income', category='events', amount=Decimal('200'), description='B', date=date(2025, 4, 1))
        LedgerEntry.objects.create(kind='expense', category='materials', amount=Decimal('300'), description='C', date=date(2025, 4, 2))

        response = self.client.get(reverse('finance:entry_list'))
        data = response.json()
        self.assertEqual(data['count'], 3)
        self.assertEqual(Decimal(data['totals']['balance']), Decimal('900'))

        response = self.client.get(reverse('finance:entry_list'), {'date_from': '2025-04-01'})
        data = response.json()
        self.assertEqual(data['count'], 2)
        self.assertEqual(Decimal(data['totals']['income']), Decimal('200'))

        response = self.client.get(reverse('finance:entry_list'), {'kind': 'expense'})
        self.assertEqual([e['description'] for e in response.json()['entries']], ['C'])

    def test_invalid_filter(self):
        response = self.client.get(reverse('finance:entry_list'), {'kind': 'gift'})
        self.assertEqual(response.status_code, 400)

    def test_teacher_forbidden(self):
        User.objects.create_teacher(email='teacher@school.com', password='testpass123')
        self.client.login(email='teacher@school.com', password='testpass123')
        self.assertEqual(self.client.get(reverse('finance:entry_list')).status_code, 403)


class PaymentConfirmationTest(FinanceTestBase):

    def setUp(self):
        super().setUp()
        self.payment = LedgerEntry.objects.create(
            kind='income', category='tuition', amount=Decimal('1500'),
            description='Propina', date=date(2025, 3, 5), student=self.student,
        )

    def test_new_payment_is_pending(self):
        self.assertEqual(self.payment.confirmation_status, LedgerEntry.Confirmation.PENDING)
        self.assertTrue(self.payment.is_student_payment)

    def test_confirm_payment(self):
        entry = confirm_payment(self.payment.pk, self.treasurer)

        self.assertEqual(entry.confirmation_status, LedgerEntry.Confirmation.CONFIRMED)
        self.assertEqual(entry.confirmed_by, self.treasurer)
        self.assertIsNotNone(entry.confirmed_at)

        notification = Notification.objects.get(recipient=self.student_user)
        self.assertEqual(notification.title, 'Payment confirmed')
        self.assertEqual(notification.kind, Notification.Kind.FINANCE)

    def test_reject_payment_keeps_reason(self):
        entry = reject_payment(self.payment.pk, self.treasurer, 'Receipt is illegible')

        entry.refresh_from_db()
        self.assertEqual(entry.confirmation_status, LedgerEntry.Confirmation.REJECTED)
        self.assertEqual(entry.rejection_reason, 'Receipt is illegible')
        notification = Notification.objects.get(recipient=self.student_user)
        self.assertIn('Receipt is illegible', notification.message)

    def test_reject_requires_reason(self):
        with self.assertRaises(ValidationError):
            reject_payment(self.payment.pk, self.treasurer, '   ')
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.confirmation_status, LedgerEntry.Confirmation.PENDING)

    def test_only_pending_payments(self):
        confirm_payment(self.payment.pk, self.treasurer)
        with self.assertRaises(ValidationError):
            reject_payment(self.payment.pk, self.treasurer, 'Too late')
        with self.assertRaises(ValidationError):
            confirm_payment(self.payment.pk, self.treasurer)

    def test_expense_cannot_be_confirmed(self):
        expense = LedgerEntry.objects.create(kind='expense', category='materials', amount=Decimal('20'), description='Giz')
        with self.assertRaises(ValidationError):
            confirm_payment(expense.pk, self.treasurer)

    def test_student_without_account_is_not_notified(self):
        self.student.user = None
        self.student.save()
        confirm_payment(self.payment.pk, self.treasurer)
        self.assertFalse(Notification.objects.exists())


class PaymentConfirmationViewsTest(FinanceTestBase):

    def setUp(self):
        super().setUp()
        self.payment = LedgerEntry.objects.create(
            kind='income', category='tuition', amount=Decimal('1500'),
            description='Propina', date=date(2025, 3, 5), student=self.student,
        )
        self.client.login(email='treasurer@school.com', password='testpass123')

    def test_confirm(self):
        response = self.client.post(reverse('finance:payment_confirm', args=[self.payment.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['confirmation_status'], 'confirmed')
        self.assertEqual(response.json()['confirmed_by'], str(self.treasurer))

    def test_confirm_twice_conflicts(self):
        url = reverse('finance:payment_confirm', args=[self.payment.pk])
        self.client.post(url)
        self.assertEqual(self.client.post(url).status_code, 409)

    def test_confirm_unknown_entry(self):
        self.assertEqual(self.client.post(reverse('finance:payment_confirm', args=[9999])).status_code, 404)

    def test_reject_with_json_reason(self):
        response = self.client.post(
            reverse('finance:payment_reject', args=[self.payment.pk]),
            data=json.dumps({'reason': 'Amount does not match the receipt'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['rejection_reason'], 'Amount does not match the receipt')

    def test_reject_without_reason(self):
        response = self.client.post(reverse('finance:payment_reject', args=[self.payment.pk]), {})
        self.assertEqual(response.status_code, 400)
        self.assertIn('reason', response.json()['errors'])

    def test_pending_total_and_filter(self):
        LedgerEntry.objects.create(kind='income', category='events', amount=Decimal('200'), description='Festa')
        response = self.client.get(reverse('finance:entry_list'), {'confirmation_status': 'pending'})
        data = response.json()
        self.assertEqual(data['count'], 2)
        self.assertEqual(Decimal(data['totals']['pending_payments']), Decimal('1500'))

    def test_teacher_forbidden(self):
        User.objects.create_teacher(email='teacher@school.com', password='testpass123')
        self.client.login(email='teacher@school.com', password='testpass123')
        response = self.client.post(reverse('finance:payment_confirm', args=[self.payment.pk]))
        self.assertEqual(response.status_code, 403)
