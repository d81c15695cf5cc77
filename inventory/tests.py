import json
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from inventory.forms import InventoryItemForm
from inventory.models import InventoryItem
from inventory.views import inventory_totals

User = get_user_model()


class InventoryTestBase(TestCase):
    """Base class with a secretary, an employee and a teacher."""

    def setUp(self):
        self.secretary = User.objects.create_secretary(email='secretary@school.com', password='testpass123')
        self.employee = User.objects.create_user(email='guard@school.com', password='testpass123', is_employee=True)
        self.teacher = User.objects.create_teacher(email='teacher@school.com', password='testpass123')

    def _item(self, name, quantity=1, unit_value=None, condition=InventoryItem.Condition.GOOD, **kwargs):
        return InventoryItem.objects.create(
            name=name,
            category=kwargs.pop('category', InventoryItem.Category.FURNITURE),
            quantity=quantity,
            unit_value=unit_value,
            condition=condition,
            **kwargs
        )


class InventoryItemModelTest(InventoryTestBase):

    def test_total_value(self):
        self.assertEqual(self._item('Carteira', quantity=30, unit_value=Decimal('80.00')).total_value, Decimal('2400.00'))

    def test_total_value_without_unit_value(self):
        self.assertEqual(self._item('Quadro').total_value, Decimal('0.00'))

    def test_needs_attention(self):
        self.assertTrue(self._item('Projector', condition=InventoryItem.Condition.UNDER_REPAIR).needs_attention)
        self.assertTrue(self._item('Cadeira', condition=InventoryItem.Condition.POOR).needs_attention)
        self.assertFalse(self._item('Mesa', condition=InventoryItem.Condition.FAIR).needs_attention)

    def test_totals(self):
        self._item('Carteira', quantity=30, unit_value=Decimal('80.00'))
        self._item('Projector', quantity=2, unit_value=Decimal('500.00'), condition=InventoryItem.Condition.UNDER_REPAIR)
        self._item('Bola', quantity=10, condition=InventoryItem.Condition.POOR)

        totals = inventory_totals(InventoryItem.objects.all())

        self.assertEqual(totals['total_units'], 42)
        self.assertEqual(totals['total_value'], Decimal('3400.00'))
        self.assertEqual(totals['good_condition'], 1)
        self.assertEqual(totals['needs_attention'], 2)

    def test_totals_when_empty(self):
        self.assertEqual(inventory_totals(InventoryItem.objects.all()), {
            'total_units': 0, 'total_value': Decimal('0.00'), 'good_condition': 0, 'needs_attention': 0,
        })


class InventoryItemFormTest(InventoryTestBase):

    def _data(self, **overrides):
        data = {
            'name': '  Computador  ', 'category': 'it_equipment', 'quantity': 5,
            'unit_value': '25000.00', 'condition': 'good', 'location': 'Sala de Informática',
        }
        data.update(overrides)
        return data

    def test_valid(self):
        form = InventoryItemForm(self._data(custodian=self.employee.pk))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['name'], 'Computador')

    def test_custodian_must_be_staff(self):
        form = InventoryItemForm(self._data(custodian=self.teacher.pk))
        self.assertFalse(form.is_valid())
        self.assertIn('custodian', form.errors)

    def test_negative_unit_value(self):
        form = InventoryItemForm(self._data(unit_value='-1'))
        self.assertFalse(form.is_valid())
        self.assertIn('unit_value', form.errors)

    def test_unknown_condition(self):
        form = InventoryItemForm(self._data(condition='broken'))
        self.assertFalse(form.is_valid())
        self.assertIn('condition', form.errors)


class InventoryViewsTest(InventoryTestBase):

    def setUp(self):
        super().setUp()
        self.client.login(email='secretary@school.com', password='testpass123')

    def test_create(self):
        response = self.client.post(
            reverse('inventory:item_create'),
            data=json.dumps({
                'name': 'Microscópio', 'category': 'lab_equipment', 'quantity': 4,
                'unit_value': '1200.00', 'condition': 'good', 'custodian': self.employee.pk,
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        item = InventoryItem.objects.get()
        self.assertEqual(item.custodian, self.employee)
        self.assertEqual(Decimal(response.json()['total_value']), Decimal('4800.00'))

    def test_create_invalid(self):
        response = self.client.post(reverse('inventory:item_create'), {'name': 'Mesa'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('category', response.json()['errors'])

    def test_update(self):
        item = self._item('Projector', quantity=2, unit_value=Decimal('500.00'))
        response = self.client.post(reverse('inventory:item_update', args=[item.pk]), {
            'name': 'Projector', 'category': 'it_equipment', 'quantity': 2,
            'unit_value': '500.00', 'condition': 'under_repair',
        })
        self.assertEqual(response.status_code, 200)
        item.refresh_from_db()
        self.assertEqual(item.condition, InventoryItem.Condition.UNDER_REPAIR)

    def test_delete(self):
        item = self._item('Cadeira')
        response = self.client.post(reverse('inventory:item_delete', args=[item.pk]))
        self.assertEqual(response.json(), {'deleted': item.pk})
        self.assertFalse(InventoryItem.objects.exists())

    def test_delete_unknown(self):
        self.assertEqual(self.client.post(reverse('inventory:item_delete', args=[9999])).status_code, 404)

    def test_list_filters_and_totals(self):
        self._item('Carteira', quantity=30, unit_value=Decimal('80.00'), location='Sala 1')
        self._item('Projector', quantity=2, unit_value=Decimal('500.00'),
                   category=InventoryItem.Category.IT_EQUIPMENT, condition=InventoryItem.Condition.UNDER_REPAIR)

        data = self.client.get(reverse('inventory:item_list')).json()
        self.assertEqual(data['count'], 2)
        self.assertEqual(data['totals']['total_units'], 32)
        self.assertEqual(data['totals']['needs_attention'], 1)

        data = self.client.get(reverse('inventory:item_list'), {'condition': 'under_repair'}).json()
        self.assertEqual([item['name'] for item in data['items']], ['Projector'])
        # Totals describe the whole inventory, not the filtered page
        self.assertEqual(data['totals']['total_units'], 32)

        data = self.client.get(reverse('inventory:item_list'), {'search': 'sala'}).json()
        self.assertEqual([item['name'] for item in data['items']], ['Carteira'])

    def test_invalid_filter(self):
        response = self.client.get(reverse('inventory:item_list'), {'category': 'spaceships'})
        self.assertEqual(response.status_code, 400)

    def test_get_not_allowed_on_create(self):
        self.assertEqual(self.client.get(reverse('inventory:item_create')).status_code, 405)

    def test_teacher_forbidden(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        self.assertEqual(self.client.get(reverse('inventory:item_list')).status_code, 403)

    def test_anonymous(self):
        self.client.logout()
        self.assertEqual(self.client.get(reverse('inventory:item_list')).status_code, 401)
