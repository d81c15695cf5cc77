import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('category', models.CharField(choices=[('furniture', 'Furniture'), ('it_equipment', 'IT Equipment'), ('teaching_material', 'Teaching Material'), ('office_supplies', 'Office Supplies'), ('sports_equipment', 'Sports Equipment'), ('lab_equipment', 'Laboratory Equipment'), ('vehicles', 'Vehicles'), ('other', 'Other')], max_length=20)),
                ('description', models.TextField(blank=True)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('unit_value', models.DecimalField(blank=True, decimal_places=2, help_text='Value of a single unit', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.00'))])),
                ('condition', models.CharField(choices=[('good', 'Good'), ('fair', 'Fair'), ('poor', 'Poor'), ('under_repair', 'Under Repair'), ('written_off', 'Written Off')], default='good', max_length=15)),
                ('location', models.CharField(blank=True, max_length=100)),
                ('acquired_on', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('custodian', models.ForeignKey(blank=True, help_text='Employee responsible for the item', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Inventory Item',
                'verbose_name_plural': 'Inventory Items',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['category', 'condition'], name='inventory_cat_condition_idx')],
            },
        ),
    ]
