# Generated manually for customers app

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.db.models.functions.text
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CustomerGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(3)])),
                ('is_default', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'customer_groups',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower('name'),
                        name='unique_customer_group_name_ci',
                        violation_error_message='Name should be unique. Group already present with same name.',
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(('is_default', True)),
                        fields=('is_default',),
                        name='unique_default_customer_group',
                        violation_error_message='Default customer group already exists.',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(3)])),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('mobile_no', models.CharField(max_length=20)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('due_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('is_active', models.BooleanField(default=True)),
                ('is_withheld', models.BooleanField(default=False)),
                ('position', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer_group', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='customers', to='customers.customergroup')),
            ],
            options={
                'db_table': 'customers',
                'ordering': ['customer_group_id', 'is_withheld', 'position', 'id'],
                'indexes': [
                    models.Index(fields=['customer_group', 'is_withheld', 'position'], name='customers_partition_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower('name'),
                        name='unique_customer_name_ci',
                        violation_error_message='Name should be unique. Please enter another name to identify customer.',
                    ),
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower('mobile_no'),
                        name='unique_customer_mobile_no_ci',
                        violation_error_message='Mobile no should be unique. Customer already exists with same mobile no.',
                    ),
                ],
            },
        ),
    ]
