import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('crops', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Expenditure',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('sub_category', models.CharField(blank=True, max_length=100)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('frequency', models.CharField(choices=[('Monthly', 'Monthly'), ('Seasonal', 'Seasonal'), ('Yearly', 'Yearly'), ('One-Time', 'One-Time')], default='One-Time', max_length=20)),
                ('payment_mode', models.CharField(choices=[('Cash', 'Cash'), ('UPI', 'UPI'), ('Bank Transfer', 'Bank Transfer'), ('Cheque', 'Cheque'), ('Credit', 'Credit')], default='Cash', max_length=20)),
                ('expense_date', models.DateField(default=django.utils.timezone.localdate)),
                ('paid_to', models.CharField(blank=True, max_length=200)),
                ('invoice_number', models.CharField(blank=True, max_length=100)),
                ('farm_section', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('allocation_method', models.CharField(choices=[('manual', 'Manual'), ('fieldSize', 'Proportional to field size')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('crops_involved', models.ManyToManyField(blank=True, help_text='Crops this expense is split across', related_name='expenditures', to='crops.crop')),
                ('recorded_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenditures', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'expenditures',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['recorded_by', 'created_at'], name='expend_recorder_created_idx'),
                    models.Index(fields=['recorded_by', 'category'], name='expend_recorder_cat_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ExpenditureAllocation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('allocated_amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('crop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='crops.crop')),
                ('expenditure', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='expenses.expenditure')),
            ],
            options={
                'db_table': 'expenditure_allocations',
                'ordering': ['expenditure', 'crop__name'],
                'constraints': [
                    models.UniqueConstraint(fields=('expenditure', 'crop'), name='unique_allocation_per_crop'),
                ],
            },
        ),
    ]
