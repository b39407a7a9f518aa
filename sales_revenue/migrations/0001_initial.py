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
            name='Sale',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('sale_date', models.DateField(default=django.utils.timezone.localdate)),
                ('quantity', models.CharField(help_text="Quantity with unit, e.g. '10 kg'. Only the leading number is used.", max_length=50)),
                ('selling_price', models.DecimalField(decimal_places=2, help_text='Price per unit', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, help_text='Auto-calculated: parsed quantity x selling_price', max_digits=14)),
                ('buyer_name', models.CharField(max_length=200)),
                ('payment_status', models.CharField(choices=[('Paid', 'Paid'), ('Pending', 'Pending')], db_index=True, default='Pending', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('crop', models.ForeignKey(blank=True, help_text='Crop the produce came from. Kept as null if the crop is deleted.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales', to='crops.crop')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'sales',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'created_at'], name='sales_owner_created_idx'),
                    models.Index(fields=['owner', 'crop'], name='sales_owner_crop_idx'),
                ],
            },
        ),
    ]
