import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Crop',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('crop_type', models.CharField(choices=[('Vegetable', 'Vegetable'), ('Grain', 'Grain'), ('Fruit', 'Fruit'), ('Pulse', 'Pulse')], db_index=True, max_length=20)),
                ('variety', models.CharField(max_length=100)),
                ('field_size', models.CharField(help_text="Field size as entered, e.g. '2.5 acres'. Only the leading number is used.", max_length=50)),
                ('location', models.CharField(blank=True, help_text="Field name or 'lat,lng' coordinates", max_length=200)),
                ('current_stage', models.CharField(choices=[('Sowing', 'Sowing'), ('Growing', 'Growing'), ('Flowering', 'Flowering'), ('Harvesting', 'Harvesting'), ('Harvested', 'Harvested')], db_index=True, default='Sowing', max_length=20)),
                ('progress', models.PositiveSmallIntegerField(default=5, editable=False, help_text='Derived from current_stage on every save')),
                ('start_date', models.DateField()),
                ('expected_harvest', models.DateField()),
                ('when_to_pluck', models.DateField(blank=True, help_text='Date the farmer plans to harvest; drives harvest reminders', null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='crops', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'crops',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'created_at'], name='crops_owner_created_idx'),
                    models.Index(fields=['owner', 'current_stage'], name='crops_owner_stage_idx'),
                ],
            },
        ),
    ]
