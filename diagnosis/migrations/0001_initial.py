import django.core.validators
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
            name='Diagnosis',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('diagnosis_type', models.CharField(choices=[('text', 'Text'), ('image', 'Image')], max_length=10)),
                ('crop', models.CharField(help_text='Crop name as described by the farmer (not linked to a Crop record)', max_length=100)),
                ('symptoms', models.TextField(blank=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('disease', models.CharField(blank=True, max_length=200)),
                ('cause', models.TextField(blank=True)),
                ('organic_remedy', models.TextField(blank=True)),
                ('chemical_remedy', models.TextField(blank=True)),
                ('prevention', models.TextField(blank=True)),
                ('confidence', models.FloatField(blank=True, help_text='Classifier confidence between 0 and 1', null=True, validators=[django.core.validators.MinValueValidator(0.0), django.core.validators.MaxValueValidator(1.0)])),
                ('severity', models.CharField(choices=[('Mild', 'Mild'), ('Moderate', 'Moderate'), ('High', 'High')], db_index=True, default='Moderate', max_length=10)),
                ('status', models.CharField(choices=[('Resolved', 'Resolved'), ('Treated', 'Treated'), ('In Progress', 'In Progress')], db_index=True, default='In Progress', max_length=20)),
                ('session_id', models.CharField(blank=True, db_index=True, max_length=100)),
                ('language', models.CharField(default='en', max_length=5)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='diagnoses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Diagnoses',
                'db_table': 'diagnoses',
                'ordering': ['-created_at'],
            },
        ),
    ]
