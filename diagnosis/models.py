"""
Diagnosis Models

Disease diagnoses produced for a farmer, either from a symptom description
or from a leaf photo. The classification itself happens outside this
service; these records keep the result and its follow-up status.
"""

import uuid
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class DiagnosisType(models.TextChoices):
    TEXT = 'text', 'Text'
    IMAGE = 'image', 'Image'


class Severity(models.TextChoices):
    MILD = 'Mild', 'Mild'
    MODERATE = 'Moderate', 'Moderate'
    HIGH = 'High', 'High'


class DiagnosisStatus(models.TextChoices):
    RESOLVED = 'Resolved', 'Resolved'
    TREATED = 'Treated', 'Treated'
    IN_PROGRESS = 'In Progress', 'In Progress'


class Diagnosis(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='diagnoses'
    )

    diagnosis_type = models.CharField(max_length=10, choices=DiagnosisType.choices)
    crop = models.CharField(
        max_length=100,
        help_text="Crop name as described by the farmer (not linked to a Crop record)"
    )
    symptoms = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    # Diagnosis payload
    disease = models.CharField(max_length=200, blank=True)
    cause = models.TextField(blank=True)
    organic_remedy = models.TextField(blank=True)
    chemical_remedy = models.TextField(blank=True)
    prevention = models.TextField(blank=True)
    confidence = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0.0), MaxValueValidator(1.0)],
        help_text="Classifier confidence between 0 and 1"
    )

    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        default=Severity.MODERATE,
        db_index=True
    )
    status = models.CharField(
        max_length=20,
        choices=DiagnosisStatus.choices,
        default=DiagnosisStatus.IN_PROGRESS,
        db_index=True
    )

    session_id = models.CharField(max_length=100, blank=True, db_index=True)
    language = models.CharField(max_length=5, default='en')

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'diagnoses'
        ordering = ['-created_at']
        verbose_name_plural = 'Diagnoses'

    def __str__(self):
        return f"{self.crop}: {self.disease or 'undiagnosed'} ({self.severity})"
