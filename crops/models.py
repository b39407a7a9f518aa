"""
Crop Tracking Models

A crop is one planting a farmer tracks from sowing to harvest. Progress is
never entered by hand: it is looked up from the growth stage every time the
crop is saved.

STAGE -> PROGRESS:
==================
Sowing      5
Growing     40
Flowering   70
Harvesting  95
Harvested   100
"""

import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.parsing import parse_number


class CropType(models.TextChoices):
    VEGETABLE = 'Vegetable', 'Vegetable'
    GRAIN = 'Grain', 'Grain'
    FRUIT = 'Fruit', 'Fruit'
    PULSE = 'Pulse', 'Pulse'


class CropStage(models.TextChoices):
    """Growth stages in the order a crop moves through them."""
    SOWING = 'Sowing', 'Sowing'
    GROWING = 'Growing', 'Growing'
    FLOWERING = 'Flowering', 'Flowering'
    HARVESTING = 'Harvesting', 'Harvesting'
    HARVESTED = 'Harvested', 'Harvested'


STAGE_PROGRESS = {
    CropStage.SOWING: 5,
    CropStage.GROWING: 40,
    CropStage.FLOWERING: 70,
    CropStage.HARVESTING: 95,
    CropStage.HARVESTED: 100,
}


class UnrecognizedStage(ValueError):
    """Raised for a growth stage outside :class:`CropStage`."""
    pass


def calculate_progress(stage) -> int:
    """Progress percentage for a growth stage."""
    try:
        return STAGE_PROGRESS[CropStage(stage)]
    except ValueError:
        raise UnrecognizedStage(
            f"Unrecognized crop stage {stage!r}. "
            f"Valid stages: {', '.join(CropStage.values)}"
        ) from None


class Crop(models.Model):
    """A single planting owned by one farmer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='crops'
    )

    name = models.CharField(max_length=100)
    crop_type = models.CharField(
        max_length=20,
        choices=CropType.choices,
        db_index=True
    )
    variety = models.CharField(max_length=100)

    field_size = models.CharField(
        max_length=50,
        help_text="Field size as entered, e.g. '2.5 acres'. Only the leading number is used."
    )
    location = models.CharField(
        max_length=200,
        blank=True,
        help_text="Field name or 'lat,lng' coordinates"
    )

    current_stage = models.CharField(
        max_length=20,
        choices=CropStage.choices,
        default=CropStage.SOWING,
        db_index=True
    )
    progress = models.PositiveSmallIntegerField(
        default=5,
        editable=False,
        help_text="Derived from current_stage on every save"
    )

    start_date = models.DateField()
    expected_harvest = models.DateField()
    when_to_pluck = models.DateField(
        null=True,
        blank=True,
        help_text="Date the farmer plans to harvest; drives harvest reminders"
    )

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'crops'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='crops_owner_created_idx'),
            models.Index(fields=['owner', 'current_stage'], name='crops_owner_stage_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.variety})"

    def save(self, *args, **kwargs):
        """Derive progress from the growth stage before saving."""
        self.progress = calculate_progress(self.current_stage)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'current_stage' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'progress'}
        super().save(*args, **kwargs)

    @property
    def field_size_value(self) -> float:
        return parse_number(self.field_size)
