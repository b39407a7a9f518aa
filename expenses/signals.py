"""
Expenditure Signals

Keeps field-size allocations consistent with the crops they are split over.
When a crop's field size changes, or a crop is deleted, every field-size
expenditure involving it is re-split.
"""

from django.db.models.signals import post_delete, post_save, pre_delete, pre_save
from django.dispatch import receiver
import logging

from crops.models import Crop

from .models import AllocationMethod, Expenditure
from .services import rederive_field_size_allocations

logger = logging.getLogger(__name__)


def _field_size_expenditures(crop):
    return Expenditure.objects.filter(
        crops_involved=crop,
        allocation_method=AllocationMethod.FIELD_SIZE,
    )


@receiver(pre_save, sender=Crop)
def remember_previous_field_size(sender, instance, **kwargs):
    """Stash the stored field size so post_save can tell if it changed."""
    if instance._state.adding:
        instance._previous_field_size = None
        return
    instance._previous_field_size = (
        Crop.objects.filter(pk=instance.pk).values_list('field_size', flat=True).first()
    )


@receiver(post_save, sender=Crop)
def crop_field_size_changed(sender, instance, created, **kwargs):
    if created:
        return
    previous = getattr(instance, '_previous_field_size', None)
    if previous is None or previous == instance.field_size:
        return

    expenditures = list(_field_size_expenditures(instance))
    if expenditures:
        logger.info(
            "Field size of crop %s changed (%r -> %r); re-splitting %d expenditure(s)",
            instance.id, previous, instance.field_size, len(expenditures)
        )
        rederive_field_size_allocations(expenditures)


@receiver(pre_delete, sender=Crop)
def remember_crop_expenditures(sender, instance, **kwargs):
    instance._field_size_expenditure_ids = list(
        _field_size_expenditures(instance).values_list('id', flat=True)
    )


@receiver(post_delete, sender=Crop)
def crop_deleted_rederive(sender, instance, **kwargs):
    expenditure_ids = getattr(instance, '_field_size_expenditure_ids', None)
    if not expenditure_ids:
        return
    rederive_field_size_allocations(Expenditure.objects.filter(id__in=expenditure_ids))
