"""
Sales Models

One Sale is a single produce sale to a buyer. Quantity is stored the way the
farmer typed it ("10 kg", "25 crates"); the total is the leading number of
the quantity times the selling price, worked out on every save.
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.parsing import parse_decimal, parse_number


class PaymentStatus(models.TextChoices):
    PAID = 'Paid', 'Paid'
    PENDING = 'Pending', 'Pending'


# Largest value total_amount can store (max_digits=14, decimal_places=2)
MAX_TOTAL_AMOUNT = Decimal('999999999999.99')


def calculate_total_amount(quantity, selling_price) -> Decimal:
    """Parsed quantity times selling price, to the paisa."""
    total = parse_decimal(quantity) * Decimal(str(selling_price or 0))
    return total.quantize(Decimal('0.01'))


class Sale(models.Model):
    """A produce sale recorded by a farmer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sales'
    )
    crop = models.ForeignKey(
        'crops.Crop',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales',
        help_text="Crop the produce came from. Kept as null if the crop is deleted."
    )

    sale_date = models.DateField(default=timezone.localdate)
    quantity = models.CharField(
        max_length=50,
        help_text="Quantity with unit, e.g. '10 kg'. Only the leading number is used."
    )
    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Price per unit"
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Auto-calculated: parsed quantity x selling_price"
    )

    buyer_name = models.CharField(max_length=200)
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='sales_owner_created_idx'),
            models.Index(fields=['owner', 'crop'], name='sales_owner_crop_idx'),
        ]

    def __str__(self):
        crop_name = self.crop.name if self.crop_id else 'Unknown crop'
        return f"{crop_name} - {self.quantity} to {self.buyer_name}"

    def save(self, *args, **kwargs):
        """Auto-calculate total amount before saving."""
        self.total_amount = calculate_total_amount(self.quantity, self.selling_price)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'total_amount'}
        super().save(*args, **kwargs)

    @property
    def quantity_value(self) -> float:
        return parse_number(self.quantity)
