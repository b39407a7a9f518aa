"""
Expenditure Tracking Models

Tracks what a farmer spends and which crops carry that cost.

Each expenditure can be:
- Unallocated (general overhead, no crops involved)
- Allocated manually (the farmer states each crop's share)
- Allocated by field size (shares derived from the crops' field sizes)

Crop-level reports only ever count a crop's allocated share, never the full
expenditure amount.
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class ExpenditureFrequency(models.TextChoices):
    MONTHLY = 'Monthly', 'Monthly'
    SEASONAL = 'Seasonal', 'Seasonal'
    YEARLY = 'Yearly', 'Yearly'
    ONE_TIME = 'One-Time', 'One-Time'


class PaymentMode(models.TextChoices):
    CASH = 'Cash', 'Cash'
    UPI = 'UPI', 'UPI'
    BANK_TRANSFER = 'Bank Transfer', 'Bank Transfer'
    CHEQUE = 'Cheque', 'Cheque'
    CREDIT = 'Credit', 'Credit'


class AllocationMethod(models.TextChoices):
    MANUAL = 'manual', 'Manual'
    FIELD_SIZE = 'fieldSize', 'Proportional to field size'


class Expenditure(models.Model):
    """A single farm expense, optionally split across crops."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='expenditures'
    )

    category = models.CharField(max_length=100, db_index=True)
    sub_category = models.CharField(max_length=100, blank=True)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    frequency = models.CharField(
        max_length=20,
        choices=ExpenditureFrequency.choices,
        default=ExpenditureFrequency.ONE_TIME
    )
    payment_mode = models.CharField(
        max_length=20,
        choices=PaymentMode.choices,
        default=PaymentMode.CASH
    )
    expense_date = models.DateField(default=timezone.localdate)

    paid_to = models.CharField(max_length=200, blank=True)
    invoice_number = models.CharField(max_length=100, blank=True)
    farm_section = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    allocation_method = models.CharField(
        max_length=20,
        choices=AllocationMethod.choices,
        default=AllocationMethod.MANUAL
    )
    crops_involved = models.ManyToManyField(
        'crops.Crop',
        blank=True,
        related_name='expenditures',
        help_text="Crops this expense is split across"
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenditures'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recorded_by', 'created_at'], name='expend_recorder_created_idx'),
            models.Index(fields=['recorded_by', 'category'], name='expend_recorder_cat_idx'),
        ]

    def __str__(self):
        return f"{self.category} - {self.amount}"

    @property
    def allocated_total(self) -> Decimal:
        return sum((a.allocated_amount for a in self.allocations.all()), Decimal('0.00'))


class ExpenditureAllocation(models.Model):
    """The share of an expenditure attributed to one crop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expenditure = models.ForeignKey(
        Expenditure,
        on_delete=models.CASCADE,
        related_name='allocations'
    )
    crop = models.ForeignKey(
        'crops.Crop',
        on_delete=models.CASCADE,
        related_name='allocations'
    )
    allocated_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )

    class Meta:
        db_table = 'expenditure_allocations'
        ordering = ['expenditure', 'crop__name']
        constraints = [
            models.UniqueConstraint(
                fields=['expenditure', 'crop'],
                name='unique_allocation_per_crop'
            ),
        ]

    def __str__(self):
        return f"{self.crop} <- {self.allocated_amount}"
