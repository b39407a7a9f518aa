"""
Expenditure Services

Allocation of expenditure amounts across crops.

Two allocation methods are supported:

- ``manual``: the caller supplies each crop's share and it is stored as is.
  Shares do not have to add up to the expenditure amount; whatever is left
  over is simply not attributed to any crop.
- ``fieldSize``: the amount is split in proportion to each involved crop's
  field size. Shares are rounded to two decimals and the rounding residue
  goes to the largest share, so the shares always add up to the amount.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from django.db import transaction
from django.db.models import Sum

from core.parsing import parse_decimal
from dashboards.services.exceptions import AllocationError

from .models import AllocationMethod, Expenditure, ExpenditureAllocation

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def split_by_field_size(amount, crops) -> List[Tuple[object, Decimal]]:
    """
    Split ``amount`` across ``crops`` proportionally to their field sizes.

    Returns ``(crop, share)`` pairs in the order the crops were given.

    Raises:
        AllocationError: no crops, or a crop whose field size parses to <= 0.
    """
    crops = list(crops)
    if not crops:
        raise AllocationError(
            "Field size allocation needs at least one crop in crops_involved"
        )

    sizes = []
    for crop in crops:
        size = parse_decimal(crop.field_size)
        if size <= 0:
            raise AllocationError(
                f"Crop '{crop.name}' has no usable field size ({crop.field_size!r}); "
                f"cannot allocate by field size"
            )
        sizes.append(size)

    amount = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    total_size = sum(sizes)
    shares = [
        (amount * size / total_size).quantize(CENT, rounding=ROUND_HALF_UP)
        for size in sizes
    ]

    residue = amount - sum(shares)
    if residue:
        largest = max(range(len(shares)), key=lambda i: shares[i])
        shares[largest] += residue

    return list(zip(crops, shares))


class ExpenditureAllocator:
    """
    Writes the allocation rows for one expenditure.

    Example Usage:
        allocator = ExpenditureAllocator(expenditure)
        allocator.apply(manual_allocations=[{'crop': crop, 'allocated_amount': 250}])
    """

    def __init__(self, expenditure: Expenditure):
        self.expenditure = expenditure

    def compute(self, manual_allocations: Optional[Iterable[dict]] = None) -> List[Tuple[object, Decimal]]:
        """Allocation pairs for the expenditure's current method and crops."""
        if self.expenditure.allocation_method == AllocationMethod.FIELD_SIZE:
            crops = self.expenditure.crops_involved.all().order_by('created_at', 'id')
            return split_by_field_size(self.expenditure.amount, crops)

        if self.expenditure.allocation_method == AllocationMethod.MANUAL:
            return [
                (entry['crop'], Decimal(str(entry['allocated_amount'])))
                for entry in (manual_allocations or [])
            ]

        raise AllocationError(
            f"Unrecognized allocation method {self.expenditure.allocation_method!r}"
        )

    @transaction.atomic
    def apply(self, manual_allocations: Optional[Iterable[dict]] = None) -> List[ExpenditureAllocation]:
        """
        Replace the expenditure's allocation rows.

        For manual allocations, passing ``None`` keeps the existing rows.
        """
        method = self.expenditure.allocation_method
        if method == AllocationMethod.MANUAL and manual_allocations is None:
            return list(self.expenditure.allocations.all())

        pairs = self.compute(manual_allocations)
        self.expenditure.allocations.all().delete()
        rows = ExpenditureAllocation.objects.bulk_create([
            ExpenditureAllocation(
                expenditure=self.expenditure,
                crop=crop,
                allocated_amount=share,
            )
            for crop, share in pairs
        ])

        logger.info(
            "Allocated expenditure %s (%s) across %d crop(s)",
            self.expenditure.id, method, len(rows)
        )
        return rows


def rederive_field_size_allocations(expenditures: Iterable[Expenditure]):
    """
    Recompute field-size allocations after a crop changed or was removed.

    An expenditure that can no longer be split keeps no allocations and a
    warning is logged.
    """
    for expenditure in expenditures:
        if expenditure.allocation_method != AllocationMethod.FIELD_SIZE:
            continue
        try:
            ExpenditureAllocator(expenditure).apply()
        except AllocationError as exc:
            expenditure.allocations.all().delete()
            logger.warning(
                "Cleared allocations for expenditure %s: %s", expenditure.id, exc
            )


def allocated_expenses_by_crop(user, date_range=None, crop_ids=None) -> Dict[object, float]:
    """
    Expenses attributed to each crop, keyed by crop id.

    Sums allocation rows only, so an expenditure split over several crops
    contributes just its per-crop share. ``date_range`` filters on the
    expenditure's ``created_at``.
    """
    allocations = ExpenditureAllocation.objects.filter(
        expenditure__recorded_by=user,
        crop__owner=user,
    )
    if date_range is not None:
        allocations = allocations.filter(**date_range.filter_kwargs('expenditure__created_at'))
    if crop_ids is not None:
        allocations = allocations.filter(crop_id__in=crop_ids)

    rows = allocations.values('crop_id').annotate(total=Sum('allocated_amount'))
    return {row['crop_id']: float(row['total'] or 0) for row in rows}
