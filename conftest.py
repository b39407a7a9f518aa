"""
Shared pytest fixtures.

Factories create records for the ``user`` fixture unless another owner is
passed, so tests can build two tenants side by side.
"""
import pytest
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def user(db):
    """Farmer whose data most tests look at."""
    return get_user_model().objects.create_user(
        username='ravi',
        password='testpass123',
        phone='+919800000001',
        first_name='Ravi',
        farm_name='Green Acres'
    )


@pytest.fixture
def other_user(db):
    """Second farmer for cross-tenant checks."""
    return get_user_model().objects.create_user(
        username='meena',
        password='testpass123',
        phone='+919800000002',
        first_name='Meena',
        farm_name='Hill Side'
    )


@pytest.fixture
def auth_client(api_client, user):
    """API client authenticated as ``user``."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def make_crop(user):
    from crops.models import Crop, CropStage, CropType

    def _make(owner=None, **fields):
        data = {
            'name': 'Tomato',
            'crop_type': CropType.VEGETABLE,
            'variety': 'Hybrid',
            'field_size': '2 acres',
            'current_stage': CropStage.GROWING,
            'start_date': date(2024, 1, 1),
            'expected_harvest': date(2024, 4, 1),
        }
        data.update(fields)
        return Crop.objects.create(owner=owner or user, **data)
    return _make


@pytest.fixture
def make_sale(user):
    from sales_revenue.models import Sale

    def _make(crop=None, owner=None, quantity='10 kg', selling_price='20', **fields):
        fields.setdefault('buyer_name', 'Local Mandi')
        return Sale.objects.create(
            owner=owner or user,
            crop=crop,
            quantity=quantity,
            selling_price=Decimal(str(selling_price)),
            **fields
        )
    return _make


@pytest.fixture
def make_expenditure(user):
    """
    Create an expenditure and resolve its allocations.

    ``manual`` is a list of ``(crop, amount)`` pairs for the manual method.
    """
    from expenses.models import AllocationMethod, Expenditure
    from expenses.services import ExpenditureAllocator

    def _make(amount, crops=(), method=AllocationMethod.MANUAL, manual=None, owner=None, **fields):
        fields.setdefault('category', 'Fertilizer')
        expenditure = Expenditure.objects.create(
            recorded_by=owner or user,
            amount=Decimal(str(amount)),
            allocation_method=method,
            **fields
        )
        involved = list(crops) + [crop for crop, _ in (manual or [])]
        if involved:
            expenditure.crops_involved.set(involved)
        manual_allocations = None
        if manual is not None:
            manual_allocations = [
                {'crop': crop, 'allocated_amount': Decimal(str(share))}
                for crop, share in manual
            ]
        if method == AllocationMethod.FIELD_SIZE or manual_allocations is not None:
            ExpenditureAllocator(expenditure).apply(manual_allocations)
        return expenditure
    return _make


@pytest.fixture
def make_diagnosis(user):
    from diagnosis.models import Diagnosis, DiagnosisType

    def _make(owner=None, **fields):
        fields.setdefault('diagnosis_type', DiagnosisType.TEXT)
        fields.setdefault('crop', 'Tomato')
        return Diagnosis.objects.create(owner=owner or user, **fields)
    return _make
