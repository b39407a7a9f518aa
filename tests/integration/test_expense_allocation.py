"""
Expenditure Allocation Integration Tests

Tests how expenditures are split across crops and kept consistent:
- Field-size splits (proportional, rounding residue, invalid sizes)
- Manual allocations via the API
- Re-splitting when a crop's field size changes or a crop is deleted
- Crop profitability reflecting allocated shares only

SCENARIO:
=========
A farmer spends Rs 1,000 on fertilizer across two plots:
- Tomato on 2 acres  -> Rs 400
- Chilli on 3 acres  -> Rs 600
Later the chilli plot shrinks to 1 acre (split becomes 666.67 / 333.33),
and finally the chilli crop is removed (tomato carries the full 1,000).
"""

import pytest
from decimal import Decimal
from rest_framework import status

from dashboards.services.exceptions import AllocationError
from dashboards.services.farm_analytics import FarmAnalyticsService
from expenses.models import AllocationMethod, Expenditure, ExpenditureAllocation
from expenses.services import (
    ExpenditureAllocator,
    allocated_expenses_by_crop,
    split_by_field_size,
)

pytestmark = pytest.mark.django_db


def shares(expenditure):
    return {
        a.crop.name: a.allocated_amount
        for a in ExpenditureAllocation.objects.filter(expenditure=expenditure).select_related('crop')
    }


# =============================================================================
# FIELD SIZE SPLITS
# =============================================================================

class TestFieldSizeSplit:

    def test_proportional_split(self, make_crop):
        tomato = make_crop(name='Tomato', field_size='2 acres')
        chilli = make_crop(name='Chilli', field_size='3 acres')

        result = split_by_field_size(Decimal('1000'), [tomato, chilli])

        assert [share for _, share in result] == [Decimal('400.00'), Decimal('600.00')]

    def test_residue_goes_to_largest_share(self, make_crop):
        crops = [make_crop(name=f'Plot {i}', field_size='1 acre') for i in range(3)]
        crops[1].field_size = '1.0001'

        result = split_by_field_size(Decimal('100'), crops)
        amounts = [share for _, share in result]

        assert sum(amounts) == Decimal('100.00')
        assert amounts[1] == max(amounts)

    def test_equal_sizes_still_sum_to_amount(self, make_crop):
        crops = [make_crop(name=f'Plot {i}', field_size='1') for i in range(3)]

        amounts = [share for _, share in split_by_field_size(Decimal('100'), crops)]

        assert sum(amounts) == Decimal('100.00')
        assert sorted(amounts) == [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]

    def test_no_crops(self):
        with pytest.raises(AllocationError):
            split_by_field_size(Decimal('100'), [])

    @pytest.mark.parametrize('field_size', ['0 acres', 'unknown', '-2'])
    def test_unusable_field_size(self, make_crop, field_size):
        good = make_crop(field_size='2 acres')
        bad = make_crop(name='Bad', field_size=field_size)

        with pytest.raises(AllocationError):
            split_by_field_size(Decimal('100'), [good, bad])


# =============================================================================
# ALLOCATOR
# =============================================================================

class TestAllocator:

    def test_reapply_replaces_rows(self, make_crop, make_expenditure):
        tomato = make_crop(name='Tomato', field_size='2 acres')
        chilli = make_crop(name='Chilli', field_size='3 acres')
        expenditure = make_expenditure(1000, crops=[tomato, chilli], method=AllocationMethod.FIELD_SIZE)

        expenditure.amount = Decimal('500')
        expenditure.save()
        ExpenditureAllocator(expenditure).apply()

        assert shares(expenditure) == {'Tomato': Decimal('200.00'), 'Chilli': Decimal('300.00')}
        assert expenditure.allocated_total == Decimal('500.00')

    def test_manual_rows_kept_when_not_resupplied(self, make_crop, make_expenditure):
        tomato = make_crop()
        expenditure = make_expenditure(300, manual=[(tomato, 120)])

        ExpenditureAllocator(expenditure).apply(None)

        assert shares(expenditure) == {'Tomato': Decimal('120.00')}

    def test_manual_shares_need_not_cover_amount(self, make_crop, make_expenditure):
        tomato = make_crop()
        make_expenditure(300, manual=[(tomato, 120)])

        assert allocated_expenses_by_crop(tomato.owner) == {tomato.id: 120.0}


# =============================================================================
# API
# =============================================================================

class TestExpenditureAPI:

    def test_create_field_size(self, auth_client, make_crop):
        tomato = make_crop(name='Tomato', field_size='2 acres')
        chilli = make_crop(name='Chilli', field_size='3 acres')

        response = auth_client.post('/api/expenditures/', {
            'category': 'Fertilizer',
            'amount': '1000',
            'allocation_method': 'fieldSize',
            'crops_involved': [str(tomato.id), str(chilli.id)],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        allocations = {a['crop_name']: a['allocated_amount'] for a in response.data['allocations']}
        assert allocations == {'Tomato': 400.0, 'Chilli': 600.0}
        assert response.data['allocated_total'] == 1000.0

    def test_create_manual(self, auth_client, make_crop):
        tomato = make_crop(name='Tomato')

        response = auth_client.post('/api/expenditures/', {
            'category': 'Labour',
            'amount': '500',
            'manual_allocations': [{'crop': str(tomato.id), 'allocated_amount': '150'}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        expenditure = Expenditure.objects.get(id=response.data['id'])
        assert shares(expenditure) == {'Tomato': Decimal('150.00')}
        assert list(expenditure.crops_involved.all()) == [tomato]

    def test_field_size_without_usable_sizes_rolls_back(self, auth_client, make_crop):
        crop = make_crop(field_size='unknown')

        response = auth_client.post('/api/expenditures/', {
            'category': 'Seeds',
            'amount': '100',
            'allocation_method': 'fieldSize',
            'crops_involved': [str(crop.id)],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'allocation_method' in response.data
        assert not Expenditure.objects.exists()

    def test_field_size_without_crops(self, auth_client):
        response = auth_client.post('/api/expenditures/', {
            'category': 'Seeds', 'amount': '100', 'allocation_method': 'fieldSize',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cannot_allocate_to_another_farmers_crop(self, auth_client, other_user, make_crop):
        foreign = make_crop(owner=other_user)

        response = auth_client.post('/api/expenditures/', {
            'category': 'Seeds',
            'amount': '100',
            'manual_allocations': [{'crop': str(foreign.id), 'allocated_amount': '100'}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not ExpenditureAllocation.objects.exists()

    def test_duplicate_manual_crop(self, auth_client, make_crop):
        crop = make_crop()

        response = auth_client.post('/api/expenditures/', {
            'category': 'Seeds',
            'amount': '100',
            'manual_allocations': [
                {'crop': str(crop.id), 'allocated_amount': '10'},
                {'crop': str(crop.id), 'allocated_amount': '20'},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_amount_resplits(self, auth_client, make_crop, make_expenditure):
        tomato = make_crop(name='Tomato', field_size='2 acres')
        chilli = make_crop(name='Chilli', field_size='3 acres')
        expenditure = make_expenditure(1000, crops=[tomato, chilli], method=AllocationMethod.FIELD_SIZE)

        response = auth_client.patch(f'/api/expenditures/{expenditure.id}/', {'amount': '2000'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert shares(expenditure) == {'Tomato': Decimal('800.00'), 'Chilli': Decimal('1200.00')}

    def test_filters_and_categories(self, auth_client, other_user, make_expenditure):
        make_expenditure(100, category='Seeds', frequency='Seasonal')
        make_expenditure(200, category='Labour', frequency='Monthly')
        make_expenditure(300, category='Labour', frequency='One-Time')
        make_expenditure(50, category='Diesel', owner=other_user)

        response = auth_client.get('/api/expenditures/', {'category': 'Labour'})
        assert response.data['count'] == 2

        response = auth_client.get('/api/expenditures/', {'frequency': 'Seasonal'})
        assert response.data['count'] == 1

        response = auth_client.get('/api/expenditures/categories/')
        assert response.data == {'categories': ['Labour', 'Seeds']}


# =============================================================================
# ALLOCATION UPKEEP
# =============================================================================

class TestAllocationUpkeep:

    @pytest.fixture
    def scenario(self, make_crop, make_expenditure):
        tomato = make_crop(name='Tomato', field_size='2 acres')
        chilli = make_crop(name='Chilli', field_size='3 acres')
        expenditure = make_expenditure(1000, crops=[tomato, chilli], method=AllocationMethod.FIELD_SIZE)
        return tomato, chilli, expenditure

    def test_field_size_change_resplits(self, scenario):
        _, chilli, expenditure = scenario

        chilli.field_size = '1 acre'
        chilli.save()

        assert shares(expenditure) == {'Tomato': Decimal('666.67'), 'Chilli': Decimal('333.33')}

    def test_unrelated_edit_leaves_split_alone(self, scenario):
        _, chilli, expenditure = scenario
        before = shares(expenditure)

        chilli.notes = 'Drip irrigation installed'
        chilli.save()

        assert shares(expenditure) == before

    def test_crop_deletion_resplits_over_remaining(self, scenario):
        _, chilli, expenditure = scenario

        chilli.delete()

        assert shares(expenditure) == {'Tomato': Decimal('1000.00')}

    def test_unusable_size_clears_allocations(self, scenario):
        _, chilli, expenditure = scenario

        chilli.field_size = 'not measured'
        chilli.save()

        assert shares(expenditure) == {}

    def test_manual_allocations_untouched_by_size_change(self, make_crop, make_expenditure):
        tomato = make_crop(field_size='2 acres')
        expenditure = make_expenditure(400, manual=[(tomato, 150)])

        tomato.field_size = '4 acres'
        tomato.save()

        assert shares(expenditure) == {'Tomato': Decimal('150.00')}

    def test_profitability_follows_resplit(self, user, scenario, make_sale):
        tomato, chilli, _ = scenario
        make_sale(crop=tomato, quantity='50 kg', selling_price=20)

        chilli.field_size = '1 acre'
        chilli.save()

        rows = {r['crop']: r for r in FarmAnalyticsService(user).get_crop_profitability()['crops']}
        assert rows['Tomato']['expenses'] == 666.67
        assert rows['Tomato']['profit'] == 333.33
        assert rows['Chilli']['expenses'] == 333.33
