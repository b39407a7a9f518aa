"""
Crop and Sales Lifecycle Integration Tests

Follows a crop from planting to sale through the API and checks the
analytics stay consistent:
- Sales totals are always quantity x price, even after edits
- Sales can only reference the seller's own crops
- Month filters on the sales list
- Deleting a crop keeps its sales, reported under "Unknown"

SCENARIO:
=========
A farmer plants 2 acres of tomato, sells 10 kg at Rs 20 (Rs 200) and
25 kg at Rs 18 (Rs 450), corrects the second sale to 30 kg (Rs 540), and
finally removes the crop from their records.
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework import status

from sales_revenue.models import Sale

pytestmark = pytest.mark.django_db


def create_crop(client):
    response = client.post('/api/crops/', {
        'name': 'Tomato',
        'crop_type': 'Vegetable',
        'variety': 'Arka Rakshak',
        'field_size': '2 acres',
        'current_stage': 'Flowering',
        'start_date': '2024-01-10',
        'expected_harvest': '2024-04-20',
    }, format='json')
    assert response.status_code == status.HTTP_201_CREATED
    return response.data['id']


def record_sale(client, crop_id, quantity, price, **extra):
    payload = {
        'crop': crop_id,
        'quantity': quantity,
        'selling_price': price,
        'buyer_name': 'Kolar APMC',
    }
    payload.update(extra)
    return client.post('/api/sales/', payload, format='json')


class TestCropToSaleLifecycle:

    def test_full_lifecycle(self, auth_client):
        crop_id = create_crop(auth_client)

        first = record_sale(auth_client, crop_id, '10 kg', '20')
        second = record_sale(auth_client, crop_id, '25 kg', '18', payment_status='Paid')
        assert first.status_code == status.HTTP_201_CREATED
        assert first.data['total_amount'] == Decimal('200.00')
        assert second.data['total_amount'] == Decimal('450.00')
        assert second.data['crop_name'] == 'Tomato'

        # Correct the quantity; the total follows
        response = auth_client.patch(f"/api/sales/{second.data['id']}/", {'quantity': '30 kg'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_amount'] == Decimal('540.00')

        summary = auth_client.get('/api/analytics/crops/financial-summary/', {'crop_id': crop_id}).data
        assert summary['total_revenue'] == 740.0
        assert summary['sales']['count'] == 2

        # Harvest: stage moves progress
        response = auth_client.patch(f'/api/crops/{crop_id}/', {'current_stage': 'Harvested'}, format='json')
        assert response.data['progress'] == 100

        # Remove the crop; sales survive as Unknown
        response = auth_client.delete(f'/api/crops/{crop_id}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert Sale.objects.filter(crop__isnull=True).count() == 2

        rows = auth_client.get('/api/analytics/crops/profitability/').data['crops']
        assert [(r['crop'], r['revenue'], r['sales']) for r in rows] == [('Unknown', 740.0, 2)]

        distribution = auth_client.get('/api/analytics/sales/distribution/').data['distribution']
        assert distribution[0]['name'] == 'Unknown'
        assert distribution[0]['revenue_percentage'] == 100.0

    def test_total_amount_is_not_writable(self, auth_client):
        crop_id = create_crop(auth_client)

        response = record_sale(auth_client, crop_id, '10 kg', '20', total_amount='99999')

        assert response.data['total_amount'] == Decimal('200.00')

    def test_unparsable_quantity_is_zero_revenue(self, auth_client):
        crop_id = create_crop(auth_client)

        response = record_sale(auth_client, crop_id, 'a few crates', '20')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_amount'] == Decimal('0.00')
        assert response.data['quantity_value'] == 0.0

    def test_cannot_sell_another_farmers_crop(self, auth_client, other_user, make_crop):
        foreign = make_crop(owner=other_user)

        response = record_sale(auth_client, str(foreign.id), '1', '1')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'crop' in response.data

    def test_negative_price_rejected(self, auth_client):
        crop_id = create_crop(auth_client)

        response = record_sale(auth_client, crop_id, '1', '-5')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unrepresentable_quantity_rejected(self, auth_client):
        crop_id = create_crop(auth_client)

        response = record_sale(auth_client, crop_id, '1e30 kg', '20')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data
        assert Sale.objects.count() == 0

    def test_total_too_large_is_rejected_and_not_saved(self, auth_client):
        crop_id = create_crop(auth_client)

        response = record_sale(auth_client, crop_id, '999999999999 kg', '9999999999.99')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data
        assert Sale.objects.count() == 0

    def test_edit_pushing_total_too_large_is_rejected(self, auth_client):
        crop_id = create_crop(auth_client)
        sale_id = record_sale(auth_client, crop_id, '10 kg', '20').data['id']

        response = auth_client.patch(
            f'/api/sales/{sale_id}/', {'quantity': '999999999999 kg'}, format='json'
        )
        sale = Sale.objects.get(pk=sale_id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert sale.quantity == '10 kg'
        assert sale.total_amount == Decimal('200.00')


class TestSalesList:

    def test_month_filter(self, auth_client, make_sale):
        today = timezone.localdate()
        last_month = today.replace(day=1) - timedelta(days=1)
        make_sale(buyer_name='This month', sale_date=today)
        make_sale(buyer_name='Last month', sale_date=last_month)
        make_sale(buyer_name='Long ago', sale_date=today.replace(year=today.year - 2, day=1))

        def buyers(month):
            response = auth_client.get('/api/sales/', {'month': month})
            return sorted(s['buyer_name'] for s in response.data['results'])

        assert buyers('current') == ['This month']
        assert buyers('last') == ['Last month']
        assert buyers('all') == ['Last month', 'Long ago', 'This month']

    def test_bad_month_filter(self, auth_client):
        response = auth_client.get('/api/sales/', {'month': 'next'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_crop_filter_and_scoping(self, auth_client, other_user, make_crop, make_sale):
        okra = make_crop(name='Okra')
        make_sale(crop=okra)
        make_sale(crop=make_crop(name='Beans'))
        make_sale(owner=other_user, crop=make_crop(owner=other_user))

        response = auth_client.get('/api/sales/', {'crop': str(okra.id)})
        assert [s['crop_name'] for s in response.data['results']] == ['Okra']

        assert auth_client.get('/api/sales/').data['count'] == 2
        assert auth_client.get('/api/sales/', {'crop': 'okra'}).status_code == status.HTTP_400_BAD_REQUEST

    def test_payment_status_filter(self, auth_client, make_sale):
        make_sale(buyer_name='Settled', payment_status='Paid')
        make_sale(buyer_name='Owes us', payment_status='Pending')

        response = auth_client.get('/api/sales/', {'payment_status': 'Paid'})
        assert [s['buyer_name'] for s in response.data['results']] == ['Settled']

        response = auth_client.get('/api/sales/', {'payment_status': 'Overdue'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
