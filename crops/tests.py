"""
Tests for crop tracking: stage-derived progress and the crop API.
"""
import pytest
from datetime import date, timedelta
from django.utils import timezone
from rest_framework import status

from crops.models import Crop, CropStage, STAGE_PROGRESS, UnrecognizedStage, calculate_progress


class TestProgressLookup:

    @pytest.mark.parametrize('stage, expected', [
        ('Sowing', 5),
        ('Growing', 40),
        ('Flowering', 70),
        ('Harvesting', 95),
        ('Harvested', 100),
    ])
    def test_stage_progress(self, stage, expected):
        assert calculate_progress(stage) == expected

    def test_every_stage_has_progress(self):
        assert set(STAGE_PROGRESS) == set(CropStage)

    @pytest.mark.parametrize('stage', ['Dormant', '', None])
    def test_unrecognized_stage(self, stage):
        with pytest.raises(UnrecognizedStage):
            calculate_progress(stage)


@pytest.mark.django_db
class TestCropModel:

    def test_progress_derived_on_save(self, make_crop):
        crop = make_crop(current_stage=CropStage.FLOWERING)
        assert crop.progress == 70

        crop.current_stage = CropStage.HARVESTED
        crop.save(update_fields=['current_stage'])
        crop.refresh_from_db()
        assert crop.progress == 100

    def test_field_size_value(self, make_crop):
        assert make_crop(field_size='2.5 acres').field_size_value == 2.5
        assert make_crop(field_size='half acre').field_size_value == 0.0


@pytest.mark.django_db
class TestCropAPI:

    def payload(self, **overrides):
        data = {
            'name': 'Brinjal',
            'crop_type': 'Vegetable',
            'variety': 'Pusa Purple',
            'field_size': '1.5 acres',
            'location': 'North plot',
            'current_stage': 'Growing',
            'start_date': '2024-01-10',
            'expected_harvest': '2024-04-10',
        }
        data.update(overrides)
        return data

    def test_create_derives_progress(self, auth_client, user):
        response = auth_client.post('/api/crops/', self.payload(progress=99), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['progress'] == 40
        assert response.data['field_size_value'] == 1.5
        assert Crop.objects.get(id=response.data['id']).owner == user

    @pytest.mark.parametrize('overrides, field', [
        ({'current_stage': 'Dormant'}, 'current_stage'),
        ({'field_size': 'large'}, 'field_size'),
        ({'expected_harvest': '2023-12-01'}, 'expected_harvest'),
        ({'crop_type': 'Tree'}, 'crop_type'),
    ])
    def test_create_validation(self, auth_client, overrides, field):
        response = auth_client.post('/api/crops/', self.payload(**overrides), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    def test_list_is_scoped_and_newest_first(self, auth_client, other_user, make_crop):
        now = timezone.now()
        make_crop(name='First', created_at=now - timedelta(days=2))
        make_crop(name='Second', created_at=now - timedelta(days=1))
        make_crop(name='Foreign', owner=other_user)

        response = auth_client.get('/api/crops/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert [c['name'] for c in response.data['results']] == ['Second', 'First']

    def test_filter_by_stage(self, auth_client, make_crop):
        make_crop(name='Young', current_stage=CropStage.SOWING)
        make_crop(name='Ripe', current_stage=CropStage.HARVESTING)

        response = auth_client.get('/api/crops/', {'stage': 'Harvesting'})

        assert [c['name'] for c in response.data['results']] == ['Ripe']

    def test_filter_by_crop_type(self, auth_client, make_crop):
        make_crop(name='Paddy', crop_type='Grain')
        make_crop(name='Okra', crop_type='Vegetable')

        response = auth_client.get('/api/crops/', {'crop_type': 'Grain'})

        assert [c['name'] for c in response.data['results']] == ['Paddy']

    def test_unknown_stage_filter_is_rejected(self, auth_client, make_crop):
        make_crop()

        response = auth_client.get('/api/crops/', {'stage': 'Ripening'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'stage' in response.data

    def test_other_farmers_crop_is_not_found(self, auth_client, other_user, make_crop):
        crop = make_crop(owner=other_user)

        assert auth_client.get(f'/api/crops/{crop.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert auth_client.delete(f'/api/crops/{crop.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert Crop.objects.filter(id=crop.id).exists()

    def test_stage_update_moves_progress(self, auth_client, make_crop):
        crop = make_crop(current_stage=CropStage.GROWING)

        response = auth_client.patch(f'/api/crops/{crop.id}/', {'current_stage': 'Harvesting'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['progress'] == 95


@pytest.mark.django_db
class TestHarvestEndpoints:

    def test_due_for_harvest(self, auth_client, make_crop):
        today = timezone.localdate()
        make_crop(name='Soon', when_to_pluck=today + timedelta(days=3))
        make_crop(name='Today', when_to_pluck=today)
        make_crop(name='Later', when_to_pluck=today + timedelta(days=10))
        make_crop(name='Done', when_to_pluck=today + timedelta(days=1), current_stage=CropStage.HARVESTED)
        make_crop(name='Missed', when_to_pluck=today - timedelta(days=1))
        make_crop(name='Unplanned')

        response = auth_client.get('/api/crops/due-for-harvest/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['days'] == 7
        assert [c['name'] for c in response.data['crops']] == ['Today', 'Soon']

        response = auth_client.get('/api/crops/due-for-harvest/', {'days': 15})
        assert response.data['count'] == 3

    @pytest.mark.parametrize('days', ['soon', '-1'])
    def test_due_for_harvest_bad_days(self, auth_client, days):
        response = auth_client.get('/api/crops/due-for-harvest/', {'days': days})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'INVALID_PARAMETER'

    def test_harvest_calendar(self, auth_client, make_crop):
        make_crop(name='Okra', start_date=date(2024, 1, 5), expected_harvest=date(2024, 3, 20),
                  when_to_pluck=date(2024, 3, 18))
        make_crop(name='Peas', start_date=date(2024, 3, 1), expected_harvest=date(2024, 5, 1))

        response = auth_client.get('/api/crops/harvest-calendar/', {'year': 2024, 'month': 3})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_events'] == 3
        assert [d['date'] for d in response.data['days']] == ['2024-03-01', '2024-03-18', '2024-03-20']
        assert response.data['days'][0]['events'][0]['event'] == 'planting'

    def test_harvest_calendar_rejects_bad_month(self, auth_client):
        response = auth_client.get('/api/crops/harvest-calendar/', {'year': 2024, 'month': 13})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
