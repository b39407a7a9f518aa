"""
Tests for registration, JWT login, profile and logout.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework import status

User = get_user_model()

pytestmark = pytest.mark.django_db


def register(client, **overrides):
    payload = {
        'username': 'lakshmi',
        'email': 'lakshmi@example.com',
        'phone': '+91 98450-12345',
        'password': 'Harvest#2024',
        'password_confirm': 'Harvest#2024',
        'farm_name': 'Sunrise Farm',
        'preferred_language': 'kn',
    }
    payload.update(overrides)
    return client.post('/api/auth/register/', payload, format='json')


class TestRegistration:

    def test_register_returns_tokens(self, api_client):
        response = register(api_client)

        assert response.status_code == status.HTTP_201_CREATED
        assert set(response.data['tokens']) == {'access', 'refresh'}
        user = User.objects.get(username='lakshmi')
        assert user.phone == '+919845012345'
        assert user.check_password('Harvest#2024')

    def test_password_mismatch(self, api_client):
        response = register(api_client, password_confirm='Different#2024')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data

    def test_phone_must_be_digits(self, api_client):
        response = register(api_client, phone='call me')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'phone' in response.data


class TestSession:

    def test_login_includes_user(self, api_client, user):
        response = api_client.post('/api/auth/login/', {'username': 'ravi', 'password': 'testpass123'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['username'] == 'ravi'

    def test_wrong_password(self, api_client, user):
        response = api_client.post('/api/auth/login/', {'username': 'ravi', 'password': 'nope'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_profile_update(self, auth_client, user):
        response = auth_client.patch('/api/auth/profile/', {'farm_name': 'Riverbank'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.farm_name == 'Riverbank'

    def test_logout_blacklists_refresh_token(self, api_client, user):
        tokens = api_client.post('/api/auth/login/', {'username': 'ravi', 'password': 'testpass123'}).data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.post('/api/auth/logout/', {'refresh_token': tokens['refresh']})
        assert response.status_code == status.HTTP_200_OK

        response = api_client.post('/api/auth/token/refresh/', {'refresh': tokens['refresh']})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_requires_token(self, auth_client):
        response = auth_client.post('/api/auth/logout/', {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'MISSING_PARAMETER'
