"""
Tests for accounts app authentication.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from dashboard import shell as shell_registry

User = get_user_model()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(api_client):
    user = User.objects.create_user(username='admin', is_staff=True)
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client, user


@pytest.fixture(autouse=True)
def close_shells():
    yield
    shell_registry.close_all()


@pytest.mark.django_db
class TestAuthentication:

    def test_login_success(self, api_client):
        response = api_client.post('/api/v1/auth/login/', {
            'password': 'test-admin-password'
        }, format='json')
        assert response.status_code == 200
        assert 'token' in response.data
        assert response.data['user']['is_staff'] is True
        assert User.objects.filter(username='admin', is_staff=True).exists()

    def test_login_token_opens_admin_endpoints(self, api_client):
        response = api_client.post('/api/v1/auth/login/', {'password': 'test-admin-password'}, format='json')
        token = response.data['token']
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get('/api/v1/admin/cards/')
        assert response.status_code == 200

    def test_login_reuses_admin_user(self, api_client):
        api_client.post('/api/v1/auth/login/', {'password': 'test-admin-password'}, format='json')
        api_client.post('/api/v1/auth/login/', {'password': 'test-admin-password'}, format='json')
        assert User.objects.filter(username='admin').count() == 1

    def test_login_wrong_password(self, api_client):
        response = api_client.post('/api/v1/auth/login/', {
            'password': 'wrongpassword'
        }, format='json')
        assert response.status_code == 401
        assert response.data['error']['code'] == 'INVALID_PASSWORD'

    def test_login_missing_fields(self, api_client):
        response = api_client.post('/api/v1/auth/login/', {}, format='json')
        assert response.status_code == 400

    def test_login_disabled_without_password(self, api_client, settings):
        settings.ADMIN_PASSWORD = ''
        response = api_client.post('/api/v1/auth/login/', {'password': ''}, format='json')
        assert response.status_code in (400, 503)
        response = api_client.post('/api/v1/auth/login/', {'password': 'anything'}, format='json')
        assert response.status_code == 503

    def test_me_endpoint_authenticated(self, admin_client):
        client, user = admin_client
        response = client.get('/api/v1/auth/me/')
        assert response.status_code == 200
        assert response.data['user']['username'] == user.username

    def test_me_endpoint_unauthenticated(self, api_client):
        response = api_client.get('/api/v1/auth/me/')
        assert response.status_code == 401

    def test_admin_endpoints_reject_non_staff(self, api_client):
        user = User.objects.create_user(username='visitor')
        refresh = RefreshToken.for_user(user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
        assert api_client.get('/api/v1/admin/cards/').status_code == 403

    def test_logout_closes_shell(self, admin_client):
        client, user = admin_client
        shell = shell_registry.shell_for(user)
        assert shell.is_open

        response = client.post('/api/v1/auth/logout/')
        assert response.status_code == 200
        assert not shell.is_open
        assert not shell.aggregator.is_subscribed('contact_messages')
