from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from apps.authentication.auth_backends import issue_token

pytestmark = pytest.mark.django_db


def test_bearer_token_authenticates(vendor):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(vendor.user)}')

    response = client.get('/api/v1/auth/me/')

    assert response.status_code == 200
    assert response.data['role'] == 'vendor'
    assert response.data['vendor_id'] == str(vendor.id)
    assert response.data['profile']['business_name'] == 'Vendor Co'


def test_expired_token_rejected(couple):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(couple.user, lifetime=timedelta(seconds=-1))}')

    response = client.get('/api/v1/auth/me/')

    assert response.status_code == 401
    assert response.data['message'] == 'Token has expired'


def test_garbage_token_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
    assert client.get('/api/v1/auth/me/').status_code == 401


def test_user_id_header(settings, couple):
    settings.ALLOW_USER_ID_HEADER_AUTH = True
    client = APIClient()

    response = client.get('/api/v1/auth/me/', HTTP_X_USER_ID=str(couple.user.id))

    assert response.status_code == 200
    assert response.data['couple_id'] == str(couple.id)


def test_user_id_header_disabled(settings, couple):
    settings.ALLOW_USER_ID_HEADER_AUTH = False
    client = APIClient()
    response = client.get('/api/v1/auth/me/', HTTP_X_USER_ID=str(couple.user.id))
    assert response.status_code == 401


def test_vendor_updates_business_profile(vendor_client, vendor):
    response = vendor_client.patch('/api/v1/auth/profile/update/', {
        'business_name': 'Bloom & Co',
        'category': 'Florist',
        'partner_name': 'ignored',
    }, format='json')

    assert response.status_code == 200
    vendor.refresh_from_db()
    assert vendor.business_name == 'Bloom & Co'
    assert vendor.category == 'Florist'
    assert response.data['profile']['display_name'] == 'Bloom & Co'


def test_couple_updates_partner(couple_client, couple):
    response = couple_client.patch('/api/v1/auth/profile/update/', {
        'first_name': 'Aisha', 'partner_name': 'Daniel', 'phone': '+60123456789',
    }, format='json')

    assert response.status_code == 200
    couple.refresh_from_db()
    assert couple.partner_name == 'Daniel'
    assert response.data['full_name'] == 'Aisha'


def test_invalid_phone(couple_client):
    response = couple_client.patch('/api/v1/auth/profile/update/', {'phone': 'call me'}, format='json')
    assert response.status_code == 400


def test_health_check(api_client):
    response = api_client.get('/api/v1/auth/health/')
    assert response.status_code == 200
    assert response.data['database'] == 'healthy'
