"""
Tests for the read-only diagnosis history.
"""
import pytest
from rest_framework import status

from diagnosis.models import DiagnosisStatus

pytestmark = pytest.mark.django_db


def test_history_is_scoped_and_filterable(auth_client, other_user, make_diagnosis):
    make_diagnosis(crop='Tomato', session_id='s-1', disease='Early blight')
    make_diagnosis(crop='tomato', session_id='s-2', status=DiagnosisStatus.RESOLVED)
    make_diagnosis(crop='Rice', session_id='s-1')
    make_diagnosis(owner=other_user, crop='Tomato', session_id='s-1')

    assert auth_client.get('/api/diagnoses/').data['count'] == 3
    assert auth_client.get('/api/diagnoses/', {'session_id': 's-1'}).data['count'] == 2
    assert auth_client.get('/api/diagnoses/', {'crop': 'TOMATO'}).data['count'] == 2

    response = auth_client.get('/api/diagnoses/', {'status': 'Resolved'})
    assert [d['session_id'] for d in response.data['results']] == ['s-2']


def test_history_is_read_only(auth_client, make_diagnosis):
    diagnosis = make_diagnosis()

    response = auth_client.post('/api/diagnoses/', {'crop': 'Rice', 'diagnosis_type': 'text'})
    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED

    response = auth_client.delete(f'/api/diagnoses/{diagnosis.id}/')
    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


def test_other_farmers_diagnosis_not_found(auth_client, other_user, make_diagnosis):
    diagnosis = make_diagnosis(owner=other_user)

    response = auth_client.get(f'/api/diagnoses/{diagnosis.id}/')

    assert response.status_code == status.HTTP_404_NOT_FOUND
