from datetime import date

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import Patient, Profile, User


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def doctor(db):
    u = User.objects.create_user(username='doc', password='P@ssw0rd1', role='doctor')
    Profile.objects.create(user=u, full_name='Dr. Asha Menon', specialization='General Medicine')
    return u


@pytest.fixture
def other_doctor(db):
    return User.objects.create_user(username='doc2', password='P@ssw0rd1', role='doctor')


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')


@pytest.fixture
def patient(doctor):
    return Patient.objects.create(
        caretag_id='CT-2024-0001',
        full_name='Priya Sharma',
        date_of_birth=date(1990, 5, 17),
        gender='female',
        blood_group='O+',
        allergies=['Penicillin'],
        chronic_conditions=['Asthma'],
        phone='+91 9876543210',
        email='priya@example.com',
        primary_doctor=doctor,
    )


@pytest.fixture
def doctor_client(doctor):
    client = APIClient()
    client.force_authenticate(user=doctor)
    return client


@pytest.fixture
def other_client(other_doctor):
    client = APIClient()
    client.force_authenticate(user=other_doctor)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
