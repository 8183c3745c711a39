import pytest
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditLog, Profile, User
from clinic.services.passwords import encode_uid

pytestmark = pytest.mark.django_db


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', role='doctor')
    r = client.post(reverse('login_view'), {'username': 'u_jwt', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access'] and r.data['jwt_refresh'] and r.data['token']
    assert r.data['role'] == 'doctor'
    assert r.data['user']['username'] == 'u_jwt'


def test_login_failure_is_audited_with_username_only():
    client = APIClient()
    User.objects.create_user(username='u1', password='P@ssw0rd1', role='doctor')
    r = client.post(reverse('login_view'), {'username': 'u1', 'password': 'wrong'}, format='json')
    assert r.status_code == 401
    assert r.data['ok'] is False
    row = AuditLog.objects.get(action='LOGIN_FAILED')
    assert row.user is None
    assert row.details == {'username': 'u1'}


def test_login_missing_fields_is_400():
    r = APIClient().post(reverse('login_view'), {'username': 'someone'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'


def test_token_and_bearer_both_authenticate():
    User.objects.create_user(username='u2', password='P@ssw0rd1', role='doctor')
    login = APIClient().post(reverse('login_view'), {'username': 'u2', 'password': 'P@ssw0rd1'}, format='json')

    legacy = APIClient()
    legacy.credentials(HTTP_AUTHORIZATION=f"Token {login.data['token']}")
    assert legacy.get(reverse('me')).status_code == 200

    bearer = APIClient()
    bearer.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['jwt_access']}")
    r = bearer.get(reverse('me'))
    assert r.status_code == 200
    assert r.data['role'] == 'doctor'


def test_signup_never_grants_admin_role():
    payload = {
        'username': 'newdoc',
        'password': 'Str0ng-Passw0rd!',
        'email': 'newdoc@example.com',
        'full_name': 'Dr. New Doc',
        'specialization': 'Pediatrics',
        'role': 'admin',
    }
    r = APIClient().post(reverse('signup_view'), payload, format='json')
    assert r.status_code == 201
    u = User.objects.get(username='newdoc')
    assert u.role == 'doctor'
    assert Profile.objects.get(user=u).specialization == 'Pediatrics'


def test_signup_rejects_duplicate_username():
    User.objects.create_user(username='taken', password='P@ssw0rd1')
    payload = {'username': 'Taken', 'password': 'Str0ng-Passw0rd!', 'email': 'x@example.com', 'full_name': 'X'}
    r = APIClient().post(reverse('signup_view'), payload, format='json')
    assert r.status_code == 400
    assert 'username' in r.data['error']['message']


def test_refresh_and_logout_blacklists_token():
    User.objects.create_user(username='u3', password='P@ssw0rd1', role='doctor')
    client = APIClient()
    login = client.post(reverse('login_view'), {'username': 'u3', 'password': 'P@ssw0rd1'}, format='json')
    refresh = login.data['jwt_refresh']

    r = client.post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['jwt_access']}")
    r = client.post(reverse('jwt_logout'), {'refresh': refresh}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1

    client.credentials()
    r = client.post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert r.status_code == 401


def test_anonymous_requests_are_rejected():
    client = APIClient()
    for name in ('patients', 'dashboard_stats', 'appointments', 'fn_health_insights'):
        r = client.get(reverse(name)) if name != 'fn_health_insights' else client.post(reverse(name), {}, format='json')
        assert r.status_code == 401, name


def test_audit_logs_are_admin_only(doctor_client, admin_client):
    assert doctor_client.get(reverse('audit_logs')).status_code == 403
    assert admin_client.get(reverse('audit_logs')).status_code == 200


def test_profile_update_cannot_self_verify(doctor_client, doctor):
    r = doctor_client.put(reverse('profile'), {'phone': '+1 555 0100', 'verification_status': 'verified'}, format='json')
    assert r.status_code == 200
    profile = Profile.objects.get(user=doctor)
    assert profile.phone == '+1 555 0100'
    assert profile.verification_status == 'pending'


def test_healthz():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


@pytest.mark.parametrize('forwarded,expected', [
    ('not-an-ip', '127.0.0.1'),
    ('203.0.113.7, 10.0.0.1', '203.0.113.7'),
    ('2001:db8::1', '2001:db8::1'),
])
def test_audit_ip_ignores_malformed_forwarded_for(forwarded, expected):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'ghost', 'password': 'x'}, format='json',
                    HTTP_X_FORWARDED_FOR=forwarded)
    assert r.status_code == 401
    assert AuditLog.objects.get(action='LOGIN_FAILED').ip_address == expected


def test_password_reset_mails_link_and_hides_unknown_addresses():
    User.objects.create_user(username='u5', password='P@ssw0rd1', role='doctor', email='u5@example.com')
    client = APIClient()

    r = client.post(reverse('password_reset'), {'email': 'nobody@example.com'}, format='json')
    assert r.status_code == 200
    assert r.data == {'ok': True}
    assert mail.outbox == []

    r = client.post(reverse('password_reset'), {'email': 'U5@example.com'}, format='json')
    assert r.status_code == 200
    assert r.data == {'ok': True}
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ['u5@example.com']
    assert 'reset-password?uid=' in mail.outbox[0].body
    assert AuditLog.objects.filter(action='PASSWORD_RESET_REQUESTED').count() == 2


def test_password_reset_confirm_sets_new_password_once():
    user = User.objects.create_user(username='u6', password='P@ssw0rd1', role='doctor', email='u6@example.com')
    client = APIClient()
    login = client.post(reverse('login_view'), {'username': 'u6', 'password': 'P@ssw0rd1'}, format='json')
    body = {'uid': encode_uid(user), 'token': default_token_generator.make_token(user),
            'new_password': 'N3w-Secret-42', 'confirm_password': 'N3w-Secret-42'}

    r = client.post(reverse('password_reset_confirm'), body, format='json')
    assert r.status_code == 200
    user.refresh_from_db()
    assert user.check_password('N3w-Secret-42')
    assert AuditLog.objects.filter(action='PASSWORD_RESET', user=user).exists()

    # the old session and the used link are both dead
    client.credentials(HTTP_AUTHORIZATION=f"Token {login.data['token']}")
    assert client.get(reverse('me')).status_code == 401
    client.credentials()
    r = client.post(reverse('password_reset_confirm'), body, format='json')
    assert r.status_code == 400
    assert 'token' in r.data['error']['message']


@pytest.mark.parametrize('override,field', [
    ({'token': 'bogus'}, 'token'),
    ({'uid': 'xx'}, 'token'),
    ({'confirm_password': 'Something-else-1'}, 'confirm_password'),
    ({'new_password': '123', 'confirm_password': '123'}, 'new_password'),
])
def test_password_reset_confirm_rejects_bad_input(override, field):
    user = User.objects.create_user(username='u7', password='P@ssw0rd1', role='doctor', email='u7@example.com')
    body = {'uid': encode_uid(user), 'token': default_token_generator.make_token(user),
            'new_password': 'N3w-Secret-42', 'confirm_password': 'N3w-Secret-42'}
    body.update(override)
    r = APIClient().post(reverse('password_reset_confirm'), body, format='json')
    assert r.status_code == 400
    assert field in r.data['error']['message']
    user.refresh_from_db()
    assert user.check_password('P@ssw0rd1')


def test_password_change_requires_current_password(doctor_client, doctor):
    r = doctor_client.post(reverse('password_change'),
                           {'current_password': 'wrong', 'new_password': 'N3w-Secret-42'}, format='json')
    assert r.status_code == 400
    assert 'current_password' in r.data['error']['message']

    r = doctor_client.post(reverse('password_change'),
                           {'current_password': 'P@ssw0rd1', 'new_password': 'N3w-Secret-42'}, format='json')
    assert r.status_code == 200
    assert r.data['token'] and r.data['jwt_access']
    doctor.refresh_from_db()
    assert doctor.check_password('N3w-Secret-42')
    assert AuditLog.objects.filter(action='PASSWORD_CHANGE', user=doctor).exists()
