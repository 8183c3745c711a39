import json
from datetime import timedelta

import pytest
import requests
from django.urls import reverse
from django.utils import timezone

from clinic.models import Appointment, AuditLog
from clinic.services import llm

pytestmark = pytest.mark.django_db


class FakeResponse:
    def __init__(self, status_code=200, content=None, body=None):
        self.status_code = status_code
        self._body = body if body is not None else {'choices': [{'message': {'content': content or ''}}]}
        self.text = json.dumps(self._body)

    def json(self):
        return self._body


class GatewayCalls(list):
    """Request bodies sent to the fake gateway, plus the reply it gives."""

    def __init__(self):
        super().__init__()
        self.response = FakeResponse(content='{}')

    def respond(self, response):
        self.response = response


@pytest.fixture
def gateway(monkeypatch, settings):
    settings.LLM_API_KEY = 'test-key'
    calls = GatewayCalls()

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers})
        return calls.response

    monkeypatch.setattr(llm.requests, 'post', fake_post)
    return calls


# ----------------------------------------------------------------------
# gateway error mapping
# ----------------------------------------------------------------------
def test_missing_api_key_is_500(doctor_client, patient, settings):
    settings.LLM_API_KEY = ''
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 500
    assert r.data['error']['message'] == 'LLM_API_KEY not configured'


@pytest.mark.parametrize('upstream,message', [
    (429, llm.RATE_LIMITED),
    (402, llm.CREDITS_EXHAUSTED),
])
def test_rate_limit_and_credit_errors_pass_through(doctor_client, patient, gateway, upstream, message):
    gateway.respond(FakeResponse(status_code=upstream, body={'error': 'x'}))
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == upstream
    assert r.data['error']['message'] == message


def test_other_upstream_errors_become_500(doctor_client, patient, gateway):
    gateway.respond(FakeResponse(status_code=503, body={'error': 'down'}))
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 500
    assert r.data['error']['message'] == 'AI API error: 503'


def test_unreachable_gateway_is_500(doctor_client, patient, monkeypatch, settings):
    settings.LLM_API_KEY = 'test-key'

    def boom(*args, **kwargs):
        raise requests.ConnectionError('connection refused')

    monkeypatch.setattr(llm.requests, 'post', boom)
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 500
    assert r.data['error']['message'].startswith('AI gateway unreachable')


# ----------------------------------------------------------------------
# health insights
# ----------------------------------------------------------------------
def test_health_insights_parses_fenced_json(doctor_client, patient, gateway):
    payload = {'overallStatus': 'good', 'summary': 'Stable', 'risks': [], 'recommendations': [],
               'vitalsTrend': {'heartRate': 'stable'}, 'nextSteps': ['Annual review']}
    gateway.respond(FakeResponse(content='```json\n' + json.dumps(payload) + '\n```'))
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 200
    assert r.data == payload

    sent = gateway[0]
    assert sent['headers']['Authorization'] == 'Bearer test-key'
    prompt = sent['json']['messages'][1]['content']
    assert 'Priya Sharma' in prompt
    assert 'Allergies: Penicillin' in prompt


def test_health_insights_unparseable_reply_uses_defaults(doctor_client, patient, gateway):
    gateway.respond(FakeResponse(content='I am not able to produce JSON today.'))
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 200
    assert r.data['overallStatus'] == 'moderate'
    assert r.data['nextSteps'] == ['Review patient vitals', 'Schedule follow-up appointment']


def test_health_insights_non_object_reply_uses_defaults(doctor_client, patient, gateway):
    gateway.respond(FakeResponse(content='["risk one", "risk two"]'))
    r = doctor_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 200
    assert r.data['overallStatus'] == 'moderate'


def test_health_insights_doctor_without_access_is_403(other_client, patient, gateway):
    r = other_client.post(reverse('fn_health_insights'), {'patientId': patient.id}, format='json')
    assert r.status_code == 403
    assert gateway == []


def test_health_insights_admin_missing_patient_is_404(admin_client, gateway):
    r = admin_client.post(reverse('fn_health_insights'), {'patientId': 999999}, format='json')
    assert r.status_code == 404


def test_health_insights_requires_patient_id(doctor_client, gateway):
    r = doctor_client.post(reverse('fn_health_insights'), {}, format='json')
    assert r.status_code == 400


# ----------------------------------------------------------------------
# smart diagnosis
# ----------------------------------------------------------------------
def test_smart_diagnosis_unknown_patient_is_404(other_client, patient, gateway):
    r = other_client.post(reverse('fn_smart_diagnosis'), {'patientId': patient.id, 'symptoms': ['cough']},
                          format='json')
    assert r.status_code == 404
    assert r.data['error']['message'] == 'Patient not found or access denied'


def test_smart_diagnosis_adds_disclaimer_and_audits(doctor_client, patient, gateway):
    gateway.respond(FakeResponse(content=json.dumps({
        'chiefComplaint': 'Cough',
        'differentialDiagnoses': [{'diagnosis': 'Asthma exacerbation', 'probability': 'high'}],
    })))
    body = {'patientId': patient.id, 'symptoms': ['cough', 'wheeze'], 'chiefComplaint': 'Cough for 3 days',
            'duration': '3 days', 'severity': 'moderate'}
    r = doctor_client.post(reverse('fn_smart_diagnosis'), body, format='json')
    assert r.status_code == 200
    assert r.data['patientId'] == patient.id
    assert r.data['disclaimer'].startswith('This is AI-assisted decision support')
    assert r.data['generatedAt']

    prompt = gateway[0]['json']['messages'][1]['content']
    assert 'Symptoms: cough, wheeze' in prompt
    assert 'No recent vitals recorded' in prompt

    row = AuditLog.objects.get(action='AI_DIAGNOSIS')
    assert row.entity_id == str(patient.id)
    assert row.details['differentials'] == 1
    assert row.details['symptoms'] == ['cough', 'wheeze']


def test_smart_diagnosis_fallback_keeps_chief_complaint(doctor_client, patient, gateway):
    gateway.respond(FakeResponse(content='not json'))
    r = doctor_client.post(reverse('fn_smart_diagnosis'),
                           {'patientId': patient.id, 'chiefComplaint': 'Headache'}, format='json')
    assert r.status_code == 200
    assert r.data['chiefComplaint'] == 'Headache'
    assert r.data['differentialDiagnoses'] == []


# ----------------------------------------------------------------------
# appointment reminder
# ----------------------------------------------------------------------
def test_reminder_for_own_appointment(doctor_client, doctor, patient):
    apt = Appointment.objects.create(patient=patient, doctor=doctor,
                                     scheduled_at=timezone.now() + timedelta(days=1), reason='Follow-up')
    r = doctor_client.post(reverse('fn_appointment_reminder'), {'appointmentId': apt.id, 'reminderType': 'email'},
                           format='json')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['details']['reminderType'] == 'email'
    assert 'Reason: Follow-up' in r.data['details']['text']
    row = AuditLog.objects.get(action='REMINDER_SENT')
    assert row.details['reminder_type'] == 'email'
    assert row.details['patient_name'] == 'Priya Sharma'


def test_reminder_for_someone_elses_appointment_is_403(other_client, doctor, patient):
    apt = Appointment.objects.create(patient=patient, doctor=doctor, scheduled_at=timezone.now())
    r = other_client.post(reverse('fn_appointment_reminder'), {'appointmentId': apt.id}, format='json')
    assert r.status_code == 403
    assert not AuditLog.objects.filter(action='REMINDER_SENT').exists()


def test_admin_may_send_any_reminder(admin_client, doctor, patient):
    apt = Appointment.objects.create(patient=patient, doctor=doctor, scheduled_at=timezone.now())
    r = admin_client.post(reverse('fn_appointment_reminder'), {'appointmentId': apt.id}, format='json')
    assert r.status_code == 200
    assert r.data['details']['reminderType'] == 'sms'


def test_reminder_missing_appointment_is_404(doctor_client):
    r = doctor_client.post(reverse('fn_appointment_reminder'), {'appointmentId': 424242}, format='json')
    assert r.status_code == 404


# ----------------------------------------------------------------------
# drug interactions
# ----------------------------------------------------------------------
def test_drug_interactions_needs_two_drugs(doctor_client, gateway):
    r = doctor_client.post(reverse('fn_drug_interactions'), {'drugs': ['Warfarin', '  ']}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Please provide at least 2 drugs to check for interactions'
    assert gateway == []


def test_drug_interactions(doctor_client, gateway):
    found = {'interactions': [{'drug1': 'Warfarin', 'drug2': 'Aspirin', 'severity': 'high',
                               'description': 'Bleeding risk', 'recommendation': 'Avoid'}]}
    gateway.respond(FakeResponse(content=json.dumps(found)))
    r = doctor_client.post(reverse('fn_drug_interactions'), {'drugs': ['Warfarin', 'Aspirin']}, format='json')
    assert r.status_code == 200
    assert r.data == found
    assert 'Medications to check: Warfarin, Aspirin' in gateway[0]['json']['messages'][1]['content']
