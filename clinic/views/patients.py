"""
Patient registry views.

Every endpoint works on the set of patients the caller can see (see
``clinic.services.patients.visible_patients``); a patient outside that
set reads as missing.  Vitals, records, lab results and referrals are
nested under the patient they belong to.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin, is_admin
from clinic.serializers.patient import (
    LabResultSerializer,
    MedicalRecordSerializer,
    PatientListQuerySerializer,
    PatientSerializer,
    ReferralSerializer,
    VitalsSerializer,
)
from clinic.services.notifications import notify_vitals
from clinic.services.patients import create_patient, find_by_caretag, get_visible_patient, search_patients, visible_patients
from clinic.services.timeline import patient_timeline
from clinic.views.common import audit, changed_fields, ok, paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patients(request):
    if request.method == 'POST':
        s = PatientSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        patient = create_patient(request.user, s.validated_data, request=request)
        return ok(PatientSerializer(patient).data, status=201)

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = search_patients(visible_patients(request.user), q.validated_data.get('q')).order_by('-created_at')
    qs, pagination = paginate(qs, q.validated_data.get('page'), q.validated_data.get('pageSize'))
    return ok(PatientSerializer(qs, many=True).data, pagination=pagination)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_detail(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    if request.method == 'GET':
        return ok(PatientSerializer(patient).data)

    if request.method == 'DELETE':
        if not is_admin(request.user) and patient.primary_doctor_id != request.user.id:
            raise PermissionDenied('Only an admin or the primary doctor can delete this patient')
        audit(request, 'DELETE', 'patient', patient.id, caretag_id=patient.caretag_id, full_name=patient.full_name)
        patient.delete()
        return ok(None)

    s = PatientSerializer(patient, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    patient = s.save()
    audit(request, 'UPDATE', 'patient', patient.id, fields=changed_fields(s))
    return ok(PatientSerializer(patient).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_by_caretag(request, caretag_id: str):
    patient = find_by_caretag(request.user, caretag_id)
    return ok(PatientSerializer(patient).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def timeline(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    return ok(patient_timeline(patient))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_vitals(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    if request.method == 'POST':
        s = VitalsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vitals = s.save(patient=patient, recorded_at=s.validated_data.get('recorded_at') or timezone.now())
        audit(request, 'CREATE', 'vitals', vitals.id, patient=patient.id)
        findings = notify_vitals(vitals)
        return ok(VitalsSerializer(vitals).data, status=201, critical=findings or [])
    qs = patient.vitals.order_by('-recorded_at')
    return ok(VitalsSerializer(qs, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_records(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    if request.method == 'POST':
        s = MedicalRecordSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        record = s.save(patient=patient, doctor=request.user)
        audit(request, 'CREATE', 'medical_record', record.id, patient=patient.id, record_type=record.record_type)
        return ok(MedicalRecordSerializer(record).data, status=201)
    qs = patient.medical_records.select_related('doctor', 'doctor__profile').order_by('-created_at')
    return ok(MedicalRecordSerializer(qs, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_labs(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    if request.method == 'POST':
        s = LabResultSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        lab = s.save(patient=patient, doctor=request.user)
        audit(request, 'CREATE', 'lab_result', lab.id, patient=patient.id, test_name=lab.test_name)
        return ok(LabResultSerializer(lab).data, status=201)
    qs = patient.lab_results.order_by('-created_at')
    return ok(LabResultSerializer(qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def patient_referrals(request, patient_id: int):
    patient = get_visible_patient(request.user, patient_id)
    qs = patient.referrals.select_related('patient').order_by('-created_at')
    return ok(ReferralSerializer(qs, many=True).data)
