"""
Dashboard and analytics endpoints.

Counters are computed from the database on every request and respect
the caller's scope: admins see clinic-wide numbers, doctors their own.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.clinical import AppointmentSerializer, EmergencySerializer
from clinic.serializers.patient import PatientSerializer, VitalsSerializer
from clinic.services import dashboard
from clinic.services.analytics import build_analytics
from clinic.views.common import ok


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def stats(request):
    return ok(dashboard.dashboard_stats(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def recent_patients(request):
    return ok(PatientSerializer(dashboard.recent_patients(request.user), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def today_appointments(request):
    return ok(AppointmentSerializer(dashboard.today_appointments(request.user), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def active_emergencies(request):
    return ok(EmergencySerializer(dashboard.active_emergencies(request.user), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def recent_vitals(request):
    qs = dashboard.recent_vitals(request.user)
    data = VitalsSerializer(qs, many=True).data
    # the vitals widget shows who the reading belongs to
    for row, v in zip(data, qs):
        row['patient_name'] = v.patient.full_name
    return ok(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def analytics(request):
    return ok(build_analytics(request.user))
