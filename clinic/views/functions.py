"""
AI-assisted clinical helpers under ``/api/functions/``.

All endpoints require a doctor or admin; the ones that call the LLM
gateway share the ``ai`` throttle scope.  Gateway failures surface through ``GatewayError`` with
the status the client should see (429, 402 or 500).
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.functions import (
    DrugInteractionsRequestSerializer,
    HealthInsightsRequestSerializer,
    ReminderRequestSerializer,
    SmartDiagnosisRequestSerializer,
)
from clinic.services import insights, interactions, reminders


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def health_insights(request):
    s = HealthInsightsRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(insights.health_insights(request.user, s.validated_data['patientId']))


health_insights.cls.throttle_scope = 'ai'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def smart_diagnosis(request):
    s = SmartDiagnosisRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    result = insights.smart_diagnosis(
        request.user,
        vd['patientId'],
        symptoms=vd.get('symptoms'),
        chief_complaint=vd.get('chiefComplaint'),
        duration=vd.get('duration'),
        severity=vd.get('severity'),
        request=request,
    )
    return Response(result)


smart_diagnosis.cls.throttle_scope = 'ai'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def appointment_reminder(request):
    s = ReminderRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    return Response(reminders.send_reminder(request.user, vd['appointmentId'], vd['reminderType'], request=request))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def drug_interactions(request):
    s = DrugInteractionsRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(interactions.check_interactions(s.validated_data['drugs']))


drug_interactions.cls.throttle_scope = 'ai'
