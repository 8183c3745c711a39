from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.clinical import EmergencyResolveSerializer, EmergencySerializer
from clinic.services.notifications import notify_emergency
from clinic.services.scope import emergencies_for
from clinic.views.common import audit, changed_fields, check_patient, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def emergencies(request):
    if request.method == 'POST':
        s = EmergencySerializer(data=request.data)
        s.is_valid(raise_exception=True)
        check_patient(request, s.validated_data['patient'])
        record = s.save(doctor=request.user)
        audit(request, 'CREATE', 'emergency', record.id, patient=record.patient_id, severity=record.severity)
        notify_emergency(record)
        return ok(EmergencySerializer(record).data, status=201)

    qs = emergencies_for(request.user)
    if request.query_params.get('active') in ('1', 'true'):
        qs = qs.filter(resolved_at__isnull=True)
    return ok(EmergencySerializer(qs.order_by('-created_at'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def emergency_detail(request, emergency_id: int):
    record = get_or_404(emergencies_for(request.user), emergency_id, 'Emergency record not found')
    if request.method == 'GET':
        return ok(EmergencySerializer(record).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'emergency', record.id, patient=record.patient_id)
        record.delete()
        return ok(None)

    s = EmergencySerializer(record, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if 'patient' in s.validated_data:
        check_patient(request, s.validated_data['patient'])
    record = s.save()
    audit(request, 'UPDATE', 'emergency', record.id, fields=changed_fields(s))
    return ok(EmergencySerializer(record).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def emergency_resolve(request, emergency_id: int):
    record = get_or_404(emergencies_for(request.user), emergency_id, 'Emergency record not found')
    if record.resolved_at is not None:
        raise ValidationError('Emergency is already resolved')
    s = EmergencyResolveSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record.resolved_at = timezone.now()
    fields = ['resolved_at', 'updated_at']
    if s.validated_data.get('outcome'):
        record.outcome = s.validated_data['outcome']
        fields.append('outcome')
    record.save(update_fields=fields)
    audit(request, 'RESOLVE', 'emergency', record.id, outcome=record.outcome)
    return ok(EmergencySerializer(record).data)
