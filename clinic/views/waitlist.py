from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin, is_admin
from clinic.serializers.operations import WaitlistEntrySerializer, WaitlistStatusSerializer
from clinic.services.scope import waitlist_for
from clinic.views.common import audit, check_patient, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def waitlist(request):
    if request.method == 'POST':
        s = WaitlistEntrySerializer(data=request.data)
        s.is_valid(raise_exception=True)
        check_patient(request, s.validated_data['patient'])
        doctor = s.validated_data.get('doctor') if is_admin(request.user) else None
        entry = s.save(doctor=doctor or request.user)
        audit(request, 'CREATE', 'waitlist', entry.id, patient=entry.patient_id, priority=entry.priority)
        return ok(WaitlistEntrySerializer(entry).data, status=201)

    qs = waitlist_for(request.user)
    status = request.query_params.get('status', 'waiting')
    if status != 'all':
        qs = qs.filter(status=status)
    return ok(WaitlistEntrySerializer(qs.order_by('-priority', 'created_at'), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def waitlist_status(request, entry_id: int):
    entry = get_or_404(waitlist_for(request.user), entry_id, 'Waitlist entry not found')
    s = WaitlistStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry.status = s.validated_data['status']
    entry.save(update_fields=['status'])
    audit(request, 'STATUS', 'waitlist', entry.id, status=entry.status)
    return ok(WaitlistEntrySerializer(entry).data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def waitlist_detail(request, entry_id: int):
    entry = get_or_404(waitlist_for(request.user), entry_id, 'Waitlist entry not found')
    audit(request, 'DELETE', 'waitlist', entry.id, patient=entry.patient_id)
    entry.delete()
    return ok(None)
