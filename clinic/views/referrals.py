from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.patient import ReferralSerializer, ReferralStatusSerializer
from clinic.services.scope import referrals_for
from clinic.views.common import audit, changed_fields, check_patient, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def referrals(request):
    if request.method == 'POST':
        s = ReferralSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        check_patient(request, s.validated_data['patient'])
        ref = s.save(referring_doctor=request.user)
        audit(request, 'CREATE', 'referral', ref.id, patient=ref.patient_id, specialist=ref.specialist_name)
        return ok(ReferralSerializer(ref).data, status=201)

    qs = referrals_for(request.user)
    status = request.query_params.get('status')
    if status and status != 'all':
        qs = qs.filter(status=status)
    return ok(ReferralSerializer(qs.order_by('-created_at'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def referral_detail(request, referral_id: int):
    ref = get_or_404(referrals_for(request.user), referral_id, 'Referral not found')
    if request.method == 'GET':
        return ok(ReferralSerializer(ref).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'referral', ref.id, patient=ref.patient_id)
        ref.delete()
        return ok(None)

    s = ReferralSerializer(ref, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if 'patient' in s.validated_data:
        check_patient(request, s.validated_data['patient'])
    ref = s.save()
    audit(request, 'UPDATE', 'referral', ref.id, fields=changed_fields(s))
    return ok(ReferralSerializer(ref).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def referral_status(request, referral_id: int):
    ref = get_or_404(referrals_for(request.user), referral_id, 'Referral not found')
    s = ReferralStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    ref.status = s.validated_data['status']
    fields = ['status', 'updated_at']
    if 'appointment_date' in s.validated_data:
        ref.appointment_date = s.validated_data['appointment_date']
        fields.append('appointment_date')
    ref.save(update_fields=fields)
    audit(request, 'STATUS', 'referral', ref.id, status=ref.status)
    return ok(ReferralSerializer(ref).data)
