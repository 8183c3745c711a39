"""
Clinic locations.  Any staff member may read them; only admins write.
"""
from __future__ import annotations

from django.db.models import Count, Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Clinic
from clinic.permissions import IsAdminRole, IsDoctorOrAdmin, ReadOnly
from clinic.serializers.operations import ClinicSerializer
from clinic.views.common import audit, changed_fields, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin, ReadOnly | IsAdminRole])
def clinics(request):
    if request.method == 'POST':
        s = ClinicSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        clinic = s.save()
        audit(request, 'CREATE', 'clinic', clinic.id, name=clinic.name)
        return ok(ClinicSerializer(clinic).data, status=201)

    qs = Clinic.objects.all()
    if request.query_params.get('active') in ('1', 'true'):
        qs = qs.filter(is_active=True)
    return ok(ClinicSerializer(qs.order_by('name'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin, ReadOnly | IsAdminRole])
def clinic_detail(request, clinic_id: int):
    clinic = get_or_404(Clinic.objects.all(), clinic_id, 'Clinic not found')
    if request.method == 'GET':
        return ok(ClinicSerializer(clinic).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'clinic', clinic.id, name=clinic.name)
        clinic.delete()
        return ok(None)

    s = ClinicSerializer(clinic, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    clinic = s.save()
    audit(request, 'UPDATE', 'clinic', clinic.id, fields=changed_fields(s))
    return ok(ClinicSerializer(clinic).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def clinic_toggle_active(request, clinic_id: int):
    clinic = get_or_404(Clinic.objects.all(), clinic_id, 'Clinic not found')
    clinic.is_active = not clinic.is_active
    clinic.save(update_fields=['is_active', 'updated_at'])
    audit(request, 'UPDATE', 'clinic', clinic.id, is_active=clinic.is_active)
    return ok(ClinicSerializer(clinic).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def clinic_stats(request):
    agg = Clinic.objects.aggregate(total=Count('id'), active=Count('id', filter=Q(is_active=True)))
    return ok({'total': agg['total'], 'active': agg['active'], 'inactive': agg['total'] - agg['active']})
