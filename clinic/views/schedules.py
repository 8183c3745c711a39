from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin, is_admin
from clinic.serializers.operations import StaffScheduleQuerySerializer, StaffScheduleSerializer
from clinic.services.scope import schedules_for
from clinic.views.common import audit, changed_fields, get_or_404, ok


def _owner(request, serializer):
    # doctors always write their own rows
    if is_admin(request.user) and serializer.validated_data.get('doctor'):
        return serializer.validated_data['doctor']
    return request.user


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def schedules(request):
    if request.method == 'POST':
        s = StaffScheduleSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        row = s.save(doctor=_owner(request, s))
        audit(request, 'CREATE', 'staff_schedule', row.id, doctor=row.doctor_id, day_of_week=row.day_of_week)
        return ok(StaffScheduleSerializer(row).data, status=201)

    params = StaffScheduleQuerySerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    qs = schedules_for(request.user)
    doctor = params.validated_data.get('doctor')
    if doctor and is_admin(request.user):
        qs = qs.filter(doctor_id=doctor)
    return ok(StaffScheduleSerializer(qs.order_by('doctor_id', 'day_of_week', 'start_time'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def schedule_detail(request, schedule_id: int):
    row = get_or_404(schedules_for(request.user), schedule_id, 'Schedule not found')
    if request.method == 'GET':
        return ok(StaffScheduleSerializer(row).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'staff_schedule', row.id, doctor=row.doctor_id)
        row.delete()
        return ok(None)

    s = StaffScheduleSerializer(row, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if not is_admin(request.user):
        s.validated_data.pop('doctor', None)
    row = s.save()
    audit(request, 'UPDATE', 'staff_schedule', row.id, fields=changed_fields(s))
    return ok(StaffScheduleSerializer(row).data)
