"""
Prescriptions, reusable prescription templates and the dosage tool.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.clinical import (
    DosageRequestSerializer,
    PrescriptionListQuerySerializer,
    PrescriptionSerializer,
    PrescriptionTemplateSerializer,
    RefillSerializer,
)
from clinic.services import dosage
from clinic.services.prescriptions import create_prescription, filter_prescriptions, refill, valid_until_for
from clinic.services.scope import prescriptions_for, templates_for
from clinic.views.common import audit, changed_fields, check_patient, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def prescriptions(request):
    if request.method == 'POST':
        s = PrescriptionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        check_patient(request, s.validated_data['patient'])
        rx = create_prescription(request.user, s.validated_data, request=request)
        return ok(PrescriptionSerializer(rx).data, status=201)

    q = PrescriptionListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = filter_prescriptions(prescriptions_for(request.user), q=vd.get('q'), status=vd.get('status'),
                              range_=vd.get('range'))
    return ok(PrescriptionSerializer(qs.order_by('-created_at'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def prescription_detail(request, prescription_id: int):
    rx = get_or_404(prescriptions_for(request.user), prescription_id, 'Prescription not found')
    if request.method == 'GET':
        return ok(PrescriptionSerializer(rx).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'prescription', rx.id, patient=rx.patient_id)
        rx.delete()
        return ok(None)

    s = PrescriptionSerializer(rx, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if 'patient' in s.validated_data:
        check_patient(request, s.validated_data['patient'])
    extra = {}
    months = s.validated_data.pop('valid_months', None)
    if months and 'valid_until' not in s.validated_data:
        extra['valid_until'] = valid_until_for(months)
    rx = s.save(**extra)
    audit(request, 'UPDATE', 'prescription', rx.id, fields=changed_fields(s), status=rx.status)
    return ok(PrescriptionSerializer(rx).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def prescription_refill(request, prescription_id: int):
    rx = get_or_404(prescriptions_for(request.user), prescription_id, 'Prescription not found')
    s = RefillSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    rx = refill(rx, request.user, s.validated_data.get('next_refill_reminder'), request=request)
    return ok(PrescriptionSerializer(rx).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def templates(request):
    if request.method == 'POST':
        s = PrescriptionTemplateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        tpl = s.save(doctor=request.user)
        audit(request, 'CREATE', 'prescription_template', tpl.id, name=tpl.name)
        return ok(PrescriptionTemplateSerializer(tpl).data, status=201)
    return ok(PrescriptionTemplateSerializer(templates_for(request.user), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def template_detail(request, template_id: int):
    tpl = get_or_404(templates_for(request.user), template_id, 'Template not found')
    if request.method == 'GET':
        return ok(PrescriptionTemplateSerializer(tpl).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'prescription_template', tpl.id, name=tpl.name)
        tpl.delete()
        return ok(None)

    s = PrescriptionTemplateSerializer(tpl, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    tpl = s.save()
    audit(request, 'UPDATE', 'prescription_template', tpl.id, fields=changed_fields(s))
    return ok(PrescriptionTemplateSerializer(tpl).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def template_favorite(request, template_id: int):
    tpl = get_or_404(templates_for(request.user), template_id, 'Template not found')
    tpl.is_favorite = not tpl.is_favorite
    tpl.save(update_fields=['is_favorite', 'updated_at'])
    return ok(PrescriptionTemplateSerializer(tpl).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def dosage_calculator(request):
    s = DosageRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    return ok(dosage.calculate(vd['drug'], vd['weight'], vd.get('age')))
