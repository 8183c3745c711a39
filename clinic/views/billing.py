"""
Invoice endpoints.  Totals are computed server-side from the submitted
line items; clients never send subtotal, tax or total amounts.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.operations import InvoiceCreateSerializer, InvoiceSerializer, InvoiceStatusSerializer
from clinic.services.billing import create_invoice, invoice_stats, set_status
from clinic.services.patients import get_visible_patient
from clinic.services.scope import invoices_for
from clinic.views.common import audit, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def invoices(request):
    if request.method == 'POST':
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        patient = get_visible_patient(request.user, vd['patient'])
        invoice = create_invoice(
            request.user,
            patient=patient,
            items=vd['items'],
            tax_rate=vd['tax_rate'],
            discount=vd['discount'],
            due_date=vd.get('due_date'),
            notes=vd.get('notes', ''),
            request=request,
        )
        return ok(InvoiceSerializer(invoice).data, status=201)

    qs = invoices_for(request.user)
    status = request.query_params.get('status')
    if status and status != 'all':
        qs = qs.filter(status=status)
    return ok(InvoiceSerializer(qs.order_by('-created_at'), many=True).data)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def invoice_detail(request, invoice_id: int):
    invoice = get_or_404(invoices_for(request.user), invoice_id, 'Invoice not found')
    if request.method == 'DELETE':
        audit(request, 'DELETE', 'invoice', invoice.id, invoice_number=invoice.invoice_number)
        invoice.delete()
        return ok(None)
    return ok(InvoiceSerializer(invoice).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def invoice_status(request, invoice_id: int):
    invoice = get_or_404(invoices_for(request.user), invoice_id, 'Invoice not found')
    s = InvoiceStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    invoice = set_status(invoice, s.validated_data['status'], request.user, request=request)
    return ok(InvoiceSerializer(invoice).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def invoice_stats_view(request):
    return ok(invoice_stats(invoices_for(request.user)))
