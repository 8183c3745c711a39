"""
Invoice arithmetic and lifecycle.

All money is handled as ``Decimal`` rounded half-up to two places, so
``(2 x 50) + (1 x 20)`` with 10 % tax and a 5.00 discount is exactly
subtotal 120.00, tax 12.00 and total 127.00.
"""
from __future__ import annotations

import logging
import secrets
import string
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from clinic.models import Invoice
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
_ALPHABET = string.ascii_uppercase + string.digits


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(items: Iterable[dict], tax_rate=0, discount=0) -> dict:
    """Line totals, subtotal, tax and grand total for a set of invoice items."""
    lines = []
    for item in items:
        qty = Decimal(str(item.get('quantity') or 0))
        price = Decimal(str(item.get('unit_price') or 0))
        lines.append({
            'description': item.get('description', ''),
            'quantity': qty,
            'unit_price': money(price),
            'total': money(qty * price),
        })
    subtotal = money(sum((line['total'] for line in lines), Decimal('0')))
    tax = money(subtotal * Decimal(str(tax_rate or 0)) / 100)
    discount = money(discount or 0)
    return {
        'items': lines,
        'subtotal': subtotal,
        'tax_amount': tax,
        'discount_amount': discount,
        'total_amount': money(subtotal + tax - discount),
    }


def new_invoice_number(now=None) -> str:
    now = now or timezone.localtime()
    suffix = ''.join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"INV-{now:%Y%m%d}-{suffix}"


def _json_items(lines):
    # Decimals are not JSON serialisable; keep them as fixed-point strings
    return [
        {
            'description': line['description'],
            'quantity': float(line['quantity']),
            'unit_price': str(line['unit_price']),
            'total': str(line['total']),
        }
        for line in lines
    ]


def create_invoice(doctor, *, patient, items, tax_rate=0, discount=0, due_date=None, notes='', request=None) -> Invoice:
    totals = compute_totals(items, tax_rate, discount)
    for _ in range(5):
        try:
            with transaction.atomic():
                invoice = Invoice.objects.create(
                    patient=patient,
                    doctor=doctor,
                    invoice_number=new_invoice_number(),
                    items=_json_items(totals['items']),
                    subtotal=totals['subtotal'],
                    tax_amount=totals['tax_amount'],
                    discount_amount=totals['discount_amount'],
                    total_amount=totals['total_amount'],
                    due_date=due_date,
                    notes=notes,
                )
            break
        except IntegrityError:
            logger.warning('invoice number collision, retrying')
    else:
        raise RuntimeError('could not allocate a unique invoice number')
    log_action(user=doctor, action='CREATE', entity_type='invoice', entity_id=invoice.id,
               details={'invoice_number': invoice.invoice_number, 'total': str(invoice.total_amount)},
               request=request)
    return invoice


def set_status(invoice: Invoice, status: str, user, request=None) -> Invoice:
    invoice.status = status
    fields = ['status', 'updated_at']
    if status == 'paid':
        invoice.paid_at = timezone.now()
        fields.append('paid_at')
    invoice.save(update_fields=fields)
    log_action(user=user, action='STATUS', entity_type='invoice', entity_id=invoice.id,
               details={'status': status}, request=request)
    return invoice


def invoice_stats(qs) -> dict:
    agg = qs.aggregate(
        total=Count('id'),
        paid=Count('id', filter=Q(status='paid')),
        pending=Count('id', filter=Q(status='pending')),
        revenue=Sum('total_amount', filter=Q(status='paid')),
    )
    return {
        'total': agg['total'],
        'paid': agg['paid'],
        'pending': agg['pending'],
        'totalRevenue': money(agg['revenue'] or 0),
    }
