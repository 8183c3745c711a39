from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Q
from django.utils import timezone


def filter_items(qs, *, q: Optional[str] = None, category: Optional[str] = None):
    q = (q or '').strip()
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))
    if category and category != 'all':
        qs = qs.filter(category=category)
    return qs


def days_until(expiry: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Calendar days from today until ``expiry``."""
    if expiry is None:
        return None
    today = today or timezone.localdate()
    return (expiry - today).days


def is_low_stock(item) -> bool:
    return item.quantity <= item.min_stock_level


def is_expiring(item, today: Optional[date] = None, window: int = 30) -> bool:
    days = days_until(item.expiry_date, today)
    return days is not None and 0 < days <= window


def inventory_stats(items, today: Optional[date] = None) -> dict:
    items = list(items)
    total_value = sum(
        (Decimal(item.quantity) * (item.cost_per_unit or Decimal('0')) for item in items),
        Decimal('0'),
    )
    return {
        'total': len(items),
        'lowStock': sum(1 for item in items if is_low_stock(item)),
        'expiring': sum(1 for item in items if is_expiring(item, today)),
        'totalValue': total_value.quantize(Decimal('0.01')),
    }
