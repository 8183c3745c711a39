import logging
from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db.models import Q

from clinic.models import AuditLog

User = get_user_model()
logger = logging.getLogger(__name__)


def _valid_ip(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def client_ip(request) -> Optional[str]:
    """First X-Forwarded-For hop when it parses as an address, else REMOTE_ADDR."""
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        ip = _valid_ip(forwarded.split(',')[0].strip())
        if ip:
            return ip
    return _valid_ip(request.META.get('REMOTE_ADDR'))


def log_action(*, user: Optional[User], action: str, entity_type: str, entity_id: Any = None,
               details: Optional[Dict[str, Any]] = None, request=None) -> AuditLog:
    entry = AuditLog.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details or {},
        ip_address=client_ip(request),
    )
    logger.debug('audit %s %s:%s by %s', action, entity_type, entity_id, getattr(user, 'pk', None))
    return entry


def search_logs(*, entity: Optional[str] = None, action: Optional[str] = None, q: Optional[str] = None, limit: int = 200):
    """Most recent audit rows, narrowed by entity type, action and a free-text term."""
    qs = AuditLog.objects.select_related('user').order_by('-created_at')
    if entity and entity != 'all':
        qs = qs.filter(entity_type=entity)
    if action and action != 'all':
        qs = qs.filter(action=action)
    if q:
        # details is JSON; match on its text form
        qs = qs.filter(
            Q(action__icontains=q) | Q(entity_type__icontains=q)
            | Q(entity_id__icontains=q) | Q(details__icontains=q)
        )
    return list(qs[:limit])
