"""
Small helpers shared by the API views: the success envelope, page
slicing and the audit shortcut used after every write.
"""
from __future__ import annotations

from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinic.services.audit import log_action
from clinic.services.patients import get_visible_patient


def ok(data=None, status: int = 200, **extra) -> Response:
    payload = {'ok': True, 'data': data}
    payload.update(extra)
    return Response(payload, status=status)


def paginate(qs, page: int | None, page_size: int | None):
    """Slice ``qs`` and return it with the pagination block the client expects."""
    total = qs.count()
    page = page or 1
    if page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return qs, {'total': total, 'page': page, 'pageSize': page_size or total}


def get_or_404(qs, pk, message: str = 'Not found'):
    obj = qs.filter(pk=pk).first()
    if obj is None:
        raise NotFound(message)
    return obj


def audit(request, action: str, entity_type: str, entity_id, **details) -> None:
    log_action(user=request.user, action=action, entity_type=entity_type, entity_id=entity_id,
               details=details, request=request)


def check_patient(request, patient):
    """Charting against a patient requires that the caller can see them."""
    return get_visible_patient(request.user, patient.pk if hasattr(patient, 'pk') else patient)


def changed_fields(serializer) -> list[str]:
    return sorted(serializer.validated_data.keys())
