from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsAdminRole
from clinic.serializers.operations import AuditLogQuerySerializer, AuditLogSerializer
from clinic.services.audit import search_logs
from clinic.views.common import ok


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_logs(request):
    """Latest 200 audit rows, optionally narrowed by entity, action and a search term."""
    q = AuditLogQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    rows = search_logs(entity=vd.get('entity'), action=vd.get('action'), q=vd.get('q'))
    return ok(AuditLogSerializer(rows, many=True).data)
