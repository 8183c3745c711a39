from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.operations import PreferencesSerializer
from clinic.services.preferences import as_payload, get_preferences, update_preferences
from clinic.views.common import ok


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def preferences(request):
    if request.method == 'GET':
        return ok(as_payload(get_preferences(request.user)))

    s = PreferencesSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    pref = update_preferences(
        request.user,
        dashboard_layout=s.validated_data.get('dashboardLayout'),
        reminder_settings=s.validated_data.get('reminderSettings'),
    )
    return ok(as_payload(pref))
