"""
Staff-to-staff messaging.

Sending a message also pushes it to the recipient's websocket group
(``ws/messages/``) so an open inbox refreshes without polling.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.auth import UserSummarySerializer
from clinic.serializers.operations import MessageSendSerializer, MessageSerializer
from clinic.services import messaging
from clinic.views.common import ok

User = get_user_model()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def messages(request):
    if request.method == 'POST':
        s = MessageSendSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        msg = messaging.send_message(request.user, recipient_id=vd['recipient'], content=vd['content'],
                                     subject=vd.get('subject', ''), request=request)
        return ok(MessageSerializer(msg).data, status=201)

    qs = messaging.messages_for(request.user).order_by('-created_at')
    return ok(MessageSerializer(qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def conversations(request):
    return ok(messaging.conversations(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def thread(request, user_id: int):
    """Both directions of the conversation with ``user_id``; marks incoming rows read."""
    messaging.mark_thread_read(request.user, user_id)
    return ok(MessageSerializer(messaging.thread(request.user, user_id), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def message_read(request, message_id: int):
    msg = messaging.mark_read(request.user, message_id)
    return ok(MessageSerializer(msg).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def recipients(request):
    qs = User.objects.filter(is_active=True).exclude(pk=request.user.pk).select_related('profile').order_by('username')
    return ok(UserSummarySerializer(qs, many=True).data)
