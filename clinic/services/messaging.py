from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Message
from clinic.services.audit import log_action
from clinic.services.notifications import push_message

User = get_user_model()


def messages_for(user):
    return Message.objects.filter(Q(sender=user) | Q(recipient=user)).select_related('sender', 'recipient')


def conversations(user) -> list[dict]:
    """Group the user's messages by counterpart, latest conversation first."""
    grouped: dict[int, list[Message]] = {}
    for msg in messages_for(user).order_by('-created_at', '-id'):
        other = msg.recipient if msg.sender_id == user.id else msg.sender
        grouped.setdefault(other.id, []).append(msg)

    out = []
    for other_id, msgs in grouped.items():
        latest = msgs[0]
        other = latest.recipient if latest.sender_id == user.id else latest.sender
        out.append({
            'userId': other_id,
            'username': other.username,
            'name': other.display_name,
            'latestMessage': {
                'id': latest.id,
                'subject': latest.subject,
                'content': latest.content,
                'senderId': latest.sender_id,
                'isRead': latest.is_read,
                'createdAt': latest.created_at,
            },
            'unreadCount': sum(1 for m in msgs if m.recipient_id == user.id and not m.is_read),
        })
    out.sort(key=lambda c: c['latestMessage']['createdAt'], reverse=True)
    return out


def thread(user, other_id: int):
    return messages_for(user).filter(Q(sender_id=other_id) | Q(recipient_id=other_id)).order_by('created_at', 'id')


def send_message(sender, *, recipient_id: int, content: str, subject: Optional[str] = '', request=None) -> Message:
    if recipient_id == sender.id:
        raise ValidationError({'recipient': 'Cannot send a message to yourself'})
    recipient = User.objects.filter(pk=recipient_id, is_active=True).first()
    if recipient is None:
        raise NotFound('Recipient not found')
    if not content:
        raise ValidationError({'content': 'Message cannot be empty'})
    with transaction.atomic():
        msg = Message.objects.create(sender=sender, recipient=recipient, subject=subject or '', content=content)
        log_action(user=sender, action='SEND', entity_type='message', entity_id=msg.id,
                   details={'recipient': recipient.id}, request=request)
    push_message(msg)
    return msg


def mark_read(user, message_id: int) -> Message:
    msg = Message.objects.filter(pk=message_id, recipient=user).first()
    if msg is None:
        raise NotFound('Message not found')
    if not msg.is_read:
        msg.is_read = True
        msg.save(update_fields=['is_read'])
    return msg


def mark_thread_read(user, other_id: int) -> int:
    return Message.objects.filter(recipient=user, sender_id=other_id, is_read=False).update(is_read=True)
