import logging
from typing import Optional
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework.authtoken.models import Token
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from clinic.models import User

logger = logging.getLogger(__name__)

RESET_SUBJECT = 'Reset your CareTag password'


def encode_uid(user) -> str:
    return urlsafe_base64_encode(force_bytes(user.pk))


def user_from_uid(uid: str) -> Optional[User]:
    try:
        pk = force_str(urlsafe_base64_decode(uid))
        return User.objects.get(pk=pk, is_active=True)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        return None


def reset_link(user) -> str:
    query = urlencode({'uid': encode_uid(user), 'token': default_token_generator.make_token(user)})
    return f'{settings.PASSWORD_RESET_URL}?{query}'


def send_reset_email(email: str) -> int:
    """Mail a reset link to every active account registered under ``email``.

    Returns the number of mails sent; callers never reveal it.
    """
    sent = 0
    for user in User.objects.filter(email__iexact=email, is_active=True):
        if not user.has_usable_password():
            continue
        body = (
            f'Hello {user.display_name},\n\n'
            f'Use the link below to choose a new password:\n{reset_link(user)}\n\n'
            'If you did not ask for this, ignore this email.'
        )
        send_mail(RESET_SUBJECT, body, settings.DEFAULT_FROM_EMAIL, [user.email])
        sent += 1
    logger.info('password reset requested for %s, %d mail(s) sent', email, sent)
    return sent


def set_password(user, password: str) -> int:
    """Store the new password and end every existing session of the user."""
    user.set_password(password)
    user.save(update_fields=['password'])
    Token.objects.filter(user=user).delete()
    revoked = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        revoked += int(created)
    return revoked
