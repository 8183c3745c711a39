"""
Authentication views.

Login hands out both a legacy DRF token and a JWT pair so either
``Authorization: Token ...`` or ``Authorization: Bearer ...`` works.
Sign-up always creates a doctor; admin accounts are provisioned by an
existing admin or the ``ensure_test_users`` command.
Password reset and change end every session the user already holds.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import Profile
from clinic.serializers.auth import (
    LoginSerializer,
    PasswordChangeSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    ProfileSerializer,
    SignupSerializer,
    UserSummarySerializer,
)
from clinic.services.audit import client_ip, log_action
from clinic.services.passwords import send_reset_email, set_password

logger = logging.getLogger(__name__)


def _session_payload(user) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': UserSummarySerializer(user).data,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        # failed attempts keep only the username
        log_action(user=None, action='LOGIN_FAILED', entity_type='user',
                   details={'username': username}, request=request)
        logger.warning('failed login for %r from %s', username, client_ip(request))
        raise AuthenticationFailed('Invalid username or password')

    log_action(user=user, action='LOGIN', entity_type='user', entity_id=user.id, request=request)
    return Response(_session_payload(user))


login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = s.save()
    log_action(user=user, action='SIGNUP', entity_type='user', entity_id=user.id,
               details={'role': user.role}, request=request)
    return Response(_session_payload(user), status=201)


signup_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_view(request):
    """Mail a reset link. The answer is the same whether or not the address is known."""
    s = PasswordResetRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    sent = send_reset_email(s.validated_data['email'])
    log_action(user=None, action='PASSWORD_RESET_REQUESTED', entity_type='user',
               details={'email': s.validated_data['email'], 'sent': sent}, request=request)
    return Response({'ok': True})


password_reset_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_confirm_view(request):
    s = PasswordResetConfirmSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = s.validated_data['user']
    revoked = set_password(user, s.validated_data['new_password'])
    log_action(user=user, action='PASSWORD_RESET', entity_type='user', entity_id=user.id,
               details={'revoked': revoked}, request=request)
    return Response({'ok': True})


password_reset_confirm_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def password_change_view(request):
    """Change the own password; other sessions end and a fresh one is returned."""
    s = PasswordChangeSerializer(data=request.data, context={'request': request})
    s.is_valid(raise_exception=True)
    user = request.user
    revoked = set_password(user, s.validated_data['new_password'])
    log_action(user=user, action='PASSWORD_CHANGE', entity_type='user', entity_id=user.id,
               details={'revoked': revoked}, request=request)
    return Response(_session_payload(user))


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(str(e))
    data = dict(s.validated_data)
    payload = {'ok': True, 'jwt_access': data.pop('access')}
    if 'refresh' in data:
        payload['jwt_refresh'] = data['refresh']
    return Response(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            raise ValidationError({'refresh': str(e)})
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='LOGOUT', entity_type='user', entity_id=request.user.id,
               details={'blacklisted': count}, request=request)
    return Response({'ok': True, 'blacklisted': count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = request.user
    profile = Profile.objects.filter(user=user).first()
    return Response({
        'ok': True,
        'user': UserSummarySerializer(user).data,
        'role': user.role,
        'profile': ProfileSerializer(profile).data if profile else None,
    })


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    profile, _ = Profile.objects.get_or_create(
        user=request.user,
        defaults={'full_name': request.user.get_full_name() or request.user.username, 'email': request.user.email},
    )
    if request.method == 'GET':
        return Response({'ok': True, 'data': ProfileSerializer(profile).data})

    s = ProfileSerializer(profile, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    profile = s.save()
    log_action(user=request.user, action='UPDATE', entity_type='profile', entity_id=profile.id,
               details={'fields': sorted(s.validated_data.keys())}, request=request)
    return Response({'ok': True, 'data': ProfileSerializer(profile).data})
