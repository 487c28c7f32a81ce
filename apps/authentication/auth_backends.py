"""
Custom authentication classes
"""
import logging

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError
from rest_framework import authentication, exceptions

from .models import User

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Authentication for signed JWTs carried as a Bearer token or in the
    auth cookie. The token's 'sub' claim is the user id.
    """

    def _get_token(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')
        if auth_header:
            parts = auth_header.split()
            if len(parts) == 2 and parts[0].lower() == 'bearer':
                return parts[1]
            return None
        return request.COOKIES.get(settings.JWT_COOKIE_NAME)

    def authenticate(self, request):
        token = self._get_token(request)
        if not token:
            return None

        try:
            decoded = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError:
            logger.warning("Rejected invalid JWT")
            raise exceptions.AuthenticationFailed('Invalid token')

        user_id = decoded.get('sub')
        if not user_id:
            raise exceptions.AuthenticationFailed('Token has no subject')

        try:
            user = User.objects.get(id=user_id, is_active=True)
        except (User.DoesNotExist, ValidationError, ValueError):
            raise exceptions.AuthenticationFailed('User not found')

        return (user, decoded)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'


class UserIdHeaderAuthentication(authentication.BaseAuthentication):
    """
    Development-only authentication using the X-User-ID header.
    For Swagger testing convenience.
    """

    def authenticate(self, request):
        if not settings.ALLOW_USER_ID_HEADER_AUTH:
            return None

        user_id = request.META.get('HTTP_X_USER_ID')
        if not user_id:
            return None

        try:
            user = User.objects.get(id=user_id, is_active=True)
            return (user, None)
        except (User.DoesNotExist, ValidationError, ValueError):
            return None

    def authenticate_header(self, request):
        return 'X-User-ID'


def issue_token(user, lifetime=None):
    """Sign an access token for a user (used by tests and admin tooling)"""
    from datetime import datetime, timezone as dt_timezone

    issued_at = datetime.now(dt_timezone.utc)
    payload = {
        'sub': str(user.id),
        'role': user.role,
        'iat': issued_at,
        'exp': issued_at + (lifetime or settings.JWT_ACCESS_TOKEN_LIFETIME),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
