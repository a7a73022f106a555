# tm_core/iam/auth.py

from __future__ import annotations

import logging

from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.settings import api_settings

from tm_core.iam.models import UserProfile

logger = logging.getLogger(__name__)


class IdentityProviderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using a token minted by the external identity provider:
      1) Authorization: Bearer <token>
      2) provider session cookie (SIMPLE_JWT["AUTH_COOKIE"])

    The token's subject claim is resolved to a UserProfile exactly once here;
    downstream code only ever sees the internal profile id.
    """

    def authenticate(self, request):
        # 1) Prefer Authorization header
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            # 2) Cookie token
            cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "__session")
            raw_token = request.COOKIES.get(cookie_name)

        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)

        request.profile = user.profile
        return user, validated_token

    def get_user(self, validated_token):
        try:
            subject = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise InvalidToken("Token contained no recognizable user identification")

        if not subject:
            raise InvalidToken("Token contained no recognizable user identification")

        profile = (
            UserProfile.objects.select_related("user", "specialization")
            .filter(external_id=str(subject))
            .first()
        )
        if profile is None:
            logger.warning("Authenticated subject has no profile subject=%s", subject)
            raise AuthenticationFailed("User not found.", code="user_not_found")

        user = profile.user
        if not user.is_active:
            raise AuthenticationFailed("User is inactive.", code="user_inactive")
        return user


def request_profile(request) -> UserProfile:
    """
    Internal profile of the caller.
    Works for real token auth and for force_authenticate in tests.
    """
    profile = getattr(request, "profile", None)
    if profile is not None:
        return profile

    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated()

    try:
        profile = user.profile
    except UserProfile.DoesNotExist:
        raise NotAuthenticated("No profile is linked to this account.")

    request.profile = profile
    return profile
