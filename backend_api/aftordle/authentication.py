from __future__ import annotations

import hmac
import logging
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from rest_framework import authentication, exceptions, permissions

logger = logging.getLogger(__name__)


class AdminUser(AnonymousUser):
    """Stand-in user for requests carrying the static admin token."""

    is_staff = True

    @property
    def is_authenticated(self):
        return True


# PUBLIC_INTERFACE
class StaticTokenAuthentication(authentication.BaseAuthentication):
    """Authenticate admin requests with ``Authorization: Bearer <ADMIN_API_TOKEN>``.

    Requests without a bearer header are left anonymous so that permission
    classes decide; a wrong token fails authentication outright.
    """

    keyword = "Bearer"

    def authenticate(self, request) -> Optional[Tuple[AdminUser, str]]:
        header = authentication.get_authorization_header(request).decode("latin-1")
        if not header:
            return None
        parts = header.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            return None
        token = parts[1]
        expected = getattr(settings, "ADMIN_API_TOKEN", "")
        if not expected or not hmac.compare_digest(token, expected):
            logger.warning("Rejected admin request with invalid token")
            raise exceptions.AuthenticationFailed("Invalid token")
        return AdminUser(), token

    def authenticate_header(self, request) -> str:
        return self.keyword


# PUBLIC_INTERFACE
class IsAdminToken(permissions.BasePermission):
    """Allow only requests authenticated by StaticTokenAuthentication."""

    message = "Access denied. No token provided."

    def has_permission(self, request, view) -> bool:
        return isinstance(request.user, AdminUser)
