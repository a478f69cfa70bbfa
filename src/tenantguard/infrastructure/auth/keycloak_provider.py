"""Keycloak OIDC provider for token introspection."""

import logging
from dataclasses import dataclass

from keycloak import KeycloakOpenID

logger = logging.getLogger(__name__)


@dataclass
class OIDCUser:
    """Authenticated user from OIDC token."""

    user_id: str
    business_id: str | None
    role: str | None
    timezone: str | None
    email: str | None
    username: str | None


class KeycloakProvider:
    """Keycloak OIDC - validates tokens and extracts the session identity."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
        business_claim: str = "business_id",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )
        self._business_claim = business_claim

    def decode_token(self, token: str) -> OIDCUser | None:
        """Introspect token, return user info or None when inactive or invalid."""
        try:
            token_info = self._keycloak.introspect(token)
        except Exception as e:
            logger.warning("Token introspection failed: %s", e)
            return None
        if not token_info.get("active"):
            return None
        return OIDCUser(
            user_id=token_info.get("sub", ""),
            business_id=token_info.get(self._business_claim),
            role=token_info.get("role"),
            timezone=token_info.get("zoneinfo"),
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
        )
