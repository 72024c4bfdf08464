"""Token verification against the Supabase Auth REST API."""

import logging

import httpx

from chatrelay.core.config import settings
from chatrelay.core.errors import AuthError
from chatrelay.services.auth.base import BaseAuthVerifier

logger = logging.getLogger(__name__)


class SupabaseAuthVerifier(BaseAuthVerifier):
    """Resolves an access token to its user via GET /auth/v1/user."""

    def __init__(
        self,
        url: str | None = None,
        anon_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = (url or settings.supabase_url).rstrip("/")
        self._anon_key = anon_key or settings.supabase_anon_key
        self._transport = transport
        if not self._url or not self._anon_key:
            logger.warning("Supabase credentials not configured")

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token}",
        }

    async def verify(self, token: str) -> str:
        if not self._url:
            raise AuthError("Supabase URL not configured. Set CHATRELAY_SUPABASE_URL.", error="Authentication failed")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(
                    f"{self._url}/auth/v1/user",
                    headers=self._headers(token),
                    timeout=settings.auth_timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Auth verification error: {e}")
            raise AuthError(str(e), error="Authentication failed") from e

        if resp.status_code != 200:
            logger.debug(f"Token rejected by Supabase: {resp.status_code}")
            raise AuthError(error="Invalid authentication token")

        user_id = resp.json().get("id")
        if not user_id:
            raise AuthError(error="Invalid authentication token")
        return str(user_id)
