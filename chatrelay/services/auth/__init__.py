"""Auth verifier factory."""

from chatrelay.core.config import settings
from chatrelay.services.auth.base import BaseAuthVerifier


def get_auth_verifier() -> BaseAuthVerifier:
    """Returns the configured token verifier."""
    if settings.auth_provider == "supabase":
        from chatrelay.services.auth.supabase import SupabaseAuthVerifier
        return SupabaseAuthVerifier()
    else:
        raise ValueError(f"Unknown auth provider: {settings.auth_provider}")
