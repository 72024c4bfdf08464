"""Request-scoped accessors for the collaborators built at startup."""

from fastapi import Header, Request

from chatrelay.core.errors import AuthError
from chatrelay.services.auth.base import BaseAuthVerifier
from chatrelay.services.context import ContextAssembler


def get_assembler(request: Request) -> ContextAssembler:
    return request.app.state.assembler


def get_verifier(request: Request) -> BaseAuthVerifier:
    return request.app.state.auth_verifier


async def get_current_user(request: Request, authorization: str | None = Header(default=None)) -> str:
    """Resolve the bearer token in the Authorization header to a user id."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError(error="Missing or invalid authorization header")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthError(error="Missing or invalid authorization header")

    return await get_verifier(request).verify(token)
