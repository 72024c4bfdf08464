"""Abstract bearer-token verifier interface."""

from abc import ABC, abstractmethod


class BaseAuthVerifier(ABC):
    @abstractmethod
    async def verify(self, token: str) -> str:
        """Return the user id the token belongs to. Raises AuthError if it is not valid."""
        ...
