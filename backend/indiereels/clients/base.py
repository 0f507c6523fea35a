"""Abstract interfaces for the hosted backend's auth and storage APIs.

These define the contracts the services depend on. The hosted REST backend is
the production implementation; tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


# ── Data Transfer Objects ────────────────────────────────────────

@dataclass
class AuthUser:
    """The identity behind a validated access token."""
    id: str                # Hosted auth user id (uuid string)
    email: str


@dataclass
class StoredObject:
    """An uploaded binary object."""
    bucket: str
    path: str              # Object key inside the bucket
    public_url: str


# ── Abstract Interfaces ──────────────────────────────────────────

class IAuthProvider(ABC):
    """Interface for session/token validation."""

    @abstractmethod
    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """Resolve an access token to its user. None if the token is rejected."""
        ...


class IObjectStorage(ABC):
    """Interface for binary object upload (reel videos)."""

    @abstractmethod
    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        access_token: Optional[str] = None,
    ) -> StoredObject:
        """Upload *content* under *path*, as the token's user when given.

        Never overwrites an existing object.
        """
        ...

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Publicly resolvable URL for an object path."""
        ...
