"""Protocol definitions for Firebase token verification.

This module defines structural interfaces using Protocol (PEP 544) for:
- Key resolution
- Token verification
- Token extraction

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

    from .claims import FirebaseClaims

# ============================================================================
# Type Aliases
# ============================================================================

type PublicKey = PublicKeyTypes
"""An imported verification key, usable directly by ``jwt.decode``."""

type Clock = Callable[[], float]
"""Returns the current Unix time in seconds."""

type ViewFunc = Callable[..., Any]
"""Type alias for Flask view functions (callable that takes any args and returns any)."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyResolver(Protocol):
    """Protocol for resolving token signing keys.

    Common implementations:
    - X509KeysProvider (Google's published certificate sets)
    - A fixed in-memory key map (tests)
    """

    async def resolve(self, kid: str, alg: str) -> PublicKey:
        """Resolve a verification key by its ID.

        Args:
            kid: Key ID from the token header.
            alg: Algorithm from the token header, used to import the key.

        Returns:
            The public key to verify the token signature with.

        Raises:
            KeyProviderError: If the key cannot be fetched, found or imported.
        """
        ...


class TokenVerifier(Protocol):
    """Protocol for Firebase token verification implementations."""

    async def verify_id_token(self, token: str) -> FirebaseClaims:
        """Verify a Firebase ID token and return its claims.

        Raises:
            InvalidToken: Token is malformed, signature invalid, or claims invalid
            ExpiredToken: Token's exp claim has passed
        """
        ...

    async def verify_session_token(self, token: str) -> FirebaseClaims:
        """Verify a Firebase session cookie and return its claims.

        Raises:
            InvalidToken: Token is malformed, signature invalid, or claims invalid
            ExpiredToken: Token's exp claim has passed
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting tokens from HTTP requests."""

    def extract(self) -> str:
        """Extract the raw token string from the Flask request.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
