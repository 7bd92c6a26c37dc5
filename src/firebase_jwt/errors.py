"""Authentication errors.

This module defines the exception hierarchy for Firebase token verification
failures. All errors inherit from AuthError to allow catch-all error handling.

Security Note:
    ``description`` is intentionally generic so it can be returned to clients.
    The exception message carries the detailed reason and should only be
    logged server-side.
"""

from __future__ import annotations

from typing import ClassVar


class AuthError(Exception):
    """Base exception for all authentication failures.

    Attributes:
        error_code: HTTP status code the Flask extension answers with.
        description: Client-safe message used as the HTTP error description.
    """

    error_code: ClassVar[int] = 401
    description: ClassVar[str] = "Authentication failed"


class MissingToken(AuthError):  # noqa: N818
    """Raised when no token is found in the request.

    This occurs when:
    - The Authorization header is missing or not "Bearer <token>"
    - The session cookie is missing (when using cookie-based extraction)
    """

    description = "Missing token"


class ExpiredToken(AuthError):  # noqa: N818
    """Raised when a token's ``exp`` claim has passed (leeway included)."""

    description = "Expired token"


class InvalidToken(AuthError):  # noqa: N818
    """Raised when a token is present but cannot be verified.

    This occurs when:
    - Token is malformed (not a valid JWT structure)
    - Signature verification fails (wrong key or tampered token)
    - A required claim is missing or does not match the expected value
    - The signing key cannot be resolved
    """

    description = "Invalid token"


class InvalidAlgorithm(InvalidToken):
    """Raised when the token header names an algorithm other than RS256."""


class InvalidClaim(InvalidToken):
    """Raised when a claim is missing or fails validation.

    Attributes:
        claim: Path of the offending claim, e.g. ``"aud"`` or
            ``"firebase.tenant"``.
    """

    def __init__(self, message: str, *, claim: str) -> None:
        super().__init__(message)
        self.claim = claim


class KeyProviderError(InvalidToken):
    """Base class for signing-key resolution failures."""


class MissingKeyId(KeyProviderError):
    """Raised when the token header has no ``kid``."""


class KeyFetchError(KeyProviderError):
    """Raised when the public key set cannot be fetched."""


class KeyNotFound(KeyProviderError):  # noqa: N818
    """Raised when a ``kid`` is still unknown after refreshing the key set."""


class KeyImportError(KeyProviderError):
    """Raised when a fetched certificate cannot be turned into a public key."""
