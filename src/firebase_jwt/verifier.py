"""Firebase token verification using PyJWT.

This module provides a verifier for the two token variants issued by Firebase
Authentication:
- ID tokens, signed by ``securetoken@system.gserviceaccount.com``
- Session cookies, signed by the Identity Toolkit

Both share one verification routine that:
- Extracts the key ID (kid) and algorithm from the token header
- Resolves the signing key via the key provider bound to the variant
- Validates signature, required claims, issuer and audience using PyJWT
- Validates time-based claims against an injectable clock
- Enforces the configured tenant and copies ``sub`` into ``uid``
- Maps PyJWT exceptions to domain-specific error types
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, cast

import jwt
import structlog

from .claims import REQUIRED_CLAIMS, FirebaseClaims
from .errors import (
    ExpiredToken,
    InvalidAlgorithm,
    InvalidClaim,
    InvalidToken,
    MissingKeyId,
)
from .key_providers import (
    GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL,
    GOOGLE_PUBLIC_KEYS_URL,
    X509KeysProvider,
)

if TYPE_CHECKING:
    from .protocols import Clock, KeyResolver

logger = structlog.get_logger(__name__)

ALGORITHM: Final[str] = "RS256"
"""The only signing algorithm Firebase uses for ID tokens and session cookies."""

ID_TOKEN_ISSUER_PREFIX: Final[str] = "https://securetoken.google.com/"
SESSION_TOKEN_ISSUER_PREFIX: Final[str] = "https://session.firebase.google.com/"


@dataclass(frozen=True, slots=True)
class FirebaseJwtVerifierOptions:
    """Configuration shared by every verification call.

    Attributes:
        project_id: Firebase project ID. Used as the expected ``aud`` and to
            build the expected ``iss`` of both token variants.

        tenant_id: When set, ``firebase.tenant`` must equal this value.
            Leave unset for projects without multi-tenancy.

        leeway: Clock skew tolerance in seconds for exp/nbf/iat validation.
            Default: 0 (no leeway).

    Raises:
        ValueError: If project_id is empty or leeway is negative.
    """

    project_id: str
    tenant_id: str | None = None
    leeway: int = 0

    def __post_init__(self) -> None:
        if not self.project_id or not self.project_id.strip():
            raise ValueError("project_id cannot be empty")
        if self.leeway < 0:
            raise ValueError(f"leeway must not be negative, got {self.leeway}")


class FirebaseJwtVerifier:
    """Verifies Firebase ID tokens and session cookies.

    Each token variant has its own key provider, because Google signs ID
    tokens and session cookies with different certificate sets.

    Example:
        ```python
        verifier = FirebaseJwtVerifier(
            FirebaseJwtVerifierOptions(project_id="my-project")
        )

        try:
            claims = await verifier.verify_id_token(raw_token)
            user_id = claims["uid"]
        except ExpiredToken:
            # Token expired, prompt the client to refresh it
        except InvalidToken:
            # Token invalid, reject request
        ```

    Attributes:
        _opt: Immutable options (project, tenant, leeway).
        _id_token_keys: Key resolver for ID tokens.
        _session_token_keys: Key resolver for session cookies.
        _clock: Source of the current Unix time.
    """

    def __init__(
        self,
        options: FirebaseJwtVerifierOptions,
        *,
        id_token_keys: KeyResolver | None = None,
        session_token_keys: KeyResolver | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._opt = options
        self._id_token_keys: KeyResolver = id_token_keys or X509KeysProvider(
            GOOGLE_PUBLIC_KEYS_URL
        )
        self._session_token_keys: KeyResolver = session_token_keys or X509KeysProvider(
            GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL
        )
        self._clock = clock

    @property
    def options(self) -> FirebaseJwtVerifierOptions:
        return self._opt

    async def verify_id_token(self, token: str) -> FirebaseClaims:
        """Verify a Firebase ID token and return its claims.

        Raises:
            InvalidToken: If the token is malformed, signed with an unknown key,
                or fails claim validation.
            ExpiredToken: If the token's exp claim has passed.
        """
        project_id = self._opt.project_id
        return await self._verify(
            token,
            self._id_token_keys,
            issuer=f"{ID_TOKEN_ISSUER_PREFIX}{project_id}",
            audience=project_id,
        )

    async def verify_session_token(self, token: str) -> FirebaseClaims:
        """Verify a Firebase session cookie and return its claims.

        Raises:
            InvalidToken: If the token is malformed, signed with an unknown key,
                or fails claim validation.
            ExpiredToken: If the token's exp claim has passed.
        """
        project_id = self._opt.project_id
        return await self._verify(
            token,
            self._session_token_keys,
            issuer=f"{SESSION_TOKEN_ISSUER_PREFIX}{project_id}",
            audience=project_id,
        )

    async def _verify(
        self,
        token: str,
        keys: KeyResolver,
        *,
        issuer: str,
        audience: str,
    ) -> FirebaseClaims:
        # Step 1: Read kid and alg from the unverified header.
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Token validation failed: {e}") from e

        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise MissingKeyId('Missing "kid" parameter in JWT header')

        alg = header.get("alg")
        if alg != ALGORITHM:
            raise InvalidAlgorithm(f'"alg" (Algorithm) Header value not allowed: {alg}')

        # Step 2: Resolve the signing key. KeyProviderError passes through.
        key = await keys.resolve(kid, alg)

        # Step 3: Signature, presence of required claims, iss and aud.
        # Time-based claims are checked against our own clock below.
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                key,
                algorithms=[ALGORITHM],
                audience=audience,
                issuer=issuer,
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except jwt.MissingRequiredClaimError as e:
            raise InvalidClaim(str(e), claim=e.claim) from e
        except jwt.InvalidIssuerError as e:
            raise InvalidClaim(f"Token validation failed: {e}", claim="iss") from e
        except jwt.InvalidAudienceError as e:
            raise InvalidClaim(f"Token validation failed: {e}", claim="aud") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Token validation failed: {e}") from e

        if not isinstance(payload["firebase"], dict):
            raise InvalidClaim('"firebase" claim must be an object', claim="firebase")

        self._validate_times(payload)

        # Step 4: Tenant isolation.
        tenant_id = self._opt.tenant_id
        if tenant_id and payload["firebase"].get("tenant") != tenant_id:
            logger.info(
                "Token rejected",
                reason="tenant mismatch",
                expected_tenant=tenant_id,
                kid=kid,
            )
            raise InvalidClaim("Invalid tenantId", claim="firebase.tenant")

        # Provide uid for compatibility with the Firebase Admin SDK.
        payload["uid"] = payload["sub"]

        return cast(FirebaseClaims, payload)

    def _validate_times(self, payload: dict[str, Any]) -> None:
        for claim in ("exp", "iat", "nbf"):
            if claim not in payload:
                continue
            value = payload[claim]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidClaim(f'"{claim}" claim must be a number', claim=claim)

        now = self._clock()
        leeway = self._opt.leeway

        if payload["exp"] <= now - leeway:
            raise ExpiredToken("Token has expired")
        if "nbf" in payload and payload["nbf"] > now + leeway:
            raise InvalidClaim("The token is not yet valid (nbf)", claim="nbf")
        if payload["iat"] > now + leeway:
            raise InvalidClaim("The token is not yet valid (iat)", claim="iat")

