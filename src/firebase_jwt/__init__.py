"""
Firebase ID token and session cookie verification.

High-level flow (per call)
--------------------------
1. `FirebaseJwtVerifier.verify_id_token(token)` or `verify_session_token(token)`.
2. The unverified header must carry a `kid` and `alg == "RS256"`.
3. The key provider bound to the token variant resolves `kid`:
   - Cached key set hit → use it
   - Miss → refetch Google's certificate set, replacing the cache
   - Certificates are imported lazily, once per fetch
4. PyJWT checks signature, required claims, issuer (`https://securetoken.google.com/<project>`
   or `https://session.firebase.google.com/<project>`) and audience (`<project>`).
5. exp/nbf/iat are checked against the verifier's clock.
6. If a tenant is configured, `firebase.tenant` must match it.
7. `uid` is set to `sub` and the claims are returned.

Example usage
-------------

.. code-block:: python

    from firebase_jwt import (
        AuthExtension,
        FirebaseJwtVerifier,
        FirebaseJwtVerifierOptions,
    )

    verifier = FirebaseJwtVerifier(
        FirebaseJwtVerifierOptions(project_id="my-project", tenant_id="tenant-1")
    )

    claims = await verifier.verify_id_token(id_token)
    print(claims["uid"])

    # Flask
    auth = AuthExtension(verifier)

    @app.route("/me")
    @auth.require_id_token()
    def me():
        return {"uid": g.claims["uid"]}
"""

# Claims
from .claims import REQUIRED_CLAIMS, FirebaseClaims, FirebaseInfo

# Errors
from .errors import (
    AuthError,
    ExpiredToken,
    InvalidAlgorithm,
    InvalidClaim,
    InvalidToken,
    KeyFetchError,
    KeyImportError,
    KeyNotFound,
    KeyProviderError,
    MissingKeyId,
    MissingToken,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import AuthExtension, get_verified_session_claims

# Key providers
from .key_providers import (
    GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL,
    GOOGLE_PUBLIC_KEYS_URL,
    ImportedKey,
    RawKey,
    X509KeysProvider,
)

# Protocols
from .protocols import Clock, Extractor, KeyResolver, PublicKey, TokenVerifier, ViewFunc

# Verifier
from .verifier import (
    ALGORITHM,
    ID_TOKEN_ISSUER_PREFIX,
    SESSION_TOKEN_ISSUER_PREFIX,
    FirebaseJwtVerifier,
    FirebaseJwtVerifierOptions,
)

__all__ = [
    # Claims
    "FirebaseClaims",
    "FirebaseInfo",
    "REQUIRED_CLAIMS",
    # Errors
    "AuthError",
    "ExpiredToken",
    "InvalidAlgorithm",
    "InvalidClaim",
    "InvalidToken",
    "KeyFetchError",
    "KeyImportError",
    "KeyNotFound",
    "KeyProviderError",
    "MissingKeyId",
    "MissingToken",
    # Protocols
    "Clock",
    "Extractor",
    "KeyResolver",
    "PublicKey",
    "TokenVerifier",
    "ViewFunc",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    # Key providers
    "GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL",
    "GOOGLE_PUBLIC_KEYS_URL",
    "ImportedKey",
    "RawKey",
    "X509KeysProvider",
    # Verifier
    "ALGORITHM",
    "ID_TOKEN_ISSUER_PREFIX",
    "SESSION_TOKEN_ISSUER_PREFIX",
    "FirebaseJwtVerifier",
    "FirebaseJwtVerifierOptions",
    # Flask extension
    "AuthExtension",
    "get_verified_session_claims",
]
