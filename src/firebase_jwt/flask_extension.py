"""Flask extension for Firebase authentication.

This module provides the integration point between the Firebase verifier and
Flask applications, with a decorator per token variant.

Key Components:
- AuthExtension: decorators protecting Flask routes with ID tokens or
  session cookies
- get_verified_session_claims: verifies the session cookie of the current
  request from inside a view

Security Model:
1. Extract token from request (header or cookie)
2. Verify token signature and claims
3. Store verified claims in flask.g.claims for route access
4. Convert auth errors to HTTP 401 responses

Verification is asynchronous, so protected views run through Flask's async
view support (install ``flask[async]``). Both sync and async views can be
decorated.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

import structlog
from flask import Flask, abort, g

from .errors import AuthError
from .extractors import DEFAULT_SESSION_COOKIE, BearerExtractor, CookieExtractor

if TYPE_CHECKING:
    from .claims import FirebaseClaims
    from .protocols import Extractor, TokenVerifier, ViewFunc

logger = structlog.get_logger(__name__)

_EXT_KEY: Final[str] = "firebase_auth"
"""Flask extensions registry key for AuthExtension."""

type _VerifyCall = Callable[[TokenVerifier, str], Awaitable[FirebaseClaims]]


class AuthExtension:
    """
    Flask decorator glue for Firebase authentication.

    Responsibilities:
    - Extract token from request
    - Verify token (TokenVerifier)
    - Store verified claims in `flask.g.claims`
    - Convert domain errors to HTTP responses (abort)

    Pattern:
        auth = AuthExtension()
        auth.init_app(app, verifier=verifier)

    Usage:
        auth = AuthExtension(verifier)

        @app.get("/me")
        @auth.require_id_token()
        def me(): ...

        @app.get("/dashboard")
        @auth.require_session()
        def dashboard(): ...
    """

    def __init__(
        self,
        verifier: TokenVerifier | None = None,
        *,
        extractor: Extractor | None = None,
        session_extractor: Extractor | None = None,
    ) -> None:
        self._verifier: TokenVerifier | None = verifier
        self._extractor: Extractor = extractor or BearerExtractor()
        self._session_extractor: Extractor = session_extractor or CookieExtractor(
            DEFAULT_SESSION_COOKIE
        )

    def init_app(
        self,
        app: Flask,
        *,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
        session_extractor: Extractor | None = None,
    ) -> None:
        """Initialize the Flask app with the AuthExtension.

        Args:
            app (Flask): The Flask application instance.
            verifier (TokenVerifier | None, optional): Token verifier instance. Defaults to None.
            extractor (Extractor | None, optional): ID token extractor. Defaults to None.
            session_extractor (Extractor | None, optional): Session cookie extractor.
                Defaults to None.
        """
        if verifier is not None:
            self._verifier = verifier
        if extractor is not None:
            self._extractor = extractor
        if session_extractor is not None:
            self._session_extractor = session_extractor

        app.extensions[_EXT_KEY] = self

    def require_id_token(self) -> Callable[[ViewFunc], ViewFunc]:
        """Decorator requiring a valid Firebase ID token.

        Error mapping:
        - ``MissingToken``  -> HTTP 401 ("Missing token")
        - ``ExpiredToken``  -> HTTP 401 ("Expired token")
        - ``InvalidToken``  -> HTTP 401 ("Invalid token")
        - Any other Error   -> HTTP 401 ("Authentication failed")

        Side Effects:
            - Writes verified claims to ``flask.g.claims`` before calling the view.
            - May terminate request handling early via ``flask.abort``.
        """
        return self._protect(
            lambda: self._extractor,
            lambda verifier, token: verifier.verify_id_token(token),
        )

    def require_session(self) -> Callable[[ViewFunc], ViewFunc]:
        """Decorator requiring a valid Firebase session cookie.

        Same error mapping and side effects as ``require_id_token``.
        """
        return self._protect(
            lambda: self._session_extractor,
            lambda verifier, token: verifier.verify_session_token(token),
        )

    def _protect(
        self,
        extractor: Callable[[], Extractor],
        verify: _VerifyCall,
    ) -> Callable[[ViewFunc], ViewFunc]:
        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    token = extractor().extract()
                    g.claims = await verify(self._get_verifier(), token)
                except AuthError as e:
                    logger.info("Request not authenticated", reason=str(e))
                    abort(e.error_code, description=e.description)
                except Exception:
                    logger.exception("Token verification crashed")
                    abort(401, description="Authentication failed")

                rv = view(*args, **kwargs)
                if inspect.isawaitable(rv):
                    rv = await rv
                return rv

            return wrapper

        return decorator

    def _get_verifier(self) -> TokenVerifier:
        if self._verifier is None:
            raise RuntimeError("AuthExtension has no verifier; pass one to init_app()")
        return self._verifier


async def get_verified_session_claims(
    verifier: TokenVerifier,
    *,
    cookie_name: str = DEFAULT_SESSION_COOKIE,
) -> FirebaseClaims:
    """
    Return verified session-cookie claims from the current Flask request.

    - Extracts the session cookie (default "session")
    - Verifies signature + issuer + audience + tenant
    - Returns decoded claims

    Aborts with 401 when the cookie is missing or invalid.
    """
    try:
        token = CookieExtractor(cookie_name).extract()
        return await verifier.verify_session_token(token)
    except AuthError as e:
        abort(e.error_code, description=e.description)
