"""Token extraction strategies from HTTP requests.

This module provides implementations of the Extractor protocol for retrieving
Firebase tokens from different parts of an HTTP request.

Implementations:
- BearerExtractor: ID tokens from the Authorization: Bearer <token> header
- CookieExtractor: session cookies minted by the Firebase Admin SDK
"""

from __future__ import annotations

from typing import Final

from flask import request

from .errors import MissingToken

DEFAULT_SESSION_COOKIE: Final[str] = "session"
"""Cookie name Firebase's session cookie guides use."""


class BearerExtractor:
    """Extracts an ID token from the Authorization header using Bearer scheme.

    Expects requests with header format:
        Authorization: Bearer <token>

    Security Notes:
        - Bearer tokens should only be sent over HTTPS
        - Tokens in headers are not vulnerable to CSRF (unlike cookies)
    """

    def extract(self) -> str:
        """Extract the token from the Authorization: Bearer header.

        Returns:
            Raw token string (without "Bearer " prefix).

        Raises:
            MissingToken: If the header is missing or doesn't use Bearer scheme.
        """
        auth_header = request.headers.get("Authorization", "").strip()

        if not auth_header:
            raise MissingToken("Missing Authorization header")

        parts = auth_header.split(" ", 1)
        if len(parts) != 2:
            raise MissingToken("Invalid Authorization header format (expected 'Bearer <token>')")

        scheme, token = parts

        if scheme.lower() != "bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer')")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")

        return token


class CookieExtractor:
    """Extracts a token from an HTTP cookie.

    Firebase session cookies are set by the backend after exchanging an ID
    token, and are read back from this cookie on later requests.

    Security Notes:
        - Cookies MUST use HttpOnly and Secure flags
        - Cookie-based auth is vulnerable to CSRF; implement CSRF protection

    Attributes:
        _name: Name of the cookie containing the token.
    """

    def __init__(self, cookie_name: str = DEFAULT_SESSION_COOKIE) -> None:
        """Initialize cookie extractor.

        Raises:
            ValueError: If cookie_name is empty.
        """
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    @property
    def cookie_name(self) -> str:
        return self._name

    def extract(self) -> str:
        token = request.cookies.get(self._name)

        if not token:
            raise MissingToken(f"Missing cookie '{self._name}'")

        return token
