"""Typed shape of a verified Firebase token payload."""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class FirebaseInfo(TypedDict, total=False):
    """The reserved ``firebase`` claim describing the sign-in event.

    Attributes:
        sign_in_provider: Provider used to sign in, e.g. ``"password"``,
            ``"google.com"``, ``"phone"``, ``"anonymous"`` or ``"custom"``.
        identities: Provider-specific identity details.
        tenant: Tenant the user belongs to, for multi-tenant projects.
        sign_in_second_factor: Second factor type for MFA users (``"phone"``).
        second_factor_identifier: ``uid`` of the second factor used.
    """

    sign_in_provider: str
    identities: dict[str, Any]
    tenant: str
    sign_in_second_factor: str
    second_factor_identifier: str


class FirebaseClaims(TypedDict):
    """Claims returned by a successful verification.

    ``uid`` is not part of the signed token. It is copied from ``sub`` for
    compatibility with the Firebase Admin SDK.
    """

    aud: str
    iss: str
    sub: str
    uid: str
    exp: int
    iat: int
    auth_time: int
    firebase: FirebaseInfo
    email: NotRequired[str]
    email_verified: NotRequired[bool]
    nbf: NotRequired[int]


REQUIRED_CLAIMS: tuple[str, ...] = (
    "exp",
    "iat",
    "aud",
    "iss",
    "sub",
    "auth_time",
    "firebase",
)
"""Claims every Firebase ID token and session cookie must carry."""
