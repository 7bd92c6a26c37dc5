"""
Key provider implementations for resolving token signing keys.

This package contains implementations of the KeyResolver protocol.
"""

from .x509 import (
    GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL,
    GOOGLE_PUBLIC_KEYS_URL,
    ImportedKey,
    RawKey,
    X509KeysProvider,
)

__all__ = [
    "GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL",
    "GOOGLE_PUBLIC_KEYS_URL",
    "ImportedKey",
    "RawKey",
    "X509KeysProvider",
]
