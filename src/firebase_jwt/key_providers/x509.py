"""
X.509 certificate key provider.

Resolves token signing keys from a Google endpoint that publishes a JSON
object mapping each ``kid`` to a PEM-encoded X.509 certificate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import httpx
import structlog
from cryptography import x509
from jwt.algorithms import get_default_algorithms

from ..errors import KeyFetchError, KeyImportError, KeyNotFound
from ..protocols import KeyResolver, PublicKey

logger = structlog.get_logger(__name__)

GOOGLE_PUBLIC_KEYS_URL: Final[str] = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
"""Certificates signing Firebase ID tokens."""

GOOGLE_IDENTITYTOOLKIT_PUBLIC_KEYS_URL: Final[str] = (
    "https://www.googleapis.com/identitytoolkit/v3/relyingparty/publicKeys"
)
"""Certificates signing Firebase session cookies."""

_DEFAULT_TIMEOUT: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class RawKey:
    """A fetched certificate that has not been imported yet."""

    pem: object


@dataclass(frozen=True, slots=True)
class ImportedKey:
    """A certificate already turned into a verification key."""

    key: PublicKey


type KeyEntry = RawKey | ImportedKey


def import_x509(pem: object, alg: str) -> PublicKey:
    """Load a PEM certificate and prepare its public key for ``alg``.

    Raises:
        KeyError: ``alg`` is not an algorithm PyJWT knows.
        TypeError, ValueError: the PEM is not a certificate, or its key type
            does not fit ``alg``.
    """
    algorithm = get_default_algorithms()[alg]
    if not isinstance(pem, str):
        raise TypeError("Expecting a PEM-formatted certificate string")
    certificate = x509.load_pem_x509_certificate(pem.encode("ascii"))
    return algorithm.prepare_key(certificate.public_key())


class X509KeysProvider(KeyResolver):
    """
    Resolves signing keys from a published certificate set with a lazily
    refreshed in-memory cache.

    Resolution Strategy
    -------------------
    For each requested ``kid``:

    1) Cache lookup
        - If the ``kid`` is in the current key set, use that entry.

    2) Refresh on miss
        - Fetch the whole key set and replace the cached one. Keys imported
          from the previous set are discarded.
        - If the ``kid`` is still unknown, fail with KeyNotFound.

    3) Lazy import
        - A raw certificate is imported on first use and stored back as an
          ImportedKey, so each certificate is imported once per fetch.

    Concurrency
    -----------
    There is no lock around check-fetch-store. Two coroutines missing the
    same ``kid`` at once both fetch, and the last response to arrive becomes
    the cached set. Every fetch builds a fresh dict and swaps it in with one
    assignment, so readers never see a half-populated set.

    Parameters
    ----------
    keys_url : str
        Endpoint serving ``{"<kid>": "<PEM certificate>", ...}``.

    timeout : float
        Timeout in seconds for the fetch request.

    transport : httpx.AsyncBaseTransport | None
        Optional transport passed to ``httpx.AsyncClient``.

    Example
    -------
    provider = X509KeysProvider(GOOGLE_PUBLIC_KEYS_URL)

    key = await provider.resolve(kid, "RS256")
    """

    def __init__(
        self,
        keys_url: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = keys_url
        self._timeout = timeout
        self._transport = transport
        self._keys: dict[str, KeyEntry] = {}

    @property
    def keys_url(self) -> str:
        return self._url

    async def resolve(self, kid: str, alg: str) -> PublicKey:
        keys = self._keys
        if kid not in keys:
            keys = await self._fetch()
            self._keys = keys

        entry = keys.get(kid)
        if entry is None:
            logger.warning("Public key not found", kid=kid, url=self._url)
            raise KeyNotFound(f"Public key not found for kid: {kid}")

        if isinstance(entry, ImportedKey):
            return entry.key

        try:
            key = import_x509(entry.pem, alg)
        except Exception as e:
            raise KeyImportError(f"Failed to import public key for kid: {kid}") from e

        keys[kid] = ImportedKey(key)
        return key

    async def _fetch(self) -> dict[str, KeyEntry]:
        logger.debug("Fetching public keys", url=self._url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(self._url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Public key fetch failed", url=self._url, error=str(e))
            raise KeyFetchError(f"Failed to fetch public keys: {e}") from e

        if not isinstance(data, dict):
            logger.warning("Public key fetch failed", url=self._url, error="not an object")
            raise KeyFetchError("Failed to fetch public keys: response is not a JSON object")

        logger.info("Public keys refreshed", url=self._url, count=len(data))
        return {str(kid): RawKey(pem) for kid, pem in data.items()}
