import datetime
import json
from typing import Any

import httpx
import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID
from flask import Flask

NOW = 1_700_000_000
PROJECT_ID = "proj1"
ID_ISSUER = f"https://securetoken.google.com/{PROJECT_ID}"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


def make_certificate(private_key: Any) -> str:
    """Self-signed PEM certificate for ``private_key``."""
    name = x509.Name(
        [x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.system.gserviceaccount.com")]
    )
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_cert(rsa_key: rsa.RSAPrivateKey) -> str:
    return make_certificate(rsa_key)


@pytest.fixture(scope="session")
def ec_cert() -> str:
    return make_certificate(ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def make_claims():
    """
    Factory fixture for a complete, valid set of ID token claims for
    "proj1" issued at NOW. Keyword arguments override single claims.
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        claims: dict[str, Any] = {
            "exp": NOW + 3600,
            "iat": NOW,
            "aud": PROJECT_ID,
            "iss": ID_ISSUER,
            "sub": "user123",
            "auth_time": NOW,
            "firebase": {"sign_in_provider": "password"},
        }
        claims.update(overrides)
        return claims

    return _make


@pytest.fixture
def make_token(rsa_key: rsa.RSAPrivateKey):
    """
    Factory fixture that returns a function.

    Usage in tests:
        token = make_token(make_claims(), kid="kid1")
    """

    def _make(
        claims: dict[str, Any],
        *,
        kid: str | None = "kid1",
        key: Any = None,
        algorithm: str = "RS256",
    ) -> str:
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(
            claims, key if key is not None else rsa_key, algorithm=algorithm, headers=headers
        )

    return _make


class KeyServer:
    """
    Fake certificate endpoint served through httpx.MockTransport.
    Counts requests and can be switched to fail.
    """

    def __init__(self, keys: dict[str, Any] | None = None):
        self.keys: dict[str, Any] = dict(keys or {})
        self.calls = 0
        self.status_code = 200
        self.body: str | None = None
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.body is not None:
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, text=json.dumps(self.keys))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def key_server(rsa_cert: str) -> KeyServer:
    return KeyServer({"kid1": rsa_cert})


class StaticResolver:
    """Duck-typed KeyResolver backed by a fixed in-memory key map."""

    def __init__(self, keys: dict[str, Any]):
        self._keys = keys
        self.calls: list[tuple[str, str]] = []

    async def resolve(self, kid: str, alg: str) -> Any:
        self.calls.append((kid, alg))
        return self._keys[kid]


@pytest.fixture
def static_resolver(rsa_key: rsa.RSAPrivateKey) -> StaticResolver:
    return StaticResolver({"kid1": rsa_key.public_key()})


@pytest.fixture(scope="session")
def other_rsa_cert(other_rsa_key: rsa.RSAPrivateKey) -> str:
    return make_certificate(other_rsa_key)
