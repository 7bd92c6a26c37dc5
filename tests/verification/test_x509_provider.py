import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

import firebase_jwt as m
from firebase_jwt.key_providers import x509 as x509_provider


def make_provider(key_server) -> m.X509KeysProvider:
    return m.X509KeysProvider(
        "https://keys.example.test/certs", transport=key_server.transport
    )


@pytest.mark.asyncio
async def test_provider_fetches_on_miss_and_returns_public_key(key_server, rsa_key):
    provider = make_provider(key_server)

    key = await provider.resolve("kid1", "RS256")

    assert isinstance(key, rsa.RSAPublicKey)
    assert key.public_numbers() == rsa_key.public_key().public_numbers()
    assert key_server.calls == 1


@pytest.mark.asyncio
async def test_provider_imports_once_and_reuses_key(key_server, monkeypatch: pytest.MonkeyPatch):
    provider = make_provider(key_server)

    imports: list[str] = []
    real_import = x509_provider.import_x509

    def counting_import(pem, alg):
        imports.append(alg)
        return real_import(pem, alg)

    monkeypatch.setattr(x509_provider, "import_x509", counting_import)

    first = await provider.resolve("kid1", "RS256")
    second = await provider.resolve("kid1", "RS256")

    assert first is second
    assert imports == ["RS256"]
    assert key_server.calls == 1


@pytest.mark.asyncio
async def test_provider_unknown_kid_refetches_once_then_fails(key_server):
    provider = make_provider(key_server)
    await provider.resolve("kid1", "RS256")

    with pytest.raises(m.KeyNotFound, match="Public key not found for kid: nope"):
        await provider.resolve("nope", "RS256")

    assert key_server.calls == 2


@pytest.mark.asyncio
async def test_provider_picks_up_rotated_key(key_server, other_rsa_cert, other_rsa_key):
    provider = make_provider(key_server)
    await provider.resolve("kid1", "RS256")

    key_server.keys = {"kid2": other_rsa_cert}
    key = await provider.resolve("kid2", "RS256")

    assert key.public_numbers() == other_rsa_key.public_key().public_numbers()
    assert key_server.calls == 2


@pytest.mark.asyncio
async def test_provider_refetch_replaces_whole_key_set(key_server, other_rsa_cert):
    provider = make_provider(key_server)
    await provider.resolve("kid1", "RS256")

    # Rotation drops kid1; the cached copy must not survive the refetch.
    key_server.keys = {"kid2": other_rsa_cert}
    await provider.resolve("kid2", "RS256")

    with pytest.raises(m.KeyNotFound):
        await provider.resolve("kid1", "RS256")
    assert key_server.calls == 3


@pytest.mark.asyncio
async def test_provider_http_error_raises_fetch_error(key_server):
    key_server.status_code = 500
    provider = make_provider(key_server)

    with pytest.raises(m.KeyFetchError, match="Failed to fetch public keys"):
        await provider.resolve("kid1", "RS256")


@pytest.mark.asyncio
async def test_provider_transport_error_raises_fetch_error(key_server):
    key_server.error = httpx.ConnectError("connection refused")
    provider = make_provider(key_server)

    with pytest.raises(m.KeyFetchError, match="connection refused") as exc_info:
        await provider.resolve("kid1", "RS256")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not-json", "[1, 2, 3]"])
async def test_provider_bad_body_raises_fetch_error(key_server, body):
    key_server.body = body
    provider = make_provider(key_server)

    with pytest.raises(m.KeyFetchError):
        await provider.resolve("kid1", "RS256")


@pytest.mark.asyncio
async def test_provider_failed_fetch_keeps_previous_key_set(key_server):
    provider = make_provider(key_server)
    key = await provider.resolve("kid1", "RS256")

    key_server.status_code = 503
    with pytest.raises(m.KeyFetchError):
        await provider.resolve("unknown", "RS256")

    assert await provider.resolve("kid1", "RS256") is key
    assert key_server.calls == 2


@pytest.mark.asyncio
async def test_provider_invalid_pem_raises_import_error(key_server):
    key_server.keys = {"bad": "-----BEGIN CERTIFICATE-----\nnope\n-----END CERTIFICATE-----"}
    provider = make_provider(key_server)

    with pytest.raises(m.KeyImportError, match="Failed to import public key for kid: bad"):
        await provider.resolve("bad", "RS256")


@pytest.mark.asyncio
async def test_provider_key_type_mismatch_raises_import_error(key_server, ec_cert):
    key_server.keys = {"ec": ec_cert}
    provider = make_provider(key_server)

    with pytest.raises(m.KeyImportError):
        await provider.resolve("ec", "RS256")


@pytest.mark.asyncio
async def test_provider_non_string_entry_raises_import_error(key_server):
    key_server.keys = {"num": 42}
    provider = make_provider(key_server)

    with pytest.raises(m.KeyImportError):
        await provider.resolve("num", "RS256")


def test_key_provider_errors_are_invalid_token():
    for error in (m.MissingKeyId, m.KeyFetchError, m.KeyNotFound, m.KeyImportError):
        assert issubclass(error, m.KeyProviderError)
        assert issubclass(error, m.InvalidToken)


def test_import_x509_unknown_algorithm(rsa_cert):
    with pytest.raises(KeyError):
        x509_provider.import_x509(rsa_cert, "XX999")


def test_provider_exposes_url():
    provider = m.X509KeysProvider(m.GOOGLE_PUBLIC_KEYS_URL)
    assert provider.keys_url == m.GOOGLE_PUBLIC_KEYS_URL
