import asyncio
import json

from fastapi.testclient import TestClient
import httpx
import pytest
from sqlmodel import Session

from toursite.core.config import settings
from toursite.core.exceptions import TranslationProviderError
from toursite.core.security import (
    decrypt_api_key,
    encrypt_api_key,
    generate_session_token,
    mask_secret,
)
from toursite.site_settings.models import SINGLETON_ID, ApiKeySettings
from toursite.site_settings.service import get_api_key, save_api_keys
from toursite.translations.provider import DeepLProvider, resolve_deepl_key


def test_encrypt_round_trip() -> None:
    stored = encrypt_api_key("deepl-secret:fx")
    iv_hex, _, cipher_hex = stored.partition(":")

    assert len(iv_hex) == 32
    assert len(cipher_hex) % 32 == 0
    assert "deepl-secret" not in stored
    assert decrypt_api_key(stored) == "deepl-secret:fx"


def test_each_encryption_uses_a_fresh_iv() -> None:
    assert encrypt_api_key("same") != encrypt_api_key("same")


def test_plaintext_values_pass_through() -> None:
    assert decrypt_api_key("legacy-plain-key") == "legacy-plain-key"


def test_undecryptable_values_are_returned_unchanged() -> None:
    assert decrypt_api_key("zz:not-hex") == "zz:not-hex"
    stored = encrypt_api_key("secret", key="a" * 32)
    assert decrypt_api_key(stored, key="b" * 32) != "secret"


def test_mask_secret() -> None:
    assert mask_secret("abcdefgh") == "****efgh"
    assert mask_secret("abc") == "***"


def test_session_tokens_are_random_hex() -> None:
    token = generate_session_token()
    assert len(token) == 64
    int(token, 16)
    assert token != generate_session_token()


def test_saved_keys_are_encrypted_at_rest(session: Session) -> None:
    statuses = save_api_keys(session=session, api_keys={"deepl": "my-deepl-key"})

    row = session.get(ApiKeySettings, SINGLETON_ID)
    assert row is not None
    assert row.keys["deepl"] != "my-deepl-key"
    assert ":" in row.keys["deepl"]
    assert get_api_key(session=session, service="deepl") == "my-deepl-key"

    deepl = next(s for s in statuses if s.service == "deepl")
    assert deepl.is_configured
    assert deepl.masked_key == "********-key"


def test_blank_value_removes_key(session: Session) -> None:
    save_api_keys(session=session, api_keys={"deepl": "k1", "mapbox": "pk.abc"})
    save_api_keys(session=session, api_keys={"deepl": " "})

    assert get_api_key(session=session, service="deepl") is None
    assert get_api_key(session=session, service="mapbox") == "pk.abc"


def test_stored_key_takes_precedence_over_environment(
    session: Session, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "DEEPL_API_KEY", "env-key")
    assert resolve_deepl_key(session) == "env-key"

    save_api_keys(session=session, api_keys={"deepl": "cms-key"})
    assert resolve_deepl_key(session) == "cms-key"


def test_api_keys_endpoints(admin_client: TestClient) -> None:
    response = admin_client.post(
        "/api/settings/api-keys", json={"api_keys": {"stripe": "sk_test_123456"}}
    )
    assert response.status_code == 200

    listing = admin_client.get("/api/settings/api-keys").json()
    stripe = next(item for item in listing if item["service"] == "stripe")
    assert stripe == {
        "service": "stripe",
        "is_configured": True,
        "masked_key": "**********3456",
    }
    assert "sk_test_123456" not in json.dumps(listing)


def test_api_keys_need_manage_options(editor_client: TestClient) -> None:
    assert editor_client.get("/api/settings/api-keys").status_code == 403


def test_format_checked_api_key(admin_client: TestClient) -> None:
    response = admin_client.post(
        "/api/settings/api-keys/test", json={"service": "mapbox", "api_key": "sk.nope"}
    )
    assert response.status_code == 200
    assert response.json()["valid"] is False

    response = admin_client.post(
        "/api/settings/api-keys/test", json={"service": "unknown", "api_key": "x"}
    )
    assert response.status_code == 400


def test_site_settings(admin_client: TestClient) -> None:
    assert admin_client.get("/api/settings/site").json()["default_language"] == "id"

    response = admin_client.patch(
        "/api/settings/site", json={"site_name": "Bali Trips", "default_language": "en"}
    )
    assert response.status_code == 200
    assert response.json()["site_name"] == "Bali Trips"

    response = admin_client.patch("/api/settings/site", json={"default_language": "fr"})
    assert response.status_code == 400


def _deepl_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_deepl_provider_request_and_response() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"translations": [{"text": "Beach"}, {"text": "Temple"}]}
        )

    async def run() -> list[str]:
        async with _deepl_client(handler) as client:
            provider = DeepLProvider("key:fx", client=client)
            return await provider.translate_texts(["Pantai", "Pura"], "id", "en")

    assert asyncio.run(run()) == ["Beach", "Temple"]
    assert seen["url"] == "https://api-free.deepl.com/v2/translate"
    assert seen["auth"] == "DeepL-Auth-Key key:fx"
    assert seen["body"] == {
        "text": ["Pantai", "Pura"],
        "source_lang": "ID",
        "target_lang": "EN-US",
    }


def test_deepl_provider_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(456, json={"message": "Quota exceeded"})

    async def run() -> list[str]:
        async with _deepl_client(handler) as client:
            provider = DeepLProvider("key", client=client)
            return await provider.translate_texts(["Pantai"], "id", "de")

    with pytest.raises(TranslationProviderError):
        asyncio.run(run())


def test_deepl_provider_rejects_short_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"translations": []})

    async def run() -> list[str]:
        async with _deepl_client(handler) as client:
            provider = DeepLProvider("key", client=client)
            return await provider.translate_texts(["Pantai"], "id", "de")

    with pytest.raises(TranslationProviderError):
        asyncio.run(run())
