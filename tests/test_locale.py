from fastapi.testclient import TestClient
import pytest

from toursite.i18n.resolver import (
    is_exempt_path,
    parse_accept_language,
    resolve_language,
    split_language_prefix,
)
from toursite.i18n.routing import RoutingConfig, RoutingConfigProvider
from toursite.main import app

MULTI = RoutingConfig(enable_multi_language=True)
SINGLE = RoutingConfig(enable_multi_language=False)


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("de,en;q=0.5", ["de", "en"]),
        ("en-US,en;q=0.9,id;q=0.8", ["en", "id"]),
        ("zh-CN", ["zh"]),
        ("fr-FR,nl;q=0.7", ["nl"]),
        ("en;q=0,de", ["de"]),
        ("%%%,;;;", []),
        ("", []),
        (None, []),
    ],
)
def test_parse_accept_language(header: str | None, expected: list[str]) -> None:
    assert parse_accept_language(header) == expected


def test_parse_accept_language_keeps_header_order() -> None:
    # Quality values are validated but do not reorder entries
    assert parse_accept_language("en;q=0.1,de;q=0.9") == ["en", "de"]


def test_split_language_prefix() -> None:
    assert split_language_prefix("/en/packages") == ("en", "/packages")
    assert split_language_prefix("/de") == ("de", "/")
    assert split_language_prefix("/packages") == (None, "/packages")
    assert split_language_prefix("/english/x") == (None, "/english/x")


def test_exempt_paths_match_whole_segments() -> None:
    assert is_exempt_path("/api")
    assert is_exempt_path("/api/packages")
    assert is_exempt_path("/sitemap.xml")
    assert not is_exempt_path("/apiary")
    # Unserved prefixes are routed like any page
    assert not is_exempt_path("/google")
    assert resolve_language("/google", "", MULTI).redirect == "/id/google"


def test_exempt_path_passes_through() -> None:
    result = resolve_language("/api/packages", "de", MULTI)
    assert result.exempt
    assert result.redirect is None
    assert result.path == "/api/packages"
    assert result.language == "de"


def test_multi_language_keeps_prefixed_path() -> None:
    result = resolve_language("/en/packages", "de", MULTI)
    assert result.redirect is None
    assert result.path == "/en/packages"
    assert result.language == "en"


def test_multi_language_redirects_to_negotiated_language() -> None:
    result = resolve_language("/packages", "de-DE,en;q=0.8", MULTI)
    assert result.redirect == "/de/packages"
    assert result.language == "de"


def test_multi_language_falls_back_to_default() -> None:
    result = resolve_language("/", "fr", MULTI)
    assert result.redirect == "/id"
    assert result.language == "id"


def test_single_language_strips_prefix() -> None:
    result = resolve_language("/en/packages", "en", SINGLE)
    assert result.redirect == "/packages"
    assert result.language == "id"


def test_single_language_rewrites_to_primary() -> None:
    result = resolve_language("/packages", "de", SINGLE)
    assert result.redirect is None
    assert result.path == "/id/packages"
    assert result.language == "id"


def test_root_rewrite_in_single_language_mode() -> None:
    result = resolve_language("/", None, SINGLE)
    assert result.path == "/id"


def test_provider_defaults_when_file_missing(tmp_path) -> None:
    provider = RoutingConfigProvider(tmp_path / "missing.json")
    assert provider.get().enable_multi_language is True


def test_provider_defaults_on_invalid_file(tmp_path) -> None:
    path = tmp_path / "routing.json"
    path.write_text("{not json", encoding="utf-8")
    assert RoutingConfigProvider(path).get().enable_multi_language is True


def test_provider_update_persists_with_alias(tmp_path) -> None:
    path = tmp_path / "config" / "routing.json"
    provider = RoutingConfigProvider(path)
    provider.update(SINGLE)

    assert provider.get().enable_multi_language is False
    assert '"enableMultiLanguage": false' in path.read_text(encoding="utf-8")
    assert RoutingConfigProvider(path).get().enable_multi_language is False


def test_provider_reload_picks_up_manual_edit(tmp_path) -> None:
    path = tmp_path / "routing.json"
    path.write_text('{"enableMultiLanguage": true}', encoding="utf-8")
    provider = RoutingConfigProvider(path, ttl_seconds=3600)
    assert provider.get().enable_multi_language is True

    path.write_text('{"enableMultiLanguage": false}', encoding="utf-8")
    # Still cached within the TTL
    assert provider.get().enable_multi_language is True
    assert provider.reload().enable_multi_language is False


def test_middleware_redirects_unprefixed_page(client: TestClient) -> None:
    response = client.get(
        "/packages?page=2",
        headers={"Accept-Language": "nl,en;q=0.5"},
        follow_redirects=False,
    )
    assert response.status_code == 307
    assert response.headers["location"] == "/nl/packages?page=2"
    assert response.headers["content-language"] == "nl"


def test_middleware_serves_prefixed_page(client: TestClient) -> None:
    response = client.get("/en/packages")
    assert response.status_code == 200
    assert response.json()["language"] == "en"
    assert response.headers["content-language"] == "en"


def test_middleware_single_language_mode(client: TestClient) -> None:
    app.state.routing_provider.update(SINGLE)

    response = client.get("/en/packages", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/packages"

    response = client.get("/packages", headers={"Accept-Language": "de"})
    assert response.status_code == 200
    assert response.json()["language"] == "id"


def test_routing_toggle_through_api(admin_client: TestClient) -> None:
    response = admin_client.post(
        "/api/settings/routing", json={"enableMultiLanguage": False}
    )
    assert response.status_code == 200
    assert response.json() == {"enableMultiLanguage": False}

    assert admin_client.get("/api/settings/routing").json() == {
        "enableMultiLanguage": False
    }
    response = admin_client.get("/de", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/"


def test_unknown_prefix_is_treated_as_page_path(client: TestClient) -> None:
    app.state.routing_provider.update(MULTI)
    response = client.get("/xx/packages", follow_redirects=False)
    # "xx" is not a language code, so the whole path gets a prefix
    assert response.status_code == 307
    assert response.headers["location"] == "/id/xx/packages"
