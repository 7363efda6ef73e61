from collections.abc import Generator, Iterator
import os
from pathlib import Path
import tempfile

# Settings are read once at import; point them at throwaway locations first
_TMP_ROOT = Path(tempfile.mkdtemp(prefix="toursite-tests-"))
os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "ENVIRONMENT": "local",
        "SECRET_KEY": "test-secret-key-that-is-long-enough-123456",
        "ENCRYPTION_KEY": "0123456789abcdef0123456789abcdef",
        "ROUTING_CONFIG_PATH": str(_TMP_ROOT / "routing.json"),
        "BACKUP_DIR": str(_TMP_ROOT / "backups"),
        "UPLOADS_DIR": str(_TMP_ROOT / "uploads"),
        "SITE_URL": "https://tours.example.com",
        "SITEMAP_PING_ENABLED": "false",
        "REPAIR_DELAY_SECONDS": "0",
        "DEEPL_API_KEY": "",
    }
)

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from toursite.api.deps import get_optional_provider  # noqa: E402
from toursite.auth.crud import create_user  # noqa: E402
from toursite.auth.models import User, UserCreate, UserRole  # noqa: E402
from toursite.core.config import settings  # noqa: E402
from toursite.core.db import engine  # noqa: E402
from toursite.core.exceptions import TranslationProviderError  # noqa: E402
from toursite.i18n.routing import RoutingConfig  # noqa: E402
from toursite.main import app  # noqa: E402
import toursite.models  # noqa: E402, F401

ADMIN_PASSWORD = "admin-password"
EDITOR_PASSWORD = "editor-password"


class FakeProvider:
    """Deterministic provider: dictionary hits, else a language tag prefix."""

    name = "Fake"

    def __init__(self, dictionary: dict[str, str] | None = None) -> None:
        self.dictionary = dictionary or {}
        self.calls: list[tuple[list[str], str, str]] = []

    async def translate_texts(
        self, texts: list[str], source: str, target: str
    ) -> list[str]:
        self.calls.append((list(texts), source, target))
        return [self.dictionary.get(text, f"[{target}] {text}") for text in texts]


class FailingProvider:
    name = "Failing"

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or TranslationProviderError("service unavailable")
        self.calls = 0

    async def translate_texts(
        self, texts: list[str], source: str, target: str
    ) -> list[str]:
        self.calls += 1
        raise self.error


@pytest.fixture(autouse=True)
def db() -> Iterator[None]:
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(db: None) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture(autouse=True)
def routing_defaults() -> Iterator[None]:
    yield
    app.state.routing_provider.update(RoutingConfig(enable_multi_language=True))


@pytest.fixture
def backup_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "backups"
    monkeypatch.setattr(settings, "BACKUP_DIR", path)
    return path


@pytest.fixture
def client(provider: FakeProvider) -> Iterator[TestClient]:
    app.dependency_overrides[get_optional_provider] = lambda: provider
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(
    session: Session,
    username: str,
    password: str,
    role: UserRole = UserRole.ADMINISTRATOR,
) -> User:
    return create_user(
        session=session,
        user_create=UserCreate(
            username=username,
            email=f"{username}@example.com",
            display_name=username.title(),
            password=password,
            role=role,
        ),
    )


@pytest.fixture
def admin(session: Session) -> User:
    return make_user(session, "admin", ADMIN_PASSWORD)


@pytest.fixture
def editor(session: Session) -> User:
    return make_user(session, "editor", EDITOR_PASSWORD, UserRole.EDITOR)


def login(client: TestClient, username: str, password: str) -> None:
    response = client.post(
        f"{settings.API_PREFIX}/auth/login",
        json={"username": username, "password": password},
    )
    assert response.status_code == 200, response.text


@pytest.fixture
def admin_client(client: TestClient, admin: User) -> TestClient:
    login(client, admin.username, ADMIN_PASSWORD)
    return client


@pytest.fixture
def editor_client(client: TestClient, editor: User) -> TestClient:
    login(client, editor.username, EDITOR_PASSWORD)
    return client
