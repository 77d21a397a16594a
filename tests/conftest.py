import shutil
import sys
from pathlib import Path

from collections.abc import Generator
from typing import List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

FIXTURE_PROJECT = Path(__file__).resolve().parent / "fixtures" / "dbt_project"

from mapping_portal.config import Settings, get_settings  # noqa: E402
from mapping_portal.dependencies import get_publisher  # noqa: E402
from mapping_portal.exceptions import PublishError  # noqa: E402
from mapping_portal.main import app  # noqa: E402
from mapping_portal.services.project_store import DbtProjectStore  # noqa: E402


class FakePublisher:
    """Records publish calls instead of running git."""

    def __init__(self, error: Optional[str] = None) -> None:
        self.error = error
        self.calls: List[Tuple[List[str], str]] = []

    def publish(self, paths: Sequence[str], message: str) -> None:
        self.calls.append((list(paths), message))
        if self.error:
            raise PublishError(self.error)


@pytest.fixture()
def project_path(tmp_path: Path) -> Path:
    destination = tmp_path / "config-driven-dbt"
    shutil.copytree(FIXTURE_PROJECT, destination)
    return destination


@pytest.fixture()
def settings(project_path: Path) -> Settings:
    return Settings(dbt_project_path=project_path, git_enabled=False)


@pytest.fixture()
def store(settings: Settings) -> DbtProjectStore:
    return DbtProjectStore(settings)


@pytest.fixture()
def publisher() -> FakePublisher:
    return FakePublisher()


class PrefixedTestClient(TestClient):
    api_prefix = "/api"

    def request(self, method: str, url: str, *args, **kwargs):  # type: ignore[override]
        if url.startswith("/"):
            url = f"{self.api_prefix}{url}"
        return super().request(method, url, *args, **kwargs)


@pytest.fixture()
def client(settings: Settings, publisher: FakePublisher) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_publisher] = lambda: publisher

    client = PrefixedTestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_settings, None)
        app.dependency_overrides.pop(get_publisher, None)
