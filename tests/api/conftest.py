import pytest
from fastapi.testclient import TestClient

from license_verifier.main import create_app
from license_verifier.presentation.dependencies import get_uow
from tests.fakes import FakeUoW


@pytest.fixture()
def app_and_deps(codes):
    app = create_app()
    uow = FakeUoW(codes)

    app.dependency_overrides[get_uow] = lambda: uow

    try:
        yield app, uow, codes
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def single_use(monkeypatch):
    from license_verifier.settings import get_settings

    monkeypatch.setenv("BINDING_POLICY", "single_use")
    get_settings.cache_clear()
