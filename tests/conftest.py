from datetime import datetime, timezone

import pytest

from license_verifier.domain.entities import VerificationCode
from license_verifier.settings import get_settings
from tests.fakes import FakeCodeRepo, FakeUoW

USED_AT = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """
    Every test starts from default settings, regardless of the host env.
    Tests can setenv() and call get_settings.cache_clear() to override.
    """
    for name in (
        "BINDING_POLICY",
        "CODE_STORE",
        "CODE_STORE_URL",
        "CODE_STORE_KEY",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "DATABASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def unused_code() -> VerificationCode:
    return VerificationCode(id="c1", code="ABCD-1234")


@pytest.fixture()
def used_code() -> VerificationCode:
    return VerificationCode(
        id="c2",
        code="USED-0001",
        is_used=True,
        machine_id="machine-a",
        used_at=USED_AT,
    )


@pytest.fixture()
def codes(unused_code, used_code) -> FakeCodeRepo:
    return FakeCodeRepo(unused_code, used_code)


@pytest.fixture()
def uow(codes) -> FakeUoW:
    return FakeUoW(codes)


@pytest.fixture()
def fixed_now():
    return lambda: USED_AT
