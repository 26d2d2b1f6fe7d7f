from license_verifier.domain.entities import BindingPolicy
from license_verifier.domain.errors import CodeStoreMisconfigured
from license_verifier.domain.ports.unit_of_work import UnitOfWorkPort
from license_verifier.infrastructure.db.pool import get_pool
from license_verifier.infrastructure.db.uow import PgUnitOfWork
from license_verifier.infrastructure.http.client import get_http_client
from license_verifier.infrastructure.rest.uow import RestUnitOfWork
from license_verifier.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    settings = get_settings()
    if settings.code_store == "postgres":
        return PgUnitOfWork(get_pool())

    if not settings.code_store_url or not settings.code_store_key:
        raise CodeStoreMisconfigured("CODE_STORE_URL or CODE_STORE_KEY is not set")
    return RestUnitOfWork(
        settings.code_store_url,
        settings.code_store_key,
        client=get_http_client(),
        table=settings.code_store_table,
    )


def get_binding_policy() -> BindingPolicy:
    return BindingPolicy(get_settings().binding_policy)
