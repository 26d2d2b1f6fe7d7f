from __future__ import annotations

from typing import Any, Type

import httpx

from license_verifier.domain.ports.unit_of_work import UnitOfWorkPort
from license_verifier.infrastructure.rest.codes_repo import (
    RestVerificationCodeRepository,
)


class RestUnitOfWork(UnitOfWorkPort):
    """
    Unit of work over the REST code store.

    Each REST call is its own server-side transaction, so commit and rollback
    only track state; atomicity of activation comes from the conditional PATCH.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: httpx.AsyncClient,
        table: str = "verification_codes",
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._client = client
        self._table = table
        self._committed: bool = False
        self.codes: RestVerificationCodeRepository

    async def __aenter__(self) -> "RestUnitOfWork":
        self.codes = RestVerificationCodeRepository(
            self._base_url, self._api_key, client=self._client, table=self._table
        )
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: Any,
    ) -> None:
        self._committed = False

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self._committed = False
