from __future__ import annotations

import logging
from typing import Any, Optional, Type

import psycopg
from psycopg_pool import AsyncConnectionPool

from license_verifier.domain.errors import CodeStoreError
from license_verifier.domain.ports.unit_of_work import UnitOfWorkPort
from license_verifier.infrastructure.db.codes_repo import PgVerificationCodeRepository

logger = logging.getLogger(__name__)


class PgUnitOfWork(UnitOfWorkPort):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn_cm: Optional[Any] = None
        self._conn: Optional[psycopg.AsyncConnection] = None
        self._committed: bool = False
        self.codes: PgVerificationCodeRepository

    async def __aenter__(self) -> "PgUnitOfWork":
        conn_cm = self._pool.connection()
        try:
            self._conn = await conn_cm.__aenter__()
        except psycopg.Error as e:
            raise CodeStoreError(f"code store connection failed: {e}") from e
        self._conn_cm = conn_cm
        self.codes = PgVerificationCodeRepository(self._conn)
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: Any,
    ) -> None:
        try:
            if self._conn:
                if exc_value or not self._committed:
                    try:
                        await self._conn.rollback()
                    except psycopg.Error:
                        logger.warning("rollback failed", exc_info=True)
        finally:
            if self._conn_cm:
                await self._conn_cm.__aexit__(exc_type, exc_value, traceback)
            self._conn = None
            self._conn_cm = None
            self._committed = False

    async def commit(self) -> None:
        if not self._conn:
            raise RuntimeError("No connection available to commit")
        try:
            await self._conn.commit()
        except psycopg.Error as e:
            raise CodeStoreError(f"code store commit failed: {e}") from e
        self._committed = True

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()
        self._committed = False
