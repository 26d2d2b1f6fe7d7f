from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

import psycopg

from license_verifier.domain.entities import VerificationCode
from license_verifier.domain.errors import CodeStoreError
from license_verifier.domain.ports.verification_code_repository import (
    VerificationCodeRepositoryPort,
)


class PgVerificationCodeRepository(VerificationCodeRepositoryPort):
    """
    Postgres implementation of VerificationCodeRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    - get_by_code locks the row (FOR UPDATE) so a concurrent activation of the
      same code waits until this transaction ends.
    - Driver errors are re-raised as CodeStoreError.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def _fetchone(self, sql: str, params: Sequence[Any]) -> Optional[tuple]:
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, params)
                return await cur.fetchone()
        except psycopg.Error as e:
            raise CodeStoreError(f"code store query failed: {e}") from e

    async def get_by_code(self, code: str) -> Optional[VerificationCode]:
        sql = """
        SELECT id, code, is_used, machine_id, used_at
        FROM verification_codes
        WHERE code = %s
        FOR UPDATE
        """
        row = await self._fetchone(sql, (code,))
        if not row:
            return None

        id_, db_code, is_used, machine_id, used_at = row
        return VerificationCode(
            id=str(id_),
            code=str(db_code),
            is_used=bool(is_used),
            machine_id=machine_id,
            used_at=used_at,
        )

    async def mark_used(
        self, code_id: str, *, machine_id: str | None, used_at: datetime
    ) -> Optional[VerificationCode]:
        sql = """
        UPDATE verification_codes
        SET is_used = true,
            machine_id = %s,
            used_at = %s
        WHERE id = %s AND is_used = false
        RETURNING id, code, is_used, machine_id, used_at
        """
        row = await self._fetchone(sql, (machine_id, used_at, code_id))
        if not row:
            return None

        id_, db_code, is_used, db_machine_id, db_used_at = row
        return VerificationCode(
            id=str(id_),
            code=str(db_code),
            is_used=bool(is_used),
            machine_id=db_machine_id,
            used_at=db_used_at,
        )
