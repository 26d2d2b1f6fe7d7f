from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from license_verifier.domain.entities import VerificationCode
from license_verifier.domain.errors import CodeStoreError
from license_verifier.domain.ports.verification_code_repository import (
    VerificationCodeRepositoryPort,
)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def row_to_code(row: Dict[str, Any]) -> VerificationCode:
    return VerificationCode(
        id=str(row["id"]),
        code=str(row["code"]),
        is_used=bool(row.get("is_used")),
        machine_id=row.get("machine_id"),
        used_at=_parse_timestamp(row.get("used_at")),
    )


class RestVerificationCodeRepository(VerificationCodeRepositoryPort):
    """
    Code store reached over a PostgREST-compatible HTTP API (e.g. Supabase).

    NOTE:
    - Every request is atomic on the server; there is no transaction to commit.
    - The conditional update relies on PostgREST filters (`is_used=is.false`)
      so that only one concurrent activation can match the row.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: httpx.AsyncClient,
        table: str = "verification_codes",
    ) -> None:
        self._table_url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._client = client
        self._headers: Dict[str, str] = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        *,
        params: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> list:
        try:
            resp = await self._client.request(
                method,
                self._table_url,
                params=params,
                json=json,
                headers={**self._headers, **(headers or {})},
            )
        except httpx.HTTPError as e:
            raise CodeStoreError(f"code store HTTP error: {e}") from e

        if not (200 <= resp.status_code < 300):
            text = resp.text[:200]
            raise CodeStoreError(f"code store responded {resp.status_code}: {text}")

        try:
            rows = resp.json()
        except ValueError as e:
            raise CodeStoreError("code store returned a non-JSON body") from e
        if not isinstance(rows, list):
            raise CodeStoreError("code store returned an unexpected payload")
        return rows

    async def get_by_code(self, code: str) -> Optional[VerificationCode]:
        rows = await self._request(
            "GET", params={"code": f"eq.{code}", "select": "*"}
        )
        if not rows:
            return None
        if len(rows) > 1:
            raise CodeStoreError(f"{len(rows)} records share one code value")
        return row_to_code(rows[0])

    async def mark_used(
        self, code_id: str, *, machine_id: str | None, used_at: datetime
    ) -> Optional[VerificationCode]:
        rows = await self._request(
            "PATCH",
            params={"id": f"eq.{code_id}", "is_used": "is.false"},
            json={
                "is_used": True,
                "machine_id": machine_id,
                "used_at": used_at.isoformat(),
            },
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            return None
        return row_to_code(rows[0])
