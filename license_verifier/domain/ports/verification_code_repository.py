from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from license_verifier.domain.entities import VerificationCode


class VerificationCodeRepositoryPort(Protocol):
    async def get_by_code(self, code: str) -> Optional[VerificationCode]:
        """
        Fetch the record whose code equals `code` exactly.
        Return None if no record matches.
        """

    async def mark_used(
        self, code_id: str, *, machine_id: str | None, used_at: datetime
    ) -> Optional[VerificationCode]:
        """
        Conditionally flip the record to used, keyed by id and guarded by
        is_used = false. Return the updated record, or None if the record
        was already used when the update ran.
        """
