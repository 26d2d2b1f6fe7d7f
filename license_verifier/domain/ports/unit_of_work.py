from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Protocol, Type

from license_verifier.domain.ports.verification_code_repository import (
    VerificationCodeRepositoryPort,
)


@dataclass
class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the code store.

    Usage:
        async with uow as tx:
            record = await tx.codes.get_by_code(code)
            await tx.codes.mark_used(record.id, machine_id=..., used_at=...)
            await tx.commit()
    """

    codes: VerificationCodeRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Begin a new transaction."""

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the transaction, rolling back if it was not committed."""

    async def commit(self) -> None:
        """Commit the transaction."""

    async def rollback(self) -> None:
        """Rollback the transaction."""
