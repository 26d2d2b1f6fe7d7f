import logging
from datetime import datetime, timezone
from typing import Callable

from license_verifier.domain.entities import (
    BindingPolicy,
    VerificationCode,
    VerificationOutcome,
)
from license_verifier.domain.errors import (
    CodeAlreadyUsed,
    CodeBoundToAnotherMachine,
    InvalidVerificationRequest,
    UnknownCode,
)
from license_verifier.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_used(
    record: VerificationCode, machine_id: str | None, policy: BindingPolicy
) -> VerificationOutcome:
    if policy is BindingPolicy.SINGLE_USE:
        raise CodeAlreadyUsed()
    if record.is_bound_to(machine_id):
        logger.info(
            "code re-verified",
            extra={"code_id": record.id, "machine_id": machine_id},
        )
        return VerificationOutcome.REVERIFIED
    logger.info(
        "code bound to another machine",
        extra={"code_id": record.id, "machine_id": machine_id},
    )
    raise CodeBoundToAnotherMachine()


async def verify_code(
    uow: UnitOfWorkPort,
    code: str | None,
    machine_id: str | None,
    policy: BindingPolicy = BindingPolicy.MACHINE,
    now: Callable[[], datetime] = _utcnow,
) -> VerificationOutcome:
    normalized_code = (code or "").strip()
    if not normalized_code:
        raise InvalidVerificationRequest("Verification code is required.")

    if policy is BindingPolicy.MACHINE:
        machine_id = (machine_id or "").strip()
        if not machine_id:
            raise InvalidVerificationRequest("Machine ID is required.")
    else:
        machine_id = None

    async with uow as transaction:
        record = await transaction.codes.get_by_code(normalized_code)
        if record is None:
            raise UnknownCode(single_use=policy is BindingPolicy.SINGLE_USE)

        if record.is_used:
            return _check_used(record, machine_id, policy)

        when = now()
        record.activate(machine_id, when)
        updated = await transaction.codes.mark_used(
            record.id, machine_id=machine_id, used_at=when
        )
        if updated is None:
            # Another request activated the code between our read and update.
            current = await transaction.codes.get_by_code(normalized_code)
            if current is None:
                raise UnknownCode(single_use=policy is BindingPolicy.SINGLE_USE)
            return _check_used(current, machine_id, policy)

        await transaction.commit()

    logger.info(
        "code activated", extra={"code_id": record.id, "machine_id": machine_id}
    )
    return VerificationOutcome.ACTIVATED
