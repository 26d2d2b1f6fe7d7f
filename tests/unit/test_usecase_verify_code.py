import asyncio

import pytest

from license_verifier.application.verify_code import verify_code
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
from tests.conftest import USED_AT
from tests.fakes import FakeCodeRepo, FakeUoW, LosingRaceCodeRepo


@pytest.mark.asyncio
async def test_unused_code_is_activated(uow, codes, fixed_now):
    outcome = await verify_code(
        uow=uow, code=" ABCD-1234 ", machine_id="machine-z", now=fixed_now
    )

    assert outcome is VerificationOutcome.ACTIVATED
    record = codes.records["ABCD-1234"]
    assert record.is_used is True
    assert record.machine_id == "machine-z"
    assert record.used_at == USED_AT
    assert codes.lookups == ["ABCD-1234"]
    assert codes.mark_used_calls == [("c1", "machine-z")]
    assert uow.committed is True


@pytest.mark.asyncio
async def test_machine_id_is_trimmed(uow, codes):
    await verify_code(uow=uow, code="ABCD-1234", machine_id="  machine-z ")
    assert codes.records["ABCD-1234"].machine_id == "machine-z"


@pytest.mark.asyncio
async def test_same_machine_reverifies_without_mutation(uow, codes):
    outcome = await verify_code(uow=uow, code="USED-0001", machine_id="machine-a")

    assert outcome is VerificationOutcome.REVERIFIED
    assert codes.mark_used_calls == []
    assert codes.records["USED-0001"].used_at == USED_AT
    assert uow.committed is False


@pytest.mark.asyncio
async def test_other_machine_is_rejected(uow, codes):
    with pytest.raises(CodeBoundToAnotherMachine):
        await verify_code(uow=uow, code="USED-0001", machine_id="machine-b")

    assert codes.mark_used_calls == []
    assert codes.records["USED-0001"].machine_id == "machine-a"
    assert uow.rolled_back is True


@pytest.mark.asyncio
async def test_unknown_code(uow, codes):
    with pytest.raises(UnknownCode) as ei:
        await verify_code(uow=uow, code="NOPE", machine_id="machine-a")

    assert ei.value.single_use is False
    assert codes.mark_used_calls == []
    assert uow.committed is False


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [None, "", "   "])
async def test_missing_code_never_touches_store(uow, codes, code):
    with pytest.raises(InvalidVerificationRequest) as ei:
        await verify_code(uow=uow, code=code, machine_id="machine-a")

    assert ei.value.message == "Verification code is required."
    assert codes.lookups == []


@pytest.mark.asyncio
@pytest.mark.parametrize("machine_id", [None, "", "  "])
async def test_missing_machine_id_under_machine_policy(uow, codes, machine_id):
    with pytest.raises(InvalidVerificationRequest) as ei:
        await verify_code(uow=uow, code="ABCD-1234", machine_id=machine_id)

    assert ei.value.message == "Machine ID is required."
    assert codes.lookups == []


@pytest.mark.asyncio
async def test_single_use_activates_without_machine(uow, codes):
    outcome = await verify_code(
        uow=uow,
        code="ABCD-1234",
        machine_id="ignored",
        policy=BindingPolicy.SINGLE_USE,
    )

    assert outcome is VerificationOutcome.ACTIVATED
    record = codes.records["ABCD-1234"]
    assert record.is_used is True
    assert record.machine_id is None
    assert record.used_at is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("machine_id", ["machine-a", "machine-b", None])
async def test_single_use_rejects_any_repeat(uow, codes, machine_id):
    with pytest.raises(CodeAlreadyUsed):
        await verify_code(
            uow=uow,
            code="USED-0001",
            machine_id=machine_id,
            policy=BindingPolicy.SINGLE_USE,
        )
    assert codes.mark_used_calls == []


@pytest.mark.asyncio
async def test_lost_race_to_other_machine_is_rejected():
    codes = LosingRaceCodeRepo(
        VerificationCode(id="c1", code="RACE"), winner="machine-a"
    )
    uow = FakeUoW(codes)

    with pytest.raises(CodeBoundToAnotherMachine):
        await verify_code(uow=uow, code="RACE", machine_id="machine-b")

    assert codes.records["RACE"].machine_id == "machine-a"
    assert uow.committed is False


@pytest.mark.asyncio
async def test_lost_race_to_same_machine_reverifies():
    codes = LosingRaceCodeRepo(
        VerificationCode(id="c1", code="RACE"), winner="machine-a"
    )

    outcome = await verify_code(uow=FakeUoW(codes), code="RACE", machine_id="machine-a")

    assert outcome is VerificationOutcome.REVERIFIED
    assert codes.records["RACE"].machine_id == "machine-a"


@pytest.mark.asyncio
async def test_concurrent_first_activations_bind_exactly_one_machine():
    codes = FakeCodeRepo(VerificationCode(id="c1", code="RACE"), yield_between=True)

    results = await asyncio.gather(
        verify_code(uow=FakeUoW(codes), code="RACE", machine_id="machine-a"),
        verify_code(uow=FakeUoW(codes), code="RACE", machine_id="machine-b"),
        return_exceptions=True,
    )

    activated = [r for r in results if r is VerificationOutcome.ACTIVATED]
    rejected = [r for r in results if isinstance(r, CodeBoundToAnotherMachine)]
    assert len(activated) == 1
    assert len(rejected) == 1

    winner = "machine-a" if results[0] is VerificationOutcome.ACTIVATED else "machine-b"
    assert codes.records["RACE"].machine_id == winner


@pytest.mark.asyncio
async def test_unknown_code_carries_single_use_policy(uow):
    with pytest.raises(UnknownCode) as ei:
        await verify_code(
            uow=uow, code="NOPE", machine_id=None, policy=BindingPolicy.SINGLE_USE
        )

    assert ei.value.single_use is True
