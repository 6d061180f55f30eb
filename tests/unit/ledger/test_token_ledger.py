import asyncio

import pytest

from brifify.kernel.errors import InsufficientTokensError, InvalidInputError, UserNotFoundError
from brifify.ledger.models import NewAccount, ProviderIdentity

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_charge_decrements_until_zero_then_rejects(identity, token_ledger):
    await identity.resolve("device-1")

    balances = [await token_ledger.charge_one("device-1") for _ in range(3)]
    assert balances == [2, 1, 0]

    with pytest.raises(InsufficientTokensError) as exc_info:
        await token_ledger.charge_one("device-1")
    assert exc_info.value.balance == 0
    assert await identity.balance("device-1") == 0


@pytest.mark.asyncio
async def test_concurrent_charges_never_go_negative(identity, token_ledger, ledger_store):
    await identity.resolve("device-1")

    results = await asyncio.gather(
        *(token_ledger.charge_one("device-1") for _ in range(10)),
        return_exceptions=True,
    )

    rejected = [r for r in results if isinstance(r, InsufficientTokensError)]
    assert len(rejected) == 7
    assert (await ledger_store.get("device-1")).tokens == 0


@pytest.mark.asyncio
async def test_charge_with_same_key_is_applied_once(identity, token_ledger):
    await identity.resolve("device-1")

    assert await token_ledger.charge_one("device-1", idempotency_key="brief:1") == 2
    assert await token_ledger.charge_one("device-1", idempotency_key="brief:1") == 2


@pytest.mark.asyncio
async def test_charge_unknown_user(token_ledger):
    with pytest.raises(UserNotFoundError):
        await token_ledger.charge_one("ghost")


@pytest.mark.asyncio
async def test_credits_are_additive_and_replay_safe(identity, token_ledger):
    await identity.resolve("device-1")

    assert await token_ledger.credit("device-1", 20, idempotency_key="evt_1") == 23
    assert await token_ledger.credit("device-1", 20, idempotency_key="evt_2") == 43
    assert await token_ledger.credit("device-1", 20, idempotency_key="evt_2") == 43


@pytest.mark.asyncio
async def test_credit_creates_registered_account_when_absent(token_ledger, ledger_store):
    balance = await token_ledger.credit(
        "sub-9",
        5,
        identity=ProviderIdentity(subject="sub-9", email="buyer@example.com"),
    )

    assert balance == 8
    account = await ledger_store.get("sub-9")
    assert account.is_anonymous is False
    assert account.email == "buyer@example.com"


@pytest.mark.asyncio
async def test_credit_restores_exhausted_account(token_ledger, ledger_store):
    await ledger_store.create_if_absent(NewAccount(user_id="broke", is_anonymous=True, tokens=0))

    assert await token_ledger.credit("broke", 10) == 10
    assert await token_ledger.charge_one("broke") == 9


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5, True, 2.5, "10"])
async def test_credit_rejects_non_positive_or_non_integer_amounts(token_ledger, amount):
    with pytest.raises(InvalidInputError):
        await token_ledger.credit("device-1", amount)
