"""
Brief workflow and end-to-end interview tests.

Charge-after-success ordering, exhaustion, and the full answer loop against
in-memory stores.
"""

from unittest.mock import AsyncMock

import pytest

from brifify.interview import BriefReady, QuestionTurn
from brifify.kernel.errors import (
    BriefGenerationFailedError,
    BriefStoreUnavailableError,
    InsufficientTokensError,
    LedgerUnavailableError,
    UserNotFoundError,
)
from brifify.kernel.ids import is_brief_id
from brifify.ledger.models import NewAccount
from brifify.reasoning.schemas import QuestionnaireEntry, ToolCall, Turn
from tests.support.reasoning import brief_call
from tests.support.services import make_container

pytestmark = pytest.mark.unit

QUESTIONNAIRE = [QuestionnaireEntry(question="What is your project about?", answer="Dog walking")]


@pytest.fixture
def setup(reasoning):
    return make_container(reasoning)


@pytest.mark.asyncio
async def test_end_to_end_interview_charges_once_and_saves_brief(setup, reasoning):
    container, ledger, briefs = setup
    reasoning.script_turn("Who is it for?")
    reasoning.script_turn("Which platforms?")
    reasoning.script_turn("done")
    reasoning.tool_calls.append(brief_call())

    history: list[Turn] = []
    thread_id = None
    answers = ["A dog walking app", "Busy owners", "iOS first"]
    result = None
    for answer in answers:
        result = await container.interview.submit_answer("device-1", history, answer, thread_id)
        if isinstance(result, QuestionTurn):
            history, thread_id = result.history, result.thread_id

    assert isinstance(result, BriefReady)
    outcome = result.outcome
    assert outcome.charged is True
    assert outcome.remaining_tokens == 2
    assert outcome.saved is True
    assert is_brief_id(outcome.brief_id)
    assert "thread_id" not in result.model_dump()

    assert (await ledger.get("device-1")).tokens == 2
    stored = await briefs.list_for_user("device-1")
    assert [s.brief_id for s in stored] == [outcome.brief_id]

    synthesis = [call for call in reasoning.calls if call["method"] == "call_tool"][0]
    assert synthesis["messages"][1]["content"].count("Q: ") == 3


@pytest.mark.asyncio
async def test_failed_synthesis_does_not_charge(setup, reasoning):
    container, ledger, briefs = setup
    await container.identity.resolve("device-1")
    reasoning.tool_calls.append(ToolCall(name="generateTechnicalBrief", arguments="nope"))

    with pytest.raises(BriefGenerationFailedError):
        await container.workflow.generate("device-1", QUESTIONNAIRE)

    assert (await ledger.get("device-1")).tokens == 3
    assert await briefs.list_for_user("device-1") == []


@pytest.mark.asyncio
async def test_generate_requires_existing_user(setup, reasoning):
    container, _, _ = setup

    with pytest.raises(UserNotFoundError):
        await container.workflow.generate("stranger", QUESTIONNAIRE)
    assert reasoning.calls == []


@pytest.mark.asyncio
async def test_exhausted_balance_blocks_interview_and_generation(setup, reasoning):
    container, ledger, _ = setup
    await ledger.create_if_absent(NewAccount(user_id="broke", is_anonymous=True, tokens=0))
    history = [Turn(role="assistant", content="What is your project about?")]

    with pytest.raises(InsufficientTokensError):
        await container.interview.submit_answer("broke", history, "An app", None)
    with pytest.raises(InsufficientTokensError):
        await container.workflow.generate("broke", QUESTIONNAIRE)

    assert reasoning.calls == []
    assert len(history) == 1
    assert (await ledger.get("broke")).tokens == 0


@pytest.mark.asyncio
async def test_charge_failure_after_synthesis_still_returns_brief(setup, reasoning):
    container, _, briefs = setup
    await container.identity.resolve("device-1")
    reasoning.tool_calls.append(brief_call())
    container.workflow._tokens.charge_one = AsyncMock(side_effect=LedgerUnavailableError())

    outcome = await container.workflow.generate("device-1", QUESTIONNAIRE)

    assert outcome.charged is False
    assert outcome.charge_error == "ledger.unavailable"
    assert outcome.remaining_tokens is None
    assert outcome.saved is True
    assert len(await briefs.list_for_user("device-1")) == 1


@pytest.mark.asyncio
async def test_lost_race_for_last_token_reports_zero_balance(setup, reasoning):
    container, _, _ = setup
    await container.identity.resolve("device-1")
    reasoning.tool_calls.append(brief_call())
    container.workflow._tokens.charge_one = AsyncMock(side_effect=InsufficientTokensError(balance=0))

    outcome = await container.workflow.generate("device-1", QUESTIONNAIRE)

    assert outcome.charged is False
    assert outcome.charge_error == "ledger.insufficient_tokens"
    assert outcome.remaining_tokens == 0


@pytest.mark.asyncio
async def test_save_failure_is_reported_not_raised(setup, reasoning):
    container, ledger, _ = setup
    await container.identity.resolve("device-1")
    reasoning.tool_calls.append(brief_call())
    container.workflow._briefs.put = AsyncMock(side_effect=BriefStoreUnavailableError())

    outcome = await container.workflow.generate("device-1", QUESTIONNAIRE)

    assert outcome.saved is False
    assert outcome.charged is True
    assert (await ledger.get("device-1")).tokens == 2
