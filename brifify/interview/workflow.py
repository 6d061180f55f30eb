"""
Brief Workflow

Synthesis, charge and persistence in that order:

1. the owner must exist and hold at least one token,
2. the synthesizer produces a brief (a failure here never charges),
3. one token is charged, keyed by the new brief id,
4. the brief is saved for the owner.

Once a brief exists it is always returned. A failed charge or save after
synthesis is logged and reported on the outcome instead of discarding work
the user already waited for.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from pydantic import BaseModel

from brifify.briefs.store import BriefStore
from brifify.interview.questionnaire import pair_history
from brifify.interview.synthesizer import BriefSynthesizer
from brifify.kernel.errors import BrififyError, InsufficientTokensError, InvalidInputError
from brifify.ledger.identity import IdentityResolver
from brifify.ledger.tokens import TokenLedger
from brifify.reasoning.schemas import QuestionnaireEntry, TechnicalBrief, Turn

logger = structlog.get_logger()


class BriefOutcome(BaseModel):
    brief_id: str
    created_at: datetime
    brief: TechnicalBrief
    remaining_tokens: int | None
    charged: bool
    charge_error: str | None = None
    saved: bool


def charge_key(brief_id: str) -> str:
    return f"brief:{brief_id}"


class BriefWorkflow:
    def __init__(
        self,
        identity: IdentityResolver,
        tokens: TokenLedger,
        synthesizer: BriefSynthesizer,
        briefs: BriefStore,
    ) -> None:
        self._identity = identity
        self._tokens = tokens
        self._synthesizer = synthesizer
        self._briefs = briefs

    async def complete_interview(self, client_id: str | None, history: Sequence[Turn]) -> BriefOutcome:
        return await self.generate(client_id, pair_history(history))

    async def generate(
        self,
        client_id: str | None,
        questionnaire: Sequence[QuestionnaireEntry],
    ) -> BriefOutcome:
        if not questionnaire:
            raise InvalidInputError(message="Invalid or missing questionnaire array")

        account = await self._identity.require(client_id)
        if account.tokens <= 0:
            logger.info("Brief generation blocked: no tokens", user_id=account.user_id)
            raise InsufficientTokensError(balance=account.tokens)

        generated = await self._synthesizer.synthesize(questionnaire)

        charged = False
        charge_error: str | None = None
        remaining: int | None = None
        try:
            remaining = await self._tokens.charge_one(
                account.user_id,
                idempotency_key=charge_key(generated.brief_id),
            )
            charged = True
        except InsufficientTokensError as exc:
            # Another request spent the last token between the check and the charge.
            logger.warning("Charge rejected after synthesis", user_id=account.user_id, brief_id=generated.brief_id)
            charge_error = exc.code
            remaining = exc.balance
        except BrififyError as exc:
            logger.error(
                "Charge failed after synthesis",
                user_id=account.user_id,
                brief_id=generated.brief_id,
                code=exc.code,
                error=exc.message,
            )
            charge_error = exc.code

        saved = True
        try:
            await self._briefs.put(
                account.user_id,
                generated.brief_id,
                generated.brief,
                created_at=generated.created_at,
            )
        except BrififyError as exc:
            logger.error(
                "Brief could not be saved",
                user_id=account.user_id,
                brief_id=generated.brief_id,
                code=exc.code,
            )
            saved = False

        logger.info(
            "Brief generated",
            user_id=account.user_id,
            brief_id=generated.brief_id,
            charged=charged,
            saved=saved,
            remaining_tokens=remaining,
        )
        return BriefOutcome(
            brief_id=generated.brief_id,
            created_at=generated.created_at,
            brief=generated.brief,
            remaining_tokens=remaining,
            charged=charged,
            charge_error=charge_error,
            saved=saved,
        )
