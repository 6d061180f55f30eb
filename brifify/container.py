"""
Service container.

Built once by the process entry point and handed to the API through
`app.state`. Tests build one directly with in-memory stores and a fake
reasoning service.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from brifify.briefs import BriefLibrary, BriefStore, InMemoryBriefStore, PostgresBriefStore
from brifify.config import Settings
from brifify.db.client import close_pool, create_pool
from brifify.interview import BriefSynthesizer, BriefWorkflow, ConversationDriver, InterviewService
from brifify.ledger import IdentityResolver, InMemoryLedgerStore, LedgerStore, TokenLedger
from brifify.ledger.postgres import PostgresLedgerStore
from brifify.payments import PaymentWebhookHandler
from brifify.reasoning import OpenAIReasoningService, ReasoningService

logger = structlog.get_logger()


@dataclass
class ServiceContainer:
    settings: Settings
    identity: IdentityResolver
    tokens: TokenLedger
    interview: InterviewService
    workflow: BriefWorkflow
    library: BriefLibrary
    payments: PaymentWebhookHandler
    pool: Any = None
    _closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    async def check_ready(self) -> dict[str, bool]:
        checks = {"storage": True}
        if self.pool is not None:
            try:
                async with self.pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
            except Exception as exc:
                logger.warning("PostgreSQL readiness check failed", error=str(exc))
                checks["storage"] = False
        return checks

    async def aclose(self) -> None:
        while self._closers:
            closer = self._closers.pop()
            await closer()


def assemble(
    settings: Settings,
    *,
    ledger_store: LedgerStore,
    brief_store: BriefStore,
    reasoning: ReasoningService,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ServiceContainer:
    """Wire components around the given stores and reasoning service."""
    identity = IdentityResolver(ledger_store, starting_tokens=settings.default_starting_tokens)
    tokens = TokenLedger(ledger_store, starting_tokens=settings.default_starting_tokens)
    driver = ConversationDriver(
        identity,
        reasoning,
        question_limit=settings.interview_question_limit,
        opening_question=settings.opening_question,
        poll_interval_seconds=settings.run_poll_interval_seconds,
        poll_max_attempts=settings.run_poll_max_attempts,
        sleep=sleep,
    )
    workflow = BriefWorkflow(identity, tokens, BriefSynthesizer(reasoning), brief_store)
    return ServiceContainer(
        settings=settings,
        identity=identity,
        tokens=tokens,
        interview=InterviewService(driver, workflow),
        workflow=workflow,
        library=BriefLibrary(brief_store, identity),
        payments=PaymentWebhookHandler(
            tokens,
            secret=settings.payment_webhook_secret,
            tolerance_seconds=settings.payment_webhook_tolerance_seconds,
            environment=settings.environment,
        ),
    )


async def build_container(settings: Settings) -> ServiceContainer:
    reasoning = OpenAIReasoningService.from_settings(settings)

    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; balances and briefs are not persisted")
        container = assemble(
            settings,
            ledger_store=InMemoryLedgerStore(),
            brief_store=InMemoryBriefStore(),
            reasoning=reasoning,
        )
    else:
        pool = await create_pool(settings)
        container = assemble(
            settings,
            ledger_store=PostgresLedgerStore(pool),
            brief_store=PostgresBriefStore(pool),
            reasoning=reasoning,
        )
        container.pool = pool
        container._closers.append(lambda: close_pool(pool))

    container._closers.append(reasoning.aclose)
    logger.info("Service container built", storage_backend=settings.storage_backend)
    return container
