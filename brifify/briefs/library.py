"""Owner-scoped access to saved briefs."""

from __future__ import annotations

import structlog

from brifify.briefs.models import StoredBrief
from brifify.briefs.store import BriefStore
from brifify.kernel.errors import BriefNotFoundError, InvalidInputError
from brifify.kernel.ids import is_brief_id, new_share_id
from brifify.ledger.identity import IdentityResolver, require_client_id
from brifify.reasoning.schemas import TechnicalBrief

logger = structlog.get_logger()


class BriefLibrary:
    def __init__(self, store: BriefStore, identity: IdentityResolver) -> None:
        self._store = store
        self._identity = identity

    async def get(self, client_id: str | None, brief_id: str) -> StoredBrief:
        user_id = require_client_id(client_id)
        stored = await self._store.get(user_id, brief_id)
        if stored is None:
            raise BriefNotFoundError(brief_id=brief_id)
        return stored

    async def list_briefs(self, client_id: str | None) -> list[StoredBrief]:
        return await self._store.list_for_user(require_client_id(client_id))

    async def save(self, client_id: str | None, brief_id: str, brief: TechnicalBrief) -> StoredBrief:
        """Upsert an edited brief. The owner must already have a ledger row."""
        account = await self._identity.require(client_id)
        if not is_brief_id(brief_id):
            raise InvalidInputError(message="Invalid brief id", meta={"brief_id": brief_id})

        stored = await self._store.put(account.user_id, brief_id, brief)
        logger.info("Brief saved", user_id=account.user_id, brief_id=brief_id)
        return stored

    async def delete(self, client_id: str | None, brief_id: str) -> None:
        user_id = require_client_id(client_id)
        if not await self._store.delete(user_id, brief_id):
            raise BriefNotFoundError(brief_id=brief_id)
        logger.info("Brief deleted", user_id=user_id, brief_id=brief_id)

    async def share(self, client_id: str | None, brief_id: str) -> StoredBrief:
        """Publish a read-only link to an owned brief.

        Sharing twice returns the same share id.
        """
        user_id = require_client_id(client_id)
        stored = await self._store.share(user_id, brief_id, new_share_id())
        if stored is None:
            raise BriefNotFoundError(brief_id=brief_id)
        logger.info("Brief shared", user_id=user_id, brief_id=brief_id)
        return stored

    async def get_shared(self, share_id: str) -> StoredBrief:
        stored = await self._store.get_shared(share_id) if share_id else None
        if stored is None:
            raise BriefNotFoundError(brief_id=share_id, message="Shared brief not found")
        return stored
