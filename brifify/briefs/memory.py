"""In-memory brief store."""

from __future__ import annotations

import asyncio
from datetime import datetime

from brifify.briefs.models import StoredBrief
from brifify.kernel.time import utc_now
from brifify.reasoning.schemas import TechnicalBrief


class InMemoryBriefStore:
    def __init__(self) -> None:
        self._briefs: dict[tuple[str, str], StoredBrief] = {}
        self._lock = asyncio.Lock()

    async def put(
        self,
        user_id: str,
        brief_id: str,
        brief: TechnicalBrief,
        *,
        created_at: datetime | None = None,
    ) -> StoredBrief:
        async with self._lock:
            now = utc_now()
            existing = self._briefs.get((user_id, brief_id))
            stored = StoredBrief(
                user_id=user_id,
                brief_id=brief_id,
                brief=brief,
                created_at=existing.created_at if existing else (created_at or now),
                updated_at=now,
                share_id=existing.share_id if existing else None,
            )
            self._briefs[(user_id, brief_id)] = stored
            return stored

    async def get(self, user_id: str, brief_id: str) -> StoredBrief | None:
        return self._briefs.get((user_id, brief_id))

    async def list_for_user(self, user_id: str) -> list[StoredBrief]:
        owned = [stored for (owner, _), stored in self._briefs.items() if owner == user_id]
        return sorted(owned, key=lambda stored: (stored.created_at, stored.brief_id), reverse=True)

    async def delete(self, user_id: str, brief_id: str) -> bool:
        async with self._lock:
            return self._briefs.pop((user_id, brief_id), None) is not None

    async def share(self, user_id: str, brief_id: str, share_id: str) -> StoredBrief | None:
        async with self._lock:
            existing = self._briefs.get((user_id, brief_id))
            if existing is None:
                return None
            if existing.share_id is None:
                existing = existing.model_copy(update={"share_id": share_id})
                self._briefs[(user_id, brief_id)] = existing
            return existing

    async def get_shared(self, share_id: str) -> StoredBrief | None:
        for stored in self._briefs.values():
            if stored.share_id == share_id:
                return stored
        return None
