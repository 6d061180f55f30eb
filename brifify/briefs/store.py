"""Brief store port."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from brifify.briefs.models import StoredBrief
from brifify.reasoning.schemas import TechnicalBrief


class BriefStore(Protocol):
    async def put(
        self,
        user_id: str,
        brief_id: str,
        brief: TechnicalBrief,
        *,
        created_at: datetime | None = None,
    ) -> StoredBrief:
        """Insert or replace a brief keyed by (user_id, brief_id).

        A replace keeps the original `created_at` and bumps `updated_at`.
        """
        ...

    async def get(self, user_id: str, brief_id: str) -> StoredBrief | None:
        ...

    async def list_for_user(self, user_id: str) -> list[StoredBrief]:
        """All briefs owned by `user_id`, newest first."""
        ...

    async def delete(self, user_id: str, brief_id: str) -> bool:
        ...

    async def share(self, user_id: str, brief_id: str, share_id: str) -> StoredBrief | None:
        """Attach `share_id` unless the brief is already shared.

        Returns the brief with its effective share id, or None when it does
        not exist.
        """
        ...

    async def get_shared(self, share_id: str) -> StoredBrief | None:
        ...
