from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from brifify.reasoning.schemas import TechnicalBrief


class StoredBrief(BaseModel):
    """A brief as persisted for its owner."""

    user_id: str
    brief_id: str
    brief: TechnicalBrief
    created_at: datetime
    updated_at: datetime
    share_id: str | None = None

    @property
    def title(self) -> str:
        return self.brief.project_title
