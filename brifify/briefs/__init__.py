"""Saved technical briefs."""

from brifify.briefs.library import BriefLibrary
from brifify.briefs.memory import InMemoryBriefStore
from brifify.briefs.models import StoredBrief
from brifify.briefs.postgres import PostgresBriefStore
from brifify.briefs.store import BriefStore

__all__ = [
    "BriefLibrary",
    "BriefStore",
    "InMemoryBriefStore",
    "PostgresBriefStore",
    "StoredBrief",
]
