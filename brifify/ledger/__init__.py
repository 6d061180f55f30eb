"""User ledger: identity resolution and the token economy."""

from brifify.ledger.identity import IdentityResolver
from brifify.ledger.memory import InMemoryLedgerStore
from brifify.ledger.models import NewAccount, ProviderIdentity, ResolvedAccount, UserAccount
from brifify.ledger.store import LedgerStore
from brifify.ledger.tokens import TokenLedger

__all__ = [
    "IdentityResolver",
    "InMemoryLedgerStore",
    "LedgerStore",
    "NewAccount",
    "ProviderIdentity",
    "ResolvedAccount",
    "TokenLedger",
    "UserAccount",
]
