"""Host-facing facade and state storage."""

from actus_ledger.engine.facade import STATE_KEY, TERMS_KEY, ActusContract
from actus_ledger.engine.store import InMemoryStateStore, StateStore

__all__ = [
    "STATE_KEY",
    "TERMS_KEY",
    "ActusContract",
    "InMemoryStateStore",
    "StateStore",
]
