from enrollment.stores.interfaces import (
    EnrollmentStore,
    LedgerStore,
    ProgramStore,
    SeatCount,
    SessionHasReservations,
    SessionStore,
    StoreUnavailable,
)
from enrollment.stores.memory_store import InMemoryStore

__all__ = [
    "EnrollmentStore",
    "LedgerStore",
    "ProgramStore",
    "SessionStore",
    "SeatCount",
    "SessionHasReservations",
    "StoreUnavailable",
    "InMemoryStore",
]
