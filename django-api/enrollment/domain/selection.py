"""In-progress session selection for one enrollment attempt."""

from collections.abc import Iterator
from enum import Enum

from enrollment.domain.errors import IncompleteSelectionError, SelectionLimitReachedError
from enrollment.domain.models import ClassSession
from enrollment.domain.value_objects import SessionId


class SelectionState(Enum):
    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


class SelectionSet:
    """Ordered, bounded set of sessions chosen by one user.

    Never holds more than ``required`` sessions and never holds the same
    session twice.
    """

    def __init__(self, required: int) -> None:
        if required < 1:
            raise ValueError("Required session count must be at least 1")
        self._required = required
        self._sessions: list[ClassSession] = []

    @property
    def required(self) -> int:
        return self._required

    @property
    def state(self) -> SelectionState:
        if not self._sessions:
            return SelectionState.EMPTY
        if len(self._sessions) < self._required:
            return SelectionState.PARTIAL
        return SelectionState.COMPLETE

    @property
    def is_complete(self) -> bool:
        return self.state is SelectionState.COMPLETE

    @property
    def sessions(self) -> tuple[ClassSession, ...]:
        return tuple(self._sessions)

    @property
    def session_ids(self) -> tuple[SessionId, ...]:
        return tuple(session.id for session in self._sessions)

    def toggle(self, session: ClassSession) -> SelectionState:
        """Deselect ``session`` if chosen, otherwise select it.

        Raises:
            SelectionLimitReachedError: If every slot is already taken.
        """
        for index, chosen in enumerate(self._sessions):
            if chosen.id == session.id:
                del self._sessions[index]
                return self.state
        if len(self._sessions) >= self._required:
            raise SelectionLimitReachedError(self._required)
        self._sessions.append(session)
        return self.state

    def reset(self) -> None:
        self._sessions.clear()

    def ensure_complete(self) -> None:
        """Raises IncompleteSelectionError unless exactly ``required`` are chosen."""
        if len(self._sessions) != self._required:
            raise IncompleteSelectionError(self._required, len(self._sessions))

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ClassSession]:
        return iter(tuple(self._sessions))

    def __contains__(self, session: object) -> bool:
        if isinstance(session, ClassSession):
            session = session.id
        return any(chosen.id == session for chosen in self._sessions)
