"""Which pool of class sessions a listing draws from."""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from enrollment.domain.models import ClassSession, Program
from enrollment.domain.value_objects import ProgramId


class ScopeKind(Enum):
    PROGRAM = "program"
    GLOBAL = "global"
    ALL = "all"


@dataclass(frozen=True)
class SessionScope:
    """Program-scoped (Sprint), global pool (Marathon), or everything (admin)."""

    kind: ScopeKind
    program_id: ProgramId | None = None

    def __post_init__(self) -> None:
        if (self.kind is ScopeKind.PROGRAM) != (self.program_id is not None):
            raise ValueError("A program scope needs a program_id and only a program scope has one")

    @classmethod
    def for_program(cls, program_id: ProgramId) -> Self:
        return cls(kind=ScopeKind.PROGRAM, program_id=program_id)

    @classmethod
    def global_pool(cls) -> Self:
        return cls(kind=ScopeKind.GLOBAL)

    @classmethod
    def everything(cls) -> Self:
        return cls(kind=ScopeKind.ALL)

    @classmethod
    def of(cls, program: Program) -> Self:
        """Marathon programs share the global pool; Sprint programs own theirs."""
        if program.is_marathon:
            return cls.global_pool()
        return cls.for_program(program.id)

    def includes(self, session: ClassSession) -> bool:
        if self.kind is ScopeKind.ALL:
            return True
        if self.kind is ScopeKind.GLOBAL:
            return session.program_id is None
        return session.program_id == self.program_id

    def __str__(self) -> str:
        if self.kind is ScopeKind.PROGRAM:
            return f"program:{self.program_id}"
        return self.kind.value
