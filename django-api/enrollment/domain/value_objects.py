"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Self
from uuid import UUID

_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


@dataclass(frozen=True)
class OfferingId:
    """Unique identifier for an Offering."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProgramId:
    """Unique identifier for a Program."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SessionId:
    """Unique identifier for a ClassSession."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ReservationId:
    """Unique identifier for a seat Reservation."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EnrollmentId:
    """Unique identifier for an Enrollment."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Capacity must be an integer")
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


class Weekday(Enum):
    """Days a class session can recur on, in calendar order."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def index(self) -> int:
        return list(Weekday).index(self)

    @classmethod
    def parse(cls, value: str) -> Self:
        try:
            return cls(value)
        except ValueError:
            names = ", ".join(day.value for day in cls)
            raise ValueError(f"Invalid weekday. Must be one of: {names}") from None


class SessionType(Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"

    @classmethod
    def parse(cls, value: str) -> Self:
        try:
            return cls(value)
        except ValueError:
            raise ValueError("Invalid type. Must be either 'weekday' or 'weekend'") from None


class SeatKind(Enum):
    """Which capacity pool a reservation draws from."""

    REGULAR = "regular"
    DEMO = "demo"


class OfferingKind(Enum):
    MARATHON = "Marathon"
    SPRINT = "Sprint"


class Cadence(Enum):
    ONCE_WEEKLY = "once_weekly"
    TWICE_WEEKLY = "twice_weekly"


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time in 24-hour ``HH:MM`` form."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError("Invalid time. Must be in HH:MM format (24-hour)")

    @classmethod
    def parse(cls, value: str) -> Self:
        match = _TIME_PATTERN.match(value or "")
        if match is None:
            raise ValueError("Invalid time format. Must be in HH:MM format (24-hour)")
        return cls(hour=int(match.group(1)), minute=int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"
