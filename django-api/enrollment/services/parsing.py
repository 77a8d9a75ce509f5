"""Turn raw request values into domain values, raising domain errors."""

from typing import TypeVar

from enrollment.domain.errors import InvalidIdError, ValidationError

IdT = TypeVar("IdT")


def parse_id(id_type: type[IdT], value, kind: str) -> IdT:
    """Parse ``value`` into ``id_type``.

    Raises:
        InvalidIdError: If the value is not a valid UUID string.
    """
    if isinstance(value, id_type):
        return value
    try:
        return id_type.from_string(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(kind) from None


def parse_value(parser, value):
    """Apply a value-object parser, mapping ValueError to ValidationError."""
    try:
        return parser(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from None
