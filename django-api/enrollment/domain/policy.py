"""Eligibility policy: how many weekly sessions a program requires."""

from enrollment.domain.models import Program
from enrollment.domain.value_objects import Cadence, OfferingKind


def required_session_count(program: Program) -> int:
    """Return the number of sessions a student must pick for ``program``.

    Sprint programs always take exactly one session. Marathon programs take
    two when they meet twice a week, otherwise one.
    """
    if program.offering_kind is not OfferingKind.MARATHON:
        return 1
    if program.cadence is Cadence.TWICE_WEEKLY:
        return 2
    return 1
