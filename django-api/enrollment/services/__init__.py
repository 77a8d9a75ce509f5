from enrollment.services.capacity_ledger import CapacityLedger
from enrollment.services.enrollment_service import EnrollmentService
from enrollment.services.session_directory import SessionDirectory


def build_enrollment_service(store) -> EnrollmentService:
    """Wire the services around one store implementing every store interface."""
    ledger = CapacityLedger(store, store)
    directory = SessionDirectory(store, store, ledger)
    return EnrollmentService(store, store, directory, ledger)


__all__ = [
    "CapacityLedger",
    "EnrollmentService",
    "SessionDirectory",
    "build_enrollment_service",
]
