from enrollment.handlers.views import (
    ClassSessionDetailView,
    ClassSessionListView,
    EnrollmentCancelView,
    EnrollmentDetailView,
    EnrollmentListView,
    ProgramDetailView,
    ProgramSessionListView,
)

__all__ = [
    "ClassSessionListView",
    "ClassSessionDetailView",
    "ProgramDetailView",
    "ProgramSessionListView",
    "EnrollmentListView",
    "EnrollmentDetailView",
    "EnrollmentCancelView",
]
