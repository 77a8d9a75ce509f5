from django.urls import path

from enrollment.handlers import (
    ClassSessionDetailView,
    ClassSessionListView,
    EnrollmentCancelView,
    EnrollmentDetailView,
    EnrollmentListView,
    ProgramDetailView,
    ProgramSessionListView,
)

urlpatterns = [
    path("class-sessions", ClassSessionListView.as_view(), name="class-session-list"),
    path(
        "class-sessions/<str:session_id>",
        ClassSessionDetailView.as_view(),
        name="class-session-detail",
    ),
    path("programs/<str:program_id>", ProgramDetailView.as_view(), name="program-detail"),
    path(
        "programs/<str:program_id>/sessions",
        ProgramSessionListView.as_view(),
        name="program-session-list",
    ),
    path("enrollments", EnrollmentListView.as_view(), name="enrollment-list"),
    path(
        "enrollments/<str:enrollment_id>",
        EnrollmentDetailView.as_view(),
        name="enrollment-detail",
    ),
    path(
        "enrollments/<str:enrollment_id>/cancel",
        EnrollmentCancelView.as_view(),
        name="enrollment-cancel",
    ),
]
