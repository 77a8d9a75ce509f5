"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from enrollment.cache_keys import program_cache_key
from enrollment.domain import ProgramId, SessionScope, StudentInfo
from enrollment.domain.errors import DomainError, ErrorCode, ValidationError
from enrollment.handlers.serializers import (
    ClassSessionSerializer,
    ClassSessionWriteSerializer,
    EnrollmentCreateSerializer,
    EnrollmentSerializer,
    ProgramSerializer,
)
from enrollment.services import EnrollmentService, build_enrollment_service
from enrollment.services.parsing import parse_id
from enrollment.stores.django_store import DjangoStore

STATUS_BY_CODE = {
    ErrorCode.NOT_AVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.SESSION_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.SESSION_IN_USE: status.HTTP_409_CONFLICT,
    ErrorCode.SELECTION_LIMIT_REACHED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INCOMPLETE_SELECTION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PROGRAM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ENROLLMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESERVATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if error.retriable:
        body["retry"] = True
    return Response(body, status=STATUS_BY_CODE[error.code])


def invalid_input_response(errors) -> Response:
    return Response(
        {
            "code": ErrorCode.VALIDATION_ERROR.value,
            "message": "Invalid request data",
            "errors": errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class EnrollmentAPIView(APIView):
    """Base view turning domain errors into JSON error responses."""

    def get_service(self) -> EnrollmentService:
        return build_enrollment_service(DjangoStore())

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)


def _scope_from_query(request: Request) -> SessionScope:
    program_id = request.query_params.get("program_id")
    if program_id:
        return SessionScope.for_program(parse_id(ProgramId, program_id, "program"))
    scope = request.query_params.get("scope", "global")
    if scope == "global":
        return SessionScope.global_pool()
    if scope == "all":
        return SessionScope.everything()
    raise ValidationError("Invalid scope. Must be either 'global' or 'all'")


class ClassSessionListView(EnrollmentAPIView):
    """Handler for GET/POST /api/class-sessions"""

    def get(self, request: Request) -> Response:
        sessions = self.get_service().list_sessions(_scope_from_query(request))
        return Response(
            {"count": len(sessions), "sessions": ClassSessionSerializer(sessions, many=True).data}
        )

    def post(self, request: Request) -> Response:
        serializer = ClassSessionWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        session = self.get_service().directory.add_session(**serializer.validated_data)
        return Response(ClassSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class ClassSessionDetailView(EnrollmentAPIView):
    """Handler for GET/PUT/DELETE /api/class-sessions/{session_id}"""

    def get(self, request: Request, session_id: str) -> Response:
        session = self.get_service().directory.get_session(session_id)
        return Response(ClassSessionSerializer(session).data)

    def put(self, request: Request, session_id: str) -> Response:
        serializer = ClassSessionWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        session = self.get_service().directory.update_session(
            session_id, **serializer.validated_data
        )
        return Response(ClassSessionSerializer(session).data)

    def delete(self, request: Request, session_id: str) -> Response:
        self.get_service().directory.delete_session(session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProgramDetailView(EnrollmentAPIView):
    """Handler for GET /api/programs/{program_id}"""

    def get(self, request: Request, program_id: str) -> Response:
        parsed = parse_id(ProgramId, program_id, "program")
        key = program_cache_key(str(parsed))
        data = cache.get(key)
        if data is None:
            program = self.get_service().get_program(str(parsed))
            data = ProgramSerializer(program).data
            cache.set(key, data, timeout=settings.PROGRAM_CACHE_TIMEOUT)
        return Response(data)


class ProgramSessionListView(EnrollmentAPIView):
    """Handler for GET /api/programs/{program_id}/sessions"""

    def get(self, request: Request, program_id: str) -> Response:
        program, sessions = self.get_service().sessions_for_program(program_id)
        program_data = ProgramSerializer(program).data
        return Response(
            {
                "program_id": program_data["id"],
                "required_session_count": program_data["required_session_count"],
                "count": len(sessions),
                "sessions": ClassSessionSerializer(sessions, many=True).data,
            }
        )


class EnrollmentListView(EnrollmentAPIView):
    """Handler for GET/POST /api/enrollments"""

    def get(self, request: Request) -> Response:
        enrollments = self.get_service().list_enrollments(request.query_params.get("program_id"))
        return Response(
            {
                "count": len(enrollments),
                "enrollments": EnrollmentSerializer(enrollments, many=True).data,
            }
        )

    def post(self, request: Request) -> Response:
        serializer = EnrollmentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        data = serializer.validated_data
        enrollment = self.get_service().create_enrollment(
            data["program_id"],
            StudentInfo(**data["student"]),
            data["session_ids"],
        )
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


class EnrollmentDetailView(EnrollmentAPIView):
    """Handler for GET /api/enrollments/{enrollment_id}"""

    def get(self, request: Request, enrollment_id: str) -> Response:
        enrollment = self.get_service().get_enrollment(enrollment_id)
        return Response(EnrollmentSerializer(enrollment).data)


class EnrollmentCancelView(EnrollmentAPIView):
    """Handler for POST /api/enrollments/{enrollment_id}/cancel"""

    def post(self, request: Request, enrollment_id: str) -> Response:
        enrollment = self.get_service().cancel_enrollment(enrollment_id)
        return Response(EnrollmentSerializer(enrollment).data)
