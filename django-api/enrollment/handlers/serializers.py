"""Serializers for transforming domain models to API responses and parsing input."""

from rest_framework import serializers

from enrollment.domain import required_session_count


class OfferingSerializer(serializers.Serializer):
    """Serializer for Offering domain model."""

    id = serializers.UUIDField(source="id.value", read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)


class ProgramSerializer(serializers.Serializer):
    """Serializer for Program domain model."""

    id = serializers.UUIDField(source="id.value", read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    offering = OfferingSerializer(read_only=True)
    offering_kind = serializers.CharField(source="offering_kind.value", read_only=True)
    cadence = serializers.CharField(source="cadence.value", read_only=True)
    required_session_count = serializers.SerializerMethodField()

    def get_required_session_count(self, program) -> int:
        return required_session_count(program)


class ClassSessionSerializer(serializers.Serializer):
    """Serializer for ClassSession domain model."""

    id = serializers.UUIDField(source="id.value", read_only=True)
    program_id = serializers.UUIDField(source="program_id.value", read_only=True, allow_null=True)
    weekday = serializers.CharField(source="weekday.value", read_only=True)
    start_time = serializers.CharField(read_only=True)
    end_time = serializers.CharField(read_only=True)
    type = serializers.CharField(source="type.value", read_only=True)
    regular_capacity = serializers.IntegerField(source="regular_capacity.value", read_only=True)
    available_capacity = serializers.IntegerField(source="available_capacity.value", read_only=True)
    capacity_demo = serializers.IntegerField(source="capacity_demo.value", read_only=True)
    available_demo_capacity = serializers.IntegerField(
        source="available_demo_capacity.value", read_only=True
    )


class StudentSerializer(serializers.Serializer):
    """Student details, used for both input and output."""

    first_name = serializers.CharField(max_length=100, allow_blank=True)
    last_name = serializers.CharField(max_length=100, allow_blank=True)
    date_of_birth = serializers.DateField()


class EnrollmentSerializer(serializers.Serializer):
    """Serializer for Enrollment domain model."""

    id = serializers.UUIDField(source="id.value", read_only=True)
    program_id = serializers.UUIDField(source="program_id.value", read_only=True)
    student = StudentSerializer(read_only=True)
    session_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    reservation_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    status = serializers.CharField(source="status.value", read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class EnrollmentCreateSerializer(serializers.Serializer):
    """Input for POST /api/enrollments."""

    program_id = serializers.CharField()
    student = StudentSerializer()
    session_ids = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class ClassSessionWriteSerializer(serializers.Serializer):
    """Input for creating or updating a class session."""

    program_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    weekday = serializers.CharField()
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    type = serializers.CharField()
    regular_capacity = serializers.IntegerField(min_value=0)
    capacity_demo = serializers.IntegerField(min_value=0, required=False)
