from django.contrib import admin

from enrollment.models import ClassSession, Enrollment, Offering, Program, Reservation

CAPACITY_FIELDS = [
    "regular_capacity",
    "available_capacity",
    "capacity_demo",
    "available_demo_capacity",
]


class ProgramInline(admin.TabularInline):
    model = Program
    extra = 1


class ReservationInline(admin.TabularInline):
    model = Reservation
    extra = 0
    can_delete = False
    readonly_fields = ["session", "seat_kind", "status", "created_at", "released_at"]


@admin.register(Offering)
class OfferingAdmin(admin.ModelAdmin):
    list_display = ["name", "created_at"]
    search_fields = ["name"]
    inlines = [ProgramInline]


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ["name", "offering", "created_at"]
    list_filter = ["offering"]
    search_fields = ["name"]


@admin.register(ClassSession)
class ClassSessionAdmin(admin.ModelAdmin):
    list_display = [
        "weekday",
        "start_time",
        "end_time",
        "program",
        "regular_capacity",
        "available_capacity",
    ]
    list_filter = ["weekday", "type", "program"]
    readonly_fields = CAPACITY_FIELDS

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ["student_first_name", "student_last_name", "program", "status", "created_at"]
    list_filter = ["status", "program"]
    inlines = [ReservationInline]
