"""Multi-step add-student enrollment form.

Steps run Program -> Student -> Session -> Confirm. Moving forward is gated on
the current step being valid, moving back is always allowed, and jumping is
limited to steps already reached. Sessions can only be toggled once the
Session step has been reached. Choosing another program throws away the
session selection and everything reached after the Program step.
"""

from datetime import date
from enum import Enum
from typing import Protocol

from enrollment.domain.errors import ValidationError
from enrollment.domain.models import ClassSession, Enrollment, Program, StudentInfo
from enrollment.domain.policy import required_session_count
from enrollment.domain.scope import SessionScope
from enrollment.domain.selection import SelectionSet


class WizardStep(Enum):
    PROGRAM = "program"
    STUDENT = "student"
    SESSION = "session"
    CONFIRM = "confirm"

    @property
    def position(self) -> int:
        return _STEPS.index(self)


_STEPS = list(WizardStep)


class EnrollmentGateway(Protocol):
    """What the wizard needs from the enrollment backend."""

    def list_sessions(self, scope: SessionScope) -> list[ClassSession]: ...

    def create_enrollment(
        self, program_id: str, student: StudentInfo, session_ids: list[str]
    ) -> Enrollment: ...


class EnrollmentWizard:
    """State for one user's pass through the enrollment form."""

    def __init__(self, gateway: EnrollmentGateway) -> None:
        self._gateway = gateway
        self._step = WizardStep.PROGRAM
        self._reached: set[WizardStep] = {WizardStep.PROGRAM}
        self._program: Program | None = None
        self._student = StudentInfo(first_name="", last_name="", date_of_birth=None)
        self._selection: SelectionSet | None = None
        self.enrollment: Enrollment | None = None

    @property
    def step(self) -> WizardStep:
        return self._step

    @property
    def reached_steps(self) -> frozenset[WizardStep]:
        return frozenset(self._reached)

    @property
    def program(self) -> Program | None:
        return self._program

    @property
    def student(self) -> StudentInfo:
        return self._student

    @property
    def selection(self) -> SelectionSet | None:
        return self._selection

    @property
    def progress(self) -> float:
        """Fraction of the form completed, counting the current step."""
        return (self._step.position + 1) / len(_STEPS)

    def select_program(self, program: Program) -> None:
        if self._program is not None and self._program.id == program.id:
            return
        self._program = program
        self._selection = SelectionSet(required_session_count(program))
        self._reached = {WizardStep.PROGRAM}
        self._step = WizardStep.PROGRAM
        self.enrollment = None

    def set_student(self, first_name: str, last_name: str, date_of_birth: date | None) -> None:
        self._student = StudentInfo(
            first_name=first_name, last_name=last_name, date_of_birth=date_of_birth
        )

    def available_sessions(self) -> list[ClassSession]:
        """Sessions the chosen program can use.

        Raises NotAvailableError when the backend cannot be reached; calling
        again is the retry.
        """
        program = self._require_program()
        return self._gateway.list_sessions(SessionScope.of(program))

    def toggle_session(self, session: ClassSession) -> None:
        program = self._require_program()
        if WizardStep.SESSION not in self._reached:
            raise ValidationError("Complete the earlier steps before choosing class sessions.")
        if not SessionScope.of(program).includes(session):
            raise ValidationError("This class session is not offered for the selected program.")
        self._require_selection().toggle(session)

    def next(self) -> WizardStep:
        """Advance one step, or submit from the Confirm step."""
        if self._step is WizardStep.CONFIRM:
            self.submit()
            return self._step
        self._validate(self._step)
        self._step = _STEPS[self._step.position + 1]
        self._reached.add(self._step)
        return self._step

    def back(self) -> WizardStep:
        if self._step.position > 0:
            self._step = _STEPS[self._step.position - 1]
        return self._step

    def go_to(self, step: WizardStep) -> WizardStep:
        if step not in self._reached:
            raise ValidationError(f"Complete the earlier steps before opening '{step.value}'.")
        self._step = step
        return self._step

    def submit(self) -> Enrollment:
        for step in (WizardStep.PROGRAM, WizardStep.STUDENT, WizardStep.SESSION):
            self._validate(step)
        program = self._require_program()
        selection = self._require_selection()
        enrollment = self._gateway.create_enrollment(
            str(program.id),
            self._student,
            [str(session_id) for session_id in selection.session_ids],
        )
        self.enrollment = enrollment
        selection.reset()
        return enrollment

    def _validate(self, step: WizardStep) -> None:
        if step is WizardStep.PROGRAM:
            self._require_program()
        elif step is WizardStep.STUDENT:
            if self._student.missing_fields():
                raise ValidationError("Please fill all student information fields.")
        elif step is WizardStep.SESSION:
            self._require_selection().ensure_complete()

    def _require_program(self) -> Program:
        if self._program is None:
            raise ValidationError("Please select a program.")
        return self._program

    def _require_selection(self) -> SelectionSet:
        if self._selection is None:
            raise ValidationError("Please select a program.")
        return self._selection
