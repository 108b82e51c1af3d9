"""Grievance wizard state machine.

One ``GrievanceWizard`` instance owns the form for a single session: the
current step, the form data, field errors, and the submission lifecycle.
Everything is synchronous except ``submit()`` and ``add_files()``, which
await the gateway and file reads respectively. Autosave is driven by
``tick()`` so tests can control time through a ManualClock.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from grievance.core.config import Settings
from grievance.core.types import DraftStatus, NoticeSeverity, WizardPhase
from grievance.intake.definition import load_wizard
from grievance.intake.drafts import DraftSlot, DraftStore, FileDraftSlot
from grievance.intake.errors import InvalidTransitionError, SubmissionInProgressError
from grievance.intake.gateway import (
    SUCCESS_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
    MockSubmissionGateway,
    SubmissionGateway,
)
from grievance.intake.models import (
    FormData,
    FormErrors,
    FormState,
    Notice,
    StepDefinition,
    SubmitResult,
    WizardDefinition,
)
from grievance.intake.navigation import Navigator, parse_step_param, step_query
from grievance.intake.scheduler import Clock, Debouncer, SystemClock
from grievance.intake.uploads import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES,
    UploadCandidate,
    UploadOutcome,
    decode_uploads,
)
from grievance.intake.validation import ValidationEngine

logger = logging.getLogger(__name__)

SUBMIT_RETRY_MESSAGE = "Submission failed. Please try again."
SUBMIT_FAILED_MESSAGE = "Submission failed"


@dataclass(frozen=True)
class StepView:
    """What the rendering layer receives for the active step."""

    index: int
    step: StepDefinition
    data: FormData
    errors: FormErrors
    update_data: Callable[[Mapping[str, Any]], None]
    # Only offered on the review step, for its "edit this section" links.
    go_to_step: Callable[[int], None] | None = None


class GrievanceWizard:
    """Four-step grievance wizard: personal, grievance, documents, review.

    Args:
        wizard: The step definitions.
        validation_engine: Runs each step's rules.
        drafts: Persists in-progress snapshots.
        gateway: Accepts the completed grievance.
        clock: Time source for autosave and the incident-date rule.
        navigator: Receives ``?step=<n>`` location changes.
        autosave_delay_seconds: Quiet period after the last change before a
            draft is written.
        max_files: Attachment count limit.
        max_file_size: Per-attachment size limit in bytes.
    """

    def __init__(
        self,
        wizard: WizardDefinition,
        validation_engine: ValidationEngine,
        drafts: DraftStore,
        gateway: SubmissionGateway,
        clock: Clock | None = None,
        navigator: Navigator | None = None,
        autosave_delay_seconds: float = 1.0,
        max_files: int = DEFAULT_MAX_FILES,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        if not wizard.steps:
            raise ValueError(f"Wizard {wizard.id!r} has no steps")
        self._wizard = wizard
        self._validation = validation_engine
        self._drafts = drafts
        self._gateway = gateway
        self._clock = clock or SystemClock()
        self._navigator = navigator
        self._max_files = max_files
        self._max_file_size = max_file_size
        self._autosave = Debouncer(self._clock, autosave_delay_seconds)

        self._phase = WizardPhase.INITIALIZING
        self._step = 0
        self._data = FormData()
        self._errors = FormErrors()
        self._notice: Notice | None = None
        self._upload_error: str | None = None
        self._pending_draft: FormState | None = None
        # Bumped on every reset; uploads started before a reset are dropped.
        self._generation = 0

    # -- State --

    @property
    def phase(self) -> WizardPhase:
        return self._phase

    @property
    def step(self) -> int:
        return self._step

    @property
    def last_step(self) -> int:
        return len(self._wizard.steps) - 1

    @property
    def data(self) -> FormData:
        return self._data

    @property
    def errors(self) -> FormErrors:
        return self._errors

    @property
    def submitting(self) -> bool:
        return self._phase is WizardPhase.SUBMITTING

    @property
    def notice(self) -> Notice | None:
        return self._notice

    @property
    def upload_error(self) -> str | None:
        return self._upload_error

    @property
    def pending_draft(self) -> FormState | None:
        return self._pending_draft

    @property
    def location(self) -> str:
        return step_query(self._step)

    @property
    def step_titles(self) -> list[str]:
        return [s.title for s in self._wizard.steps]

    def view(self) -> StepView:
        """Build the rendering contract for the active step."""
        return StepView(
            index=self._step,
            step=self._wizard.steps[self._step],
            data=self._data,
            errors=self._errors,
            update_data=self.update,
            go_to_step=self.jump_to if self._step == self.last_step else None,
        )

    # -- Session start and drafts --

    def open(self, location: str | int | None = None) -> WizardPhase:
        """Start the session at the step named by ``location``.

        If a meaningful draft is stored, the wizard waits in DRAFT_PENDING
        until ``restore()`` or ``discard_and_start_new()`` is called. A stored
        draft identical to the untouched form is deleted silently.
        """
        if self._phase is not WizardPhase.INITIALIZING:
            raise InvalidTransitionError("Wizard is already open.")

        self._step = parse_step_param(location, self.last_step)
        loaded = self._drafts.load()
        if loaded.status is DraftStatus.OK and loaded.state is not None:
            state = loaded.state
            if state.current_step == 0 and state.data.is_initial():
                logger.info("Discarding empty draft %r", self._drafts.key)
                self._drafts.clear()
            else:
                self._pending_draft = state
                self._phase = WizardPhase.DRAFT_PENDING
                return self._phase

        self._phase = WizardPhase.EDITING
        return self._phase

    def restore(self) -> None:
        """Resume from the pending draft."""
        if self._phase is not WizardPhase.DRAFT_PENDING or self._pending_draft is None:
            raise InvalidTransitionError("There is no draft to restore.")
        state = self._pending_draft
        self._pending_draft = None
        self._data = state.data
        self._step = min(state.current_step, self.last_step)
        self._errors = FormErrors()
        self._phase = WizardPhase.EDITING
        self._navigate(replace=True)

    def discard_and_start_new(self) -> None:
        """Delete the pending draft and start from an empty form."""
        if self._phase is not WizardPhase.DRAFT_PENDING:
            raise InvalidTransitionError("There is no draft to discard.")
        self._pending_draft = None
        self.start_new()

    def start_new(self) -> None:
        """Delete any stored draft and reset to an empty form on step 0."""
        if self._phase is WizardPhase.SUBMITTING:
            raise SubmissionInProgressError("Cannot start over while a submission is in progress.")
        if self._phase is WizardPhase.INITIALIZING:
            raise InvalidTransitionError("Call open() before starting a new grievance.")
        self._drafts.clear()
        self._autosave.cancel()
        self._reset()
        self._phase = WizardPhase.EDITING
        self._navigate(replace=True)

    def save_draft(self) -> bool:
        """Save immediately ("Save Draft"). Returns True if a draft was written."""
        self._require_editable()
        self._autosave.cancel()
        if self._step >= self.last_step:
            return False
        return self._drafts.save(self._step, self._data)

    def tick(self) -> bool:
        """Write the draft if the autosave quiet period has elapsed.

        Drafts are only written while editing a step before review. Returns
        True if a draft was written.
        """
        if self._phase is not WizardPhase.EDITING:
            return False
        if not self._autosave.due():
            return False
        if self._step >= self.last_step:
            return False
        return self._drafts.save(self._step, self._data)

    # -- Editing and navigation --

    def update(self, fields: Mapping[str, Any]) -> None:
        """Merge edited fields and clear only their errors.

        Raises:
            KeyError: If a key is not a form field.
            pydantic.ValidationError: If a value has the wrong shape.
        """
        self._require_editable()
        self._data = self._data.merged(fields)
        self._errors = self._errors.without(*fields)
        self._autosave.touch()

    def edit(self, field: str, value: Any) -> None:
        self.update({field: value})

    def next(self) -> bool:
        """Validate the current step and advance. Returns False if invalid."""
        self._require_editable()
        if self._step >= self.last_step:
            raise InvalidTransitionError("The review step is submitted, not advanced.")
        if not self._validate_step(self._step):
            return False
        self._step += 1
        self._errors = FormErrors()
        self._navigate()
        self._autosave.touch()
        return True

    def back(self) -> bool:
        """Go to the previous step without validating. No-op on step 0."""
        self._require_editable()
        if self._step <= 0:
            return False
        self._step -= 1
        self._navigate()
        self._autosave.touch()
        return True

    def jump_to(self, target: int) -> None:
        """Jump from the review step to any step, without validating."""
        self._require_editable()
        if self._step != self.last_step:
            raise InvalidTransitionError("Steps can only be jumped to from the review step.")
        if not 0 <= target <= self.last_step:
            raise InvalidTransitionError(f"No such step: {target}")
        self._step = target
        self._navigate()
        self._autosave.touch()

    def sync_location(self, location: str | int | None) -> None:
        """Follow a browser back/forward navigation to another step."""
        self._require_editable()
        self._step = parse_step_param(location, self.last_step)
        self._autosave.touch()

    def validate_current_step(self) -> bool:
        self._require_editable()
        return self._validate_step(self._step)

    # -- Attachments --

    async def add_files(self, candidates: Sequence[UploadCandidate]) -> UploadOutcome:
        """Decode a batch of selected files and append those accepted.

        The attachment list is updated once, after every read has finished.
        Rejections are reported through ``upload_error``.
        """
        self._require_editable()
        self._upload_error = None
        generation = self._generation
        outcome = await decode_uploads(
            len(self._data.files), candidates, self._max_files, self._max_file_size
        )

        if self._phase is not WizardPhase.EDITING:
            logger.warning("Dropping %d decoded upload(s); wizard is %s", len(outcome.files), self._phase)
            return UploadOutcome(messages=outcome.messages)
        if generation != self._generation:
            logger.warning("Dropping %d decoded upload(s); the form was reset", len(outcome.files))
            return UploadOutcome()

        if outcome.files and len(self._data.files) + len(outcome.files) > self._max_files:
            # Another batch landed while this one was being read.
            outcome = UploadOutcome(messages=[f"Maximum {self._max_files} files allowed in total."])

        if outcome.messages:
            self._upload_error = outcome.messages[-1]
        if outcome.files:
            self.update({"files": [*self._data.files, *outcome.files]})
        return outcome

    def remove_file(self, index: int) -> None:
        self._require_editable()
        files = list(self._data.files)
        del files[index]
        self.update({"files": files})

    def dismiss_upload_error(self) -> None:
        self._upload_error = None

    # -- Submission --

    async def submit(self) -> SubmitResult:
        """Validate everything and hand the grievance to the gateway.

        On success the draft is cleared and the form resets to an empty step
        0 with a success notice. On failure the wizard stays on the review
        step with its data intact and any field errors the gateway returned.

        Raises:
            SubmissionInProgressError: If a submission is already pending.
            InvalidTransitionError: If not on the review step.
        """
        if self._phase is WizardPhase.SUBMITTING:
            raise SubmissionInProgressError("A submission is already in progress.")
        self._require_editable()
        if self._step != self.last_step:
            raise InvalidTransitionError("Submit is only available on the review step.")

        self._notice = None
        result = self._validation.validate_all(self._wizard, self._data.model_dump(), self._rule_params())
        if not result.valid:
            self._errors = FormErrors.from_messages(result.errors)
            return SubmitResult(success=False, message=VALIDATION_FAILED_MESSAGE, errors=result.errors)

        self._phase = WizardPhase.SUBMITTING
        self._errors = FormErrors()
        self._autosave.cancel()
        try:
            outcome = await self._gateway.submit(self._data.model_copy(deep=True))
        except Exception:
            logger.exception("Grievance submission failed")
            outcome = SubmitResult(success=False, message=SUBMIT_RETRY_MESSAGE)
        finally:
            self._phase = WizardPhase.EDITING

        if outcome.success:
            self._complete(outcome)
        else:
            self._notice = Notice(
                severity=NoticeSeverity.ERROR, message=outcome.message or SUBMIT_FAILED_MESSAGE
            )
            if outcome.errors:
                self._errors = FormErrors.from_messages(outcome.errors)
        return outcome

    def dismiss_notice(self) -> None:
        self._notice = None

    # -- Internals --

    def _complete(self, outcome: SubmitResult) -> None:
        logger.info("Grievance accepted with reference %s", outcome.reference_id)
        self._drafts.clear()
        self._reset()
        self._notice = Notice(
            severity=NoticeSeverity.SUCCESS,
            message=outcome.message or SUCCESS_MESSAGE,
            reference_id=outcome.reference_id,
        )
        self._navigate(replace=True)

    def _reset(self) -> None:
        self._generation += 1
        self._step = 0
        self._data = FormData()
        self._errors = FormErrors()
        self._upload_error = None

    def _rule_params(self) -> dict[str, Any]:
        return {"today": self._clock.today()}

    def _validate_step(self, index: int) -> bool:
        result = self._validation.validate_step(
            self._wizard.steps[index], self._data.model_dump(), self._rule_params()
        )
        self._errors = FormErrors.from_messages(result.errors)
        return result.valid

    def _require_editable(self) -> None:
        if self._phase is WizardPhase.EDITING:
            return
        if self._phase is WizardPhase.SUBMITTING:
            raise InvalidTransitionError("The form is locked while submitting.")
        if self._phase is WizardPhase.DRAFT_PENDING:
            raise InvalidTransitionError("Restore or discard the saved draft first.")
        raise InvalidTransitionError("Call open() before editing.")

    def _navigate(self, replace: bool = False) -> None:
        if self._navigator is None:
            return
        if replace:
            self._navigator.replace(self.location)
        else:
            self._navigator.push(self.location)


def build_wizard(
    settings: Settings | None = None,
    slot: DraftSlot | None = None,
    gateway: SubmissionGateway | None = None,
    clock: Clock | None = None,
    navigator: Navigator | None = None,
) -> GrievanceWizard:
    """Wire a wizard from settings, defaulting to a file slot and the mock gateway."""
    if settings is None:
        settings = Settings()
    clock = clock or SystemClock()
    wizard = load_wizard(settings.intake.wizard_path)
    validation_engine = ValidationEngine()
    if slot is None:
        slot = FileDraftSlot(settings.draft.storage_dir)
    if gateway is None:
        gateway = MockSubmissionGateway(
            wizard,
            validation_engine,
            latency_seconds=settings.gateway.latency_seconds,
            clock=clock,
        )
    return GrievanceWizard(
        wizard=wizard,
        validation_engine=validation_engine,
        drafts=DraftStore(slot, key=settings.draft.key),
        gateway=gateway,
        clock=clock,
        navigator=navigator,
        autosave_delay_seconds=settings.draft.autosave_delay_seconds,
        max_files=settings.upload.max_files,
        max_file_size=settings.upload.max_file_size_bytes,
    )
