"""Submission gateway Protocol and the mock stub used in development."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Protocol, runtime_checkable

from grievance.intake.models import FormData, SubmitResult, WizardDefinition
from grievance.intake.scheduler import Clock, SystemClock
from grievance.intake.validation import ValidationEngine

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Grievance submitted successfully!"
VALIDATION_FAILED_MESSAGE = "Validation failed. Please check your inputs."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


@runtime_checkable
class SubmissionGateway(Protocol):
    """Protocol for the acceptor of completed grievances."""

    async def submit(self, data: FormData) -> SubmitResult: ...


def generate_reference_id() -> str:
    """Short opaque reference shown to the user.

    Eight hex digits of a random UUID; collisions are possible.
    """
    return uuid.uuid4().hex[:8].upper()


class MockSubmissionGateway:
    """Stub gateway: re-validates, logs the grievance, and returns a reference id.

    Nothing is stored. ``latency_seconds`` simulates a network round trip.
    """

    def __init__(
        self,
        wizard: WizardDefinition,
        validation_engine: ValidationEngine,
        latency_seconds: float = 1.5,
        clock: Clock | None = None,
        reference_factory: Callable[[], str] = generate_reference_id,
    ) -> None:
        self._wizard = wizard
        self._validation = validation_engine
        self._latency = latency_seconds
        self._clock = clock or SystemClock()
        self._reference_factory = reference_factory

    async def submit(self, data: FormData) -> SubmitResult:
        if self._latency > 0:
            await asyncio.sleep(self._latency)

        result = self._validation.validate_all(
            self._wizard, data.model_dump(), {"today": self._clock.today()}
        )
        if not result.valid:
            return SubmitResult(
                success=False,
                message=VALIDATION_FAILED_MESSAGE,
                errors=result.errors,
            )

        try:
            self._log_submission(data)
            reference_id = self._reference_factory()
        except Exception:
            logger.exception("Submission error")
            return SubmitResult(success=False, message=UNEXPECTED_ERROR_MESSAGE)

        return SubmitResult(success=True, message=SUCCESS_MESSAGE, reference_id=reference_id)

    @staticmethod
    def _log_submission(data: FormData) -> None:
        logger.info(
            "Grievance received: name=%r email=%r phone=%r address=%r",
            data.full_name, data.email, data.phone, data.address,
        )
        logger.info(
            "Grievance details: category=%r subject=%r date=%s description_chars=%d",
            data.category, data.subject, data.incident_date, len(data.description),
        )
        logger.info(
            "Grievance documents: %s",
            ", ".join(f"{f.name} ({f.size} bytes)" for f in data.files),
        )
