"""Exceptions raised by the intake wizard."""

from __future__ import annotations


class IntakeError(Exception):
    """Base class for intake wizard errors."""


class PersistenceError(IntakeError):
    """The draft slot could not be read or written."""


class InvalidTransitionError(IntakeError, ValueError):
    """The requested transition is not allowed in the wizard's current state."""


class SubmissionInProgressError(InvalidTransitionError):
    """A submission is already awaiting the gateway."""
