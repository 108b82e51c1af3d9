"""Validator functions for wizard fields.

Importing this package registers every built-in validator in ``VALIDATORS``.
"""

from grievance.intake.validators import documents  # noqa: F401
from grievance.intake.validators.common import VALIDATORS, register

__all__ = ["VALIDATORS", "register"]
