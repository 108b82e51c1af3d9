"""Multi-step grievance submission form."""

__version__ = "0.1.0"
