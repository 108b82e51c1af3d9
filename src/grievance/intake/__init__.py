"""Grievance intake wizard: validation, drafts, submission, state machine."""
