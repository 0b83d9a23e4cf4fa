"""Workflow engine — the rebase state machine."""
