"""Errors raised by the workflow driver for its own invariants.

Domain failures (provider outages, store errors) never surface as these;
nodes record them in the state with ``status == "error"`` instead.
"""


class WorkflowDefectError(RuntimeError):
    """The workflow reached a state the transition table does not cover."""


class WorkflowResumeError(RuntimeError):
    """A session cannot be resumed (no checkpoint, or no approval to resume from)."""
