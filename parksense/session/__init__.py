"""Session workflow for a single parking sign analysis."""

from parksense.session.machine import (
    ErrorKind,
    SessionSnapshot,
    SessionState,
    SessionStateMachine,
)

__all__ = ["ErrorKind", "SessionSnapshot", "SessionState", "SessionStateMachine"]
