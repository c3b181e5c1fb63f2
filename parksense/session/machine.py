"""Session state machine for the capture → analyze → results flow.

The machine owns every state change of a single analysis session. Triggers
that are not valid for the current state are ignored and return False, so
the display layer can forward user input without checking state first.

Transitions:

    HOME      --start_capture-->     CAMERA
    CAMERA    --capture_image-->     PREVIEW
    CAMERA    --cancel_capture-->    HOME
    PREVIEW   --retake-->            CAMERA
    PREVIEW   --request_analysis-->  ANALYZING
    ANALYZING --success-->           RESULTS
    ANALYZING --config error-->      HOME
    ANALYZING --other error-->       PREVIEW
    RESULTS   --analyze_another-->   HOME

Example:
    >>> machine = SessionStateMachine(analyzer)
    >>> machine.start_capture()
    >>> machine.capture_image(frame)
    >>> machine.request_analysis()
    >>> machine.state
    <SessionState.RESULTS: 'results'>
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from parksense.analysis.errors import ConfigurationError
from parksense.models.analysis import ParkingAnalysisResult

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    """Views of the analysis workflow."""

    HOME = "home"
    CAMERA = "camera"
    PREVIEW = "preview"
    ANALYZING = "analyzing"
    RESULTS = "results"


class ErrorKind(StrEnum):
    """What kind of failure ``last_error`` describes."""

    CONFIGURATION = "configuration"
    PROVIDER = "provider"


class Analyzer(Protocol):
    """Anything that can turn an image into a parking result."""

    def analyze(self, image: Any) -> ParkingAnalysisResult:
        ...


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for the display layer."""

    state: SessionState
    captured_image: Any | None
    result: ParkingAnalysisResult | None
    last_error: str | None
    last_error_kind: ErrorKind | None

    @property
    def needs_setup(self) -> bool:
        """True if the last failure calls for configuration, not a retry."""
        return self.last_error_kind == ErrorKind.CONFIGURATION


class SessionStateMachine:
    """Drive one user through capture, analysis and results.

    At most one analysis runs at a time. ``request_analysis`` while already
    analyzing is a no-op, and an in-flight analysis cannot be cancelled.

    Attributes:
        state: Current session state.
        captured_image: Image awaiting or under analysis.
        result: Result of the last successful analysis.
        last_error: Message from the last failed analysis.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        on_state_change: Callable[[SessionState], None] | None = None,
    ) -> None:
        """Initialize the session in HOME.

        Args:
            analyzer: Component that performs the analysis.
            on_state_change: Called with the new state after each transition.
        """
        self._analyzer = analyzer
        self._on_state_change = on_state_change

        self._lock = threading.Lock()
        self._state = SessionState.HOME
        self._captured_image: Any | None = None
        self._result: ParkingAnalysisResult | None = None
        self._last_error: str | None = None
        self._last_error_kind: ErrorKind | None = None
        self._worker: threading.Thread | None = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def captured_image(self) -> Any | None:
        with self._lock:
            return self._captured_image

    @property
    def result(self) -> ParkingAnalysisResult | None:
        with self._lock:
            return self._result

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    @property
    def last_error_kind(self) -> ErrorKind | None:
        with self._lock:
            return self._last_error_kind

    @property
    def is_analyzing(self) -> bool:
        return self.state == SessionState.ANALYZING

    def snapshot(self) -> SessionSnapshot:
        """Capture a consistent view of the session."""
        with self._lock:
            return SessionSnapshot(
                state=self._state,
                captured_image=self._captured_image,
                result=self._result,
                last_error=self._last_error,
                last_error_kind=self._last_error_kind,
            )

    def _clear_error(self) -> None:
        self._last_error = None
        self._last_error_kind = None

    def _notify(self, old_state: SessionState, new_state: SessionState) -> None:
        if old_state == new_state:
            return
        logger.info(f"Session state: {old_state.value} -> {new_state.value}")
        if self._on_state_change:
            try:
                self._on_state_change(new_state)
            except Exception as e:
                logger.warning(f"State change callback error: {e}")

    def _ignore(self, trigger: str, state: SessionState) -> bool:
        logger.debug(f"Ignoring '{trigger}' in state {state.value}")
        return False

    def start_capture(self) -> bool:
        """HOME → CAMERA."""
        with self._lock:
            old = self._state
            if old != SessionState.HOME:
                return self._ignore("start_capture", old)
            self._clear_error()
            self._state = SessionState.CAMERA
        self._notify(old, SessionState.CAMERA)
        return True

    def capture_image(self, image: Any) -> bool:
        """CAMERA → PREVIEW, keeping the captured image."""
        if image is None:
            logger.warning("capture_image called without an image; ignoring")
            return False
        with self._lock:
            old = self._state
            if old != SessionState.CAMERA:
                return self._ignore("capture_image", old)
            self._captured_image = image
            self._clear_error()
            self._state = SessionState.PREVIEW
        self._notify(old, SessionState.PREVIEW)
        return True

    def cancel_capture(self) -> bool:
        """CAMERA → HOME."""
        with self._lock:
            old = self._state
            if old != SessionState.CAMERA:
                return self._ignore("cancel_capture", old)
            self._state = SessionState.HOME
        self._notify(old, SessionState.HOME)
        return True

    def retake(self) -> bool:
        """PREVIEW → CAMERA, discarding the captured image."""
        with self._lock:
            old = self._state
            if old != SessionState.PREVIEW:
                return self._ignore("retake", old)
            self._captured_image = None
            self._clear_error()
            self._state = SessionState.CAMERA
        self._notify(old, SessionState.CAMERA)
        return True

    def analyze_another(self) -> bool:
        """RESULTS → HOME, discarding image, result and error."""
        with self._lock:
            old = self._state
            if old != SessionState.RESULTS:
                return self._ignore("analyze_another", old)
            self._captured_image = None
            self._result = None
            self._clear_error()
            self._state = SessionState.HOME
        self._notify(old, SessionState.HOME)
        return True

    def request_analysis(self, background: bool = False) -> bool:
        """PREVIEW → ANALYZING, then resolve to RESULTS, PREVIEW or HOME.

        Args:
            background: Run the analysis on a worker thread and return
                immediately. Use ``wait()`` to join it.

        Returns:
            True if an analysis was started, False if the trigger was ignored.
        """
        with self._lock:
            old = self._state
            if old != SessionState.PREVIEW:
                return self._ignore("request_analysis", old)
            image = self._captured_image
            self._clear_error()
            self._state = SessionState.ANALYZING
        self._notify(old, SessionState.ANALYZING)

        if background:
            self._worker = threading.Thread(
                target=self._run_analysis,
                args=(image,),
                name="parksense-analysis",
                daemon=True,
            )
            self._worker.start()
        else:
            self._run_analysis(image)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for a background analysis to finish.

        Returns:
            True if no analysis is running when this returns.
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout=timeout)
            if worker.is_alive():
                return False
        return not self.is_analyzing

    def _run_analysis(self, image: Any) -> None:
        try:
            result = self._analyzer.analyze(image)
        except ConfigurationError as e:
            logger.error(f"Analysis failed, configuration required: {e}")
            self._resolve(SessionState.HOME, error=str(e), error_kind=ErrorKind.CONFIGURATION)
            return
        except Exception as e:
            logger.error(f"Analysis failed: {e}")
            self._resolve(SessionState.PREVIEW, error=str(e), error_kind=ErrorKind.PROVIDER)
            return

        self._resolve(SessionState.RESULTS, result=result)

    def _resolve(
        self,
        new_state: SessionState,
        result: ParkingAnalysisResult | None = None,
        error: str | None = None,
        error_kind: ErrorKind | None = None,
    ) -> None:
        with self._lock:
            old = self._state
            if old != SessionState.ANALYZING:
                logger.warning(f"Analysis resolved outside ANALYZING (state={old.value}); dropping")
                return
            if result is not None:
                self._result = result
            self._last_error = error
            self._last_error_kind = error_kind
            self._state = new_state
        self._notify(old, new_state)
