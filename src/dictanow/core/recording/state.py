"""
Recording state machine.

Holds the lifecycle state of the single dictation session together with its
side data (audio file, start time, device, last error). Every field is guarded
by its own lock so the audio thread, the hotkey thread and the event loop can
read them without contending on one big lock.
"""

import threading
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from ...utils.logger import get_logger
from ..errors import InvalidTransitionError

logger = get_logger(__name__)


class RecordingState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPING = "stopping"
    TRANSCRIBING = "transcribing"
    ERROR = "error"

    def can_transition_to(self, target: "RecordingState") -> bool:
        if self is target:
            return True
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: Dict[RecordingState, FrozenSet[RecordingState]] = {
    RecordingState.IDLE: frozenset({RecordingState.STARTING}),
    RecordingState.STARTING: frozenset(
        {RecordingState.RECORDING, RecordingState.ERROR, RecordingState.IDLE}
    ),
    RecordingState.RECORDING: frozenset(
        {RecordingState.STOPPING, RecordingState.ERROR}
    ),
    RecordingState.STOPPING: frozenset(
        {RecordingState.TRANSCRIBING, RecordingState.IDLE, RecordingState.ERROR}
    ),
    RecordingState.TRANSCRIBING: frozenset(
        {RecordingState.IDLE, RecordingState.ERROR}
    ),
    RecordingState.ERROR: frozenset({RecordingState.IDLE}),
}


class RecordingMode(str, Enum):
    TOGGLE = "toggle"
    PUSH_TO_TALK = "pushtotalk"


class RecordingStateManager:
    """Thread-safe owner of the recording state and session side data."""

    def __init__(self, mode: RecordingMode = RecordingMode.TOGGLE):
        self._state = RecordingState.IDLE
        self._state_lock = threading.Lock()

        self._mode = mode
        self._mode_lock = threading.Lock()

        self._current_file: Optional[Path] = None
        self._current_file_lock = threading.Lock()

        self._start_time: Optional[int] = None
        self._start_time_lock = threading.Lock()

        self._recording_device: Optional[str] = None
        self._recording_device_lock = threading.Lock()

        self._error_message: Optional[str] = None
        self._error_lock = threading.Lock()

    def get_state(self) -> RecordingState:
        with self._state_lock:
            return self._state

    def set_state(self, target: RecordingState) -> None:
        """Move to ``target`` if the transition is allowed.

        Raises:
            InvalidTransitionError: the pair is not allowed; state is unchanged.
        """
        with self._state_lock:
            current = self._state
            if not current.can_transition_to(target):
                raise InvalidTransitionError(current, target)
            self._state = target

        if current is not target:
            logger.debug(f"Recording state: {current.value} -> {target.value}")

    def force_set_state(self, target: RecordingState) -> None:
        """Set the state without validation. Used by error recovery and cancel."""
        with self._state_lock:
            previous = self._state
            self._state = target

        logger.info(f"Recording state forced: {previous.value} -> {target.value}")

    def is_recording(self) -> bool:
        return self.get_state() is RecordingState.RECORDING

    def is_active(self) -> bool:
        return self.get_state() not in (RecordingState.IDLE, RecordingState.ERROR)

    def get_mode(self) -> RecordingMode:
        with self._mode_lock:
            return self._mode

    def set_mode(self, mode: RecordingMode) -> None:
        with self._mode_lock:
            self._mode = mode

    def get_current_file(self) -> Optional[Path]:
        with self._current_file_lock:
            return self._current_file

    def set_current_file(self, path: Optional[Path]) -> None:
        with self._current_file_lock:
            self._current_file = path

    def get_start_time(self) -> Optional[int]:
        with self._start_time_lock:
            return self._start_time

    def set_start_time(self, timestamp_ms: Optional[int]) -> None:
        with self._start_time_lock:
            self._start_time = timestamp_ms

    def get_recording_device(self) -> Optional[str]:
        with self._recording_device_lock:
            return self._recording_device

    def set_recording_device(self, device: Optional[str]) -> None:
        with self._recording_device_lock:
            self._recording_device = device

    def get_error(self) -> Optional[str]:
        with self._error_lock:
            return self._error_message

    def set_error(self, message: Optional[str]) -> None:
        with self._error_lock:
            self._error_message = message

    def clear_session(self) -> None:
        """Drop the per-session side data. The last error is kept."""
        self.set_current_file(None)
        self.set_start_time(None)
        self.set_recording_device(None)
