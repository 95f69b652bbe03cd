"""Recording lifecycle: state machine and commands."""

from .controller import RecordingController, RecordingResponse, check_model_available
from .state import RecordingMode, RecordingState, RecordingStateManager

__all__ = [
    "RecordingController",
    "RecordingMode",
    "RecordingResponse",
    "RecordingState",
    "RecordingStateManager",
    "check_model_available",
]
