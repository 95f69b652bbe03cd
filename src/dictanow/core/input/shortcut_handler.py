import time
from typing import Callable, Optional

from ...config import SHORTCUT_THROTTLE_SECONDS
from ...utils.logger import get_logger
from ..recording.state import RecordingMode, RecordingState, RecordingStateManager

logger = get_logger(__name__)


class RecordingShortcutHandler:
    """Turns hotkey presses into recording commands for the current mode.

    Toggle: a press starts when idle (or after an error) and stops while
    recording. Push-to-talk: press starts, release stops. Presses closer
    together than the throttle interval are ignored.
    """

    def __init__(
        self,
        controller,
        state_manager: RecordingStateManager,
        throttle: float = SHORTCUT_THROTTLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._controller = controller
        self._state = state_manager
        self._throttle = throttle
        self._clock = clock
        self._last_press: Optional[float] = None

    def _throttled(self) -> bool:
        now = self._clock()
        if self._last_press is not None and now - self._last_press < self._throttle:
            logger.debug("Shortcut press throttled")
            return True
        self._last_press = now
        return False

    async def on_pressed(self):
        if self._throttled():
            return None
        if self._state.get_mode() is RecordingMode.PUSH_TO_TALK:
            return await self.handle_push_to_talk(pressed=True)
        return await self.handle_toggle()

    async def on_released(self):
        if self._state.get_mode() is RecordingMode.PUSH_TO_TALK:
            return await self.handle_push_to_talk(pressed=False)
        return None

    async def handle_toggle(self):
        state = self._state.get_state()
        if state in (RecordingState.IDLE, RecordingState.ERROR):
            return await self._controller.start_recording()
        if state is RecordingState.RECORDING:
            return await self._controller.stop_recording()
        logger.debug(f"Toggle ignored in state {state.value}")
        return None

    async def handle_push_to_talk(self, pressed: bool):
        state = self._state.get_state()
        if pressed:
            if state in (RecordingState.IDLE, RecordingState.ERROR):
                return await self._controller.start_recording()
        elif state is RecordingState.RECORDING:
            return await self._controller.stop_recording()
        elif state is RecordingState.STARTING:
            return await self._controller.cancel_recording()
        logger.debug(f"Push-to-talk {'press' if pressed else 'release'} ignored in state {state.value}")
        return None
