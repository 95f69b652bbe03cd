"""
Delivers transcripts to the user: clipboard copy and simulated paste.

Clipboard access goes through the platform's command-line tools; the paste
keystroke is sent with pynput.
"""

import subprocess
import time
from typing import List, Optional, Tuple

from pynput.keyboard import Controller as KeyboardController
from pynput.keyboard import Key

from ...utils.logger import get_logger
from ...utils.platform import get_platform, get_subprocess_kwargs
from ..errors import DeliveryError

logger = get_logger(__name__)


def _clipboard_commands(system: str) -> Tuple[List[str], object]:
    if system == "linux":
        return ["xclip", "-selection", "clipboard"], Key.ctrl
    if system == "macos":
        return ["pbcopy"], Key.cmd
    if system == "windows":
        return ["clip"], Key.ctrl
    raise DeliveryError(f"Clipboard unsupported on platform {system}")


class TextOutputController:

    def __init__(self, paste_delay: float = 0.05, keyboard: Optional[KeyboardController] = None):
        self._keyboard = keyboard or KeyboardController()
        self._paste_delay = paste_delay
        self._copy_cmd, self._paste_key = _clipboard_commands(get_platform())

    def copy(self, text: str) -> None:
        logger.debug(
            f"Copying text to clipboard: '{text[:50]}{'...' if len(text) > 50 else ''}'"
        )
        try:
            subprocess.run(
                self._copy_cmd,
                **get_subprocess_kwargs(input=text, text=True, timeout=1, check=True),
            )
        except (
            subprocess.TimeoutExpired,
            FileNotFoundError,
            subprocess.CalledProcessError,
        ) as e:
            raise DeliveryError(f"Failed to set clipboard: {e}") from e

    def copy_and_paste(self, text: str) -> None:
        """Put ``text`` on the clipboard and press the platform paste shortcut."""
        self.copy(text)
        time.sleep(self._paste_delay)

        try:
            with self._keyboard.pressed(self._paste_key):
                self._keyboard.tap("v")
        except Exception as e:
            raise DeliveryError(f"Failed to simulate paste: {e}") from e
