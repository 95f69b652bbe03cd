"""
Global hotkey listener.

Uses pynput; callbacks fire on the listener thread, so consumers must hop
back onto their own loop before touching shared state.
"""

from typing import Callable, Optional, Set

from pynput import keyboard

from ...utils.logger import get_logger
from ..settings import HotkeyConfig

logger = get_logger(__name__)

_MODIFIER_KEYS = {
    "ctrl": (keyboard.Key.ctrl_l, keyboard.Key.ctrl_r),
    "alt": (keyboard.Key.alt_l, keyboard.Key.alt_r),
    "shift": (keyboard.Key.shift_l, keyboard.Key.shift_r),
    "cmd": (keyboard.Key.cmd_l, keyboard.Key.cmd_r),
    "meta": (keyboard.Key.cmd_l, keyboard.Key.cmd_r),
}


def parse_trigger_key(key_name: str):
    try:
        return getattr(keyboard.Key, key_name)
    except AttributeError:
        return keyboard.KeyCode.from_char(key_name)


class HotkeyListener:
    """Reports press and release of one modifier+key combination."""

    def __init__(
        self,
        hotkey: HotkeyConfig,
        on_pressed: Callable[[], None],
        on_released: Optional[Callable[[], None]] = None,
    ):
        self._on_pressed = on_pressed
        self._on_released = on_released
        self._pressed_keys: Set = set()
        self._is_hotkey_active = False
        self._keyboard_listener: Optional[keyboard.Listener] = None
        self.update_hotkey(hotkey)

    def update_hotkey(self, hotkey: HotkeyConfig) -> None:
        self._trigger_key = parse_trigger_key(hotkey.key)
        self._required_modifiers: Set[str] = set(hotkey.modifiers)

    def _is_combination_held(self) -> bool:
        if self._trigger_key not in self._pressed_keys:
            return False

        for modifier in self._required_modifiers:
            keys = _MODIFIER_KEYS.get(modifier, ())
            if not any(key in self._pressed_keys for key in keys):
                return False

        return True

    def _on_press(self, key) -> None:
        self._pressed_keys.add(key)

        if not self._is_hotkey_active and self._is_combination_held():
            self._is_hotkey_active = True
            self._on_pressed()

    def _on_release(self, key) -> None:
        self._pressed_keys.discard(key)

        if self._is_hotkey_active and not self._is_combination_held():
            self._is_hotkey_active = False
            if self._on_released is not None:
                self._on_released()

    def start(self) -> None:
        self._keyboard_listener = keyboard.Listener(
            on_press=self._on_press, on_release=self._on_release
        )
        self._keyboard_listener.start()

        if getattr(self._keyboard_listener, "IS_TRUSTED", True) is False:
            logger.warning(
                "Hotkey listener is NOT TRUSTED. Accessibility permissions not granted."
            )

    def stop(self) -> None:
        if self._keyboard_listener:
            self._keyboard_listener.stop()
            self._keyboard_listener = None
