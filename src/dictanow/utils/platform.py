"""Platform-specific helpers: OS detection, subprocess flags, focused app lookup."""

import os
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..core.errors import DictaNowError
from .logger import get_logger

logger = get_logger(__name__)

UNKNOWN_APP_NAME = "Unknown"

_MACOS_FRONTMOST_SCRIPT = (
    'tell application "System Events"\n'
    "  set frontApp to first application process whose frontmost is true\n"
    '  return (name of frontApp) & "|" & (bundle identifier of frontApp)\n'
    "end tell"
)


class FocusedAppError(DictaNowError):
    pass


@dataclass
class FocusedApp:
    name: str
    bundle_id: str = ""


def get_platform() -> str:
    system = platform.system()
    if system == "Darwin":
        return "macos"
    return system.lower()


def get_subprocess_kwargs(**kwargs) -> dict:
    """Keyword arguments for ``subprocess.run`` that hide console windows on Windows."""
    if get_platform() == "windows":
        kwargs.setdefault("creationflags", getattr(subprocess, "CREATE_NO_WINDOW", 0))
    return kwargs


def get_focused_app() -> FocusedApp:
    system = get_platform()

    try:
        if system == "macos":
            return _get_focused_app_macos()
        if system == "linux":
            return _get_focused_app_linux()
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        raise FocusedAppError(f"Failed to query focused application: {e}") from e

    raise FocusedAppError(f"Focused application lookup unsupported on {system}")


def _get_focused_app_macos() -> FocusedApp:
    result = subprocess.run(
        ["osascript", "-e", _MACOS_FRONTMOST_SCRIPT],
        **get_subprocess_kwargs(capture_output=True, text=True, timeout=2),
    )
    if result.returncode != 0:
        raise FocusedAppError(f"osascript failed: {result.stderr.strip()}")

    name, _, bundle_id = result.stdout.strip().partition("|")
    if not name:
        raise FocusedAppError("osascript returned no application name")
    return FocusedApp(name=name, bundle_id=bundle_id)


def _get_focused_app_linux() -> FocusedApp:
    result = subprocess.run(
        ["xdotool", "getactivewindow", "getwindowpid"],
        **get_subprocess_kwargs(capture_output=True, text=True, timeout=2),
    )
    if result.returncode != 0 or not result.stdout.strip():
        raise FocusedAppError(f"xdotool failed: {result.stderr.strip()}")

    pid = result.stdout.strip()
    comm = Path("/proc") / pid / "comm"
    name = comm.read_text(encoding="utf-8").strip() if comm.exists() else ""
    if not name:
        raise FocusedAppError(f"No process name for pid {pid}")

    exe = Path("/proc") / pid / "exe"
    bundle_id = os.path.realpath(exe) if exe.exists() else ""
    return FocusedApp(name=name, bundle_id=bundle_id)
