"""Persistent user settings."""

from .settings import (
    LOCAL_PROVIDER,
    RAW_VIBE_ID,
    AIProcessingSettings,
    HotkeyConfig,
    ModelEntry,
    Settings,
    Snippet,
    SystemSettings,
    TranscriptionSettings,
    Vibe,
    VoiceInputSettings,
    get_config_dir,
    get_data_dir,
    get_settings,
)

__all__ = [
    "LOCAL_PROVIDER",
    "RAW_VIBE_ID",
    "AIProcessingSettings",
    "HotkeyConfig",
    "ModelEntry",
    "Settings",
    "Snippet",
    "SystemSettings",
    "TranscriptionSettings",
    "Vibe",
    "VoiceInputSettings",
    "get_config_dir",
    "get_data_dir",
    "get_settings",
]
