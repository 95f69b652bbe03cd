"""
Settings management with JSON persistence.

Handles loading, saving, and validating application settings.
Uses platformdirs for cross-platform directory resolution.
"""

import json
from pathlib import Path
from typing import Dict, List, Literal, Optional

from platformdirs import user_config_path, user_data_path
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...utils.logger import get_logger

logger = get_logger(__name__)

APP_NAME = "dictanow"

LOCAL_PROVIDER = "local-whisper"
REMOTE_PROVIDERS = ("openai", "google", "elevenlabs")

RAW_VIBE_ID = "other-raw"


def get_config_dir() -> Path:
    return user_config_path(APP_NAME, ensure_exists=True)


def get_data_dir() -> Path:
    return user_data_path(APP_NAME, ensure_exists=True)


class HotkeyConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=False)

    modifiers: List[str] = Field(default_factory=lambda: ["ctrl", "shift"])
    key: str = "space"

    @field_validator("modifiers")
    @classmethod
    def modifiers_valid(cls, v):
        if not v or not all(isinstance(m, str) and m.strip() for m in v):
            raise ValueError("modifiers must be a non-empty list of non-empty strings")
        return [m.strip().lower() for m in v]

    @field_validator("key")
    @classmethod
    def key_not_empty(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("key must be a non-empty string")
        return v.strip()

    def to_display_string(self) -> str:
        return " + ".join([m.capitalize() for m in self.modifiers] + [self.key.capitalize()])


class ModelEntry(BaseModel):
    """A speech-to-text model the user can select."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    provider: str
    engine: str = "whisper"
    path: Optional[str] = None  # local models only
    api_model: Optional[str] = None  # remote model name, provider default if unset
    downloaded: bool = False

    @property
    def is_local(self) -> bool:
        return self.provider == LOCAL_PROVIDER


class Snippet(BaseModel):
    trigger: str
    expansion: str


class Vibe(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    category: str = "other"
    prompt: str = ""


class TranscriptionSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    speech_to_text_model_id: Optional[str] = None
    language: str = "en"


class AIProcessingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    post_processing_model_id: Optional[str] = None


class VoiceInputSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recording_mode: Literal["toggle", "pushtotalk"] = "toggle"
    microphone_device: Optional[str] = None
    hotkey: HotkeyConfig = Field(default_factory=HotkeyConfig)
    paste_last_hotkey: Optional[HotkeyConfig] = None


class SystemSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    auto_paste: bool = True
    auto_copy_to_clipboard: bool = False


def _default_vibes() -> List[Vibe]:
    return [
        Vibe(id="personal-casual", name="Casual", category="personal",
             prompt="Keep the tone relaxed and conversational. Lowercase is fine."),
        Vibe(id="work-professional", name="Professional", category="work",
             prompt="Use clear, concise, professional language with full sentences."),
        Vibe(id="email-formal", name="Formal Email", category="email",
             prompt="Format as an email body with a greeting and a sign-off."),
        Vibe(id=RAW_VIBE_ID, name="Raw Transcription", category="other"),
    ]


class Settings(BaseModel):
    model_config = ConfigDict(validate_assignment=False)

    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    ai_processing: AIProcessingSettings = Field(default_factory=AIProcessingSettings)
    voice_input: VoiceInputSettings = Field(default_factory=VoiceInputSettings)
    system: SystemSettings = Field(default_factory=SystemSettings)

    models: List[ModelEntry] = Field(default_factory=list)
    vocabulary: List[str] = Field(default_factory=list)
    snippets: List[Snippet] = Field(default_factory=list)
    vibes: List[Vibe] = Field(default_factory=_default_vibes)
    selected_vibes: Dict[str, str] = Field(
        default_factory=lambda: {
            "personal": RAW_VIBE_ID,
            "work": RAW_VIBE_ID,
            "email": RAW_VIBE_ID,
            "other": RAW_VIBE_ID,
        }
    )

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "Settings":
        config_file = config_file or get_config_dir() / "settings.json"

        if not config_file.exists():
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings: {e}. Using defaults.", exc_info=True)
            return cls()

        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object. Using defaults.")
            return cls()

        return cls._load_with_fallbacks(data)

    @classmethod
    def _load_with_fallbacks(cls, data: dict) -> "Settings":
        """Validate each top-level field on its own, falling back to its default."""
        defaults = cls()
        result = {}

        for field_name in cls.model_fields:
            if field_name not in data:
                result[field_name] = getattr(defaults, field_name)
                continue
            try:
                partial = cls.model_validate({field_name: data[field_name]})
                result[field_name] = getattr(partial, field_name)
            except ValueError as e:
                logger.warning(f"Invalid {field_name} setting, resetting to default: {e}")
                result[field_name] = getattr(defaults, field_name)

        return cls.model_construct(**result)

    def save(self, config_file: Optional[Path] = None) -> None:
        config_file = config_file or get_config_dir() / "settings.json"

        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_model(self, model_id: Optional[str]) -> Optional[ModelEntry]:
        if not model_id:
            return None
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def get_vibe(self, vibe_id: Optional[str]) -> Optional[Vibe]:
        for vibe in self.vibes:
            if vibe.id == vibe_id:
                return vibe
        return None


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings.load()
    return _settings_instance
