"""Per-recording metadata written to ``meta.json`` (camelCase JSON)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )


class SnippetInfo(_CamelModel):
    trigger: str
    expansion: str


class SystemContext(_CamelModel):
    language: str = "en"
    time: str = ""


class ApplicationContext(_CamelModel):
    name: str = "Unknown"
    category: str = "other"


class PromptContext(_CamelModel):
    vocabulary_used: List[str] = Field(default_factory=list)
    snippets_used: List[SnippetInfo] = Field(default_factory=list)
    vibe_prompt: Optional[str] = None
    system_context: SystemContext = Field(default_factory=SystemContext)
    application_context: ApplicationContext = Field(default_factory=ApplicationContext)


class RecordingMetadata(_CamelModel):
    model_config = ConfigDict(frozen=True)

    result: str
    raw_result: str
    post_processed_result: Optional[str] = None
    datetime: str
    duration: Optional[int] = None  # ms
    processing_time: Optional[int] = None  # ms

    model_key: str
    model_name: str
    provider: str
    post_processing_model_id: Optional[str] = None
    post_processing_model_name: Optional[str] = None
    post_processing_provider: Optional[str] = None

    language_selected: Optional[str] = None
    recording_device: Optional[str] = None
    post_processing_enabled: bool = False
    style_applied: Optional[str] = None
    style_category: Optional[str] = None
    focused_app_name: str = "Unknown"
    focused_app_category: str = "other"
    prompt_context: Optional[PromptContext] = None
    app_version: str = ""

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def get_model_name(model_id: str) -> str:
    """Human-readable name for a model id (``whisper-base`` -> ``Whisper Base``)."""
    if model_id.startswith("whisper-"):
        parts = model_id.split("-")
        return " ".join(part.capitalize() for part in parts)
    if model_id.startswith("claude-"):
        return "Claude"
    if model_id.startswith("gpt-"):
        return "GPT"
    return model_id
