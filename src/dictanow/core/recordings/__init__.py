"""Recording folders, metadata and history."""

from .history import LastTranscriptPaster, get_last_transcript
from .metadata import (
    ApplicationContext,
    PromptContext,
    RecordingMetadata,
    SnippetInfo,
    SystemContext,
    get_model_name,
)
from .storage import AUDIO_FILE_NAME, METADATA_FILE_NAME, RecordingStorage, get_recordings_dir

__all__ = [
    "AUDIO_FILE_NAME",
    "METADATA_FILE_NAME",
    "ApplicationContext",
    "LastTranscriptPaster",
    "PromptContext",
    "RecordingMetadata",
    "RecordingStorage",
    "SnippetInfo",
    "SystemContext",
    "get_last_transcript",
    "get_model_name",
    "get_recordings_dir",
]
