"""Turning recordings into delivered transcripts."""

from .orchestrator import (
    TranscribeRequest,
    TranscriptionOrchestrator,
    TranscriptionRecord,
    load_selected_local_model,
)

__all__ = [
    "TranscribeRequest",
    "TranscriptionOrchestrator",
    "TranscriptionRecord",
    "load_selected_local_model",
]
