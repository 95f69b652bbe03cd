"""Remote speech-to-text services."""

from typing import Dict, Optional

import requests

from .base import (
    RemoteTranscriptionProvider,
    TranscriptionResponse,
    TranscriptionSegment,
)
from .elevenlabs import ElevenLabsTranscriptionProvider
from .google import GoogleTranscriptionProvider
from .openai import OpenAITranscriptionProvider


def create_default_providers(
    session: Optional[requests.Session] = None,
) -> Dict[str, RemoteTranscriptionProvider]:
    session = session or requests.Session()
    providers = [
        OpenAITranscriptionProvider(session),
        GoogleTranscriptionProvider(session),
        ElevenLabsTranscriptionProvider(session),
    ]
    return {provider.name: provider for provider in providers}


__all__ = [
    "ElevenLabsTranscriptionProvider",
    "GoogleTranscriptionProvider",
    "OpenAITranscriptionProvider",
    "RemoteTranscriptionProvider",
    "TranscriptionResponse",
    "TranscriptionSegment",
    "create_default_providers",
]
