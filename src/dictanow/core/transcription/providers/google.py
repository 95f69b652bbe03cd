import base64
from typing import Optional

import numpy as np
import soundfile as sf

from ....config import ENGINE_SAMPLE_RATE
from ...audio.analysis import decode_wav, resample, to_mono
from ...errors import AudioFormatError, ProviderError
from .base import RemoteTranscriptionProvider, TranscriptionResponse

GOOGLE_RECOGNIZE_URL = "https://speech.googleapis.com/v1/speech:recognize"

DEFAULT_LANGUAGE_CODE = "en-US"


def to_language_code(language: Optional[str]) -> str:
    """``en`` -> ``en-US``; full codes pass through."""
    if not language:
        return DEFAULT_LANGUAGE_CODE
    if "-" in language:
        return language
    return f"{language.lower()}-US"


def to_linear16(audio_data: bytes) -> bytes:
    """Re-encode WAV bytes as raw 16 kHz mono 16-bit PCM."""
    try:
        samples, rate = decode_wav(audio_data)
    except AudioFormatError as e:
        raise ProviderError(f"Google Speech: {e}") from e
    mono = resample(to_mono(samples), rate, ENGINE_SAMPLE_RATE)
    return (np.clip(mono, -1.0, 1.0) * 32767).astype("<i2").tobytes()


class GoogleTranscriptionProvider(RemoteTranscriptionProvider):
    name = "google"
    display_name = "Google Speech"

    def transcribe(
        self,
        audio_data: bytes,
        api_key: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResponse:
        language_code = to_language_code(language)
        config = {
            "encoding": "LINEAR16",
            "sampleRateHertz": ENGINE_SAMPLE_RATE,
            "languageCode": language_code,
            "enableAutomaticPunctuation": True,
        }
        if model:
            config["model"] = model

        content = base64.b64encode(to_linear16(audio_data)).decode("ascii")
        body = self._post(
            GOOGLE_RECOGNIZE_URL,
            params={"key": api_key},
            json={"config": config, "audio": {"content": content}},
        )

        text = ""
        results = body.get("results") or []
        if results:
            alternatives = results[0].get("alternatives") or []
            if alternatives:
                text = alternatives[0].get("transcript", "")

        return TranscriptionResponse(text=text, language=language_code)
