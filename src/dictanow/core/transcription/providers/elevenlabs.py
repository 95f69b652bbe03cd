from typing import Optional

from .base import RemoteTranscriptionProvider, TranscriptionResponse

ELEVENLABS_STT_URL = "https://api.elevenlabs.io/v1/speech-to-text"


class ElevenLabsTranscriptionProvider(RemoteTranscriptionProvider):
    name = "elevenlabs"
    display_name = "ElevenLabs"
    default_model = "scribe_v1"

    def transcribe(
        self,
        audio_data: bytes,
        api_key: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResponse:
        data = {"model_id": model or self.default_model}
        if language:
            data["language_code"] = language

        body = self._post(
            ELEVENLABS_STT_URL,
            headers={"xi-api-key": api_key},
            files={"file": ("audio.wav", audio_data, "audio/wav")},
            data=data,
        )
        return TranscriptionResponse(
            text=body.get("text", ""), language=body.get("language_code")
        )
