from typing import Optional

from .base import RemoteTranscriptionProvider, TranscriptionResponse, TranscriptionSegment

OPENAI_TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"


class OpenAITranscriptionProvider(RemoteTranscriptionProvider):
    name = "openai"
    display_name = "OpenAI"
    default_model = "whisper-1"

    def transcribe(
        self,
        audio_data: bytes,
        api_key: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResponse:
        data = {
            "model": model or self.default_model,
            "response_format": "verbose_json",
        }
        if language:
            data["language"] = language

        body = self._post(
            OPENAI_TRANSCRIPTIONS_URL,
            headers={"Authorization": f"Bearer {api_key}"},
            files={"file": ("audio.wav", audio_data, "audio/wav")},
            data=data,
        )

        segments = [
            TranscriptionSegment(
                start=float(seg.get("start", 0.0)),
                end=float(seg.get("end", 0.0)),
                text=seg.get("text", ""),
            )
            for seg in body.get("segments") or []
        ]
        return TranscriptionResponse(
            text=body.get("text", ""),
            language=body.get("language"),
            segments=segments or None,
        )
