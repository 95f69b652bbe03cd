"""
Shared fixtures: temporary recording storage, settings with a local model,
WAV builders and recording fakes for the pipeline collaborators.
"""

import io
from typing import List, Optional

import numpy as np
import pytest
import soundfile as sf

from dictanow.core.asr.engines import LocalModelEngine, ModelConfig, ModelInfo, ModelStatus
from dictanow.core.recordings import RecordingStorage
from dictanow.core.settings import ModelEntry, Settings, TranscriptionSettings


def make_wav(samples: np.ndarray, sample_rate: int = 16000, subtype: str = "PCM_16") -> bytes:
    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format="WAV", subtype=subtype)
    return buffer.getvalue()


def sine(duration: float, sample_rate: int = 16000, freq: float = 440.0, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def speech_wav() -> bytes:
    return make_wav(sine(1.0))


@pytest.fixture
def silent_wav() -> bytes:
    return make_wav(np.zeros(16000, dtype=np.float32))


@pytest.fixture
def storage(tmp_path) -> RecordingStorage:
    return RecordingStorage(tmp_path / "recordings")


@pytest.fixture
def settings(tmp_path) -> Settings:
    model_dir = tmp_path / "models" / "whisper-base"
    model_dir.mkdir(parents=True)
    return Settings(
        transcription=TranscriptionSettings(speech_to_text_model_id="whisper-base"),
        models=[
            ModelEntry(
                id="whisper-base",
                name="Whisper Base",
                provider="local-whisper",
                path=str(model_dir),
                downloaded=True,
            ),
            ModelEntry(id="whisper-1", name="OpenAI Whisper", provider="openai"),
        ],
    )


class FakeEngine(LocalModelEngine):
    """Engine returning canned text; optionally failing on load or transcribe."""

    def __init__(self, engine_type: str = "whisper", text: str = "hello world",
                 load_error: Optional[Exception] = None,
                 transcribe_error: Optional[Exception] = None):
        self.engine_type = engine_type
        self.text = text
        self.load_error = load_error
        self.transcribe_error = transcribe_error
        self.calls: List[str] = []
        self._status = ModelStatus.STOPPED
        self._info: Optional[ModelInfo] = None

    def load_model(self, config: ModelConfig) -> None:
        self.calls.append(f"load:{config.model_name}")
        if self.load_error is not None:
            self._status = ModelStatus.ERROR
            raise self.load_error
        self._info = ModelInfo(name=config.model_name, path=config.model_path,
                               engine_type=self.engine_type)
        self._status = ModelStatus.READY

    def unload_model(self) -> None:
        self.calls.append("unload")
        self._info = None
        self._status = ModelStatus.STOPPED

    def transcribe(self, audio_data: bytes, language: Optional[str] = None) -> str:
        self.calls.append("transcribe")
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return self.text

    @property
    def status(self) -> ModelStatus:
        return self._status

    def loaded_model_info(self) -> Optional[ModelInfo]:
        return self._info


class RecordingEvents:
    def __init__(self):
        self.events = []

    def emit(self, event, payload=None):
        self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]


class RecordingNotifier:
    def __init__(self):
        self.notifications = []

    def notify(self, title, body):
        self.notifications.append((title, body))


class RecordingTextOutput:
    def __init__(self, error: Optional[Exception] = None):
        self.pasted = []
        self.copied = []
        self.error = error

    def copy_and_paste(self, text):
        if self.error is not None:
            raise self.error
        self.pasted.append(text)

    def copy(self, text):
        if self.error is not None:
            raise self.error
        self.copied.append(text)


class DictSecretStore:
    def __init__(self, keys=None):
        self.keys = keys or {}

    def get_api_key(self, key_id, provider=None):
        return self.keys.get(key_id)
