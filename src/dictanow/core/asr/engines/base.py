from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...errors import DictaNowError


class ModelStatus(str, Enum):
    STOPPED = "stopped"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class ModelConfig:
    model_path: str
    model_name: str
    language: Optional[str] = None


@dataclass
class ModelInfo:
    name: str
    path: str
    engine_type: str


class EngineError(DictaNowError):
    pass


class ModelNotFoundError(EngineError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Model file not found: {path}")


class ModelLoadError(EngineError):
    pass


class OutOfMemoryError(ModelLoadError):
    def __init__(self):
        super().__init__("Out of memory - try a smaller model (tiny or base)")


class TranscriptionFailedError(EngineError):
    pass


class NoModelLoadedError(EngineError):
    def __init__(self):
        super().__init__("No model is currently loaded")


class ModelNotReadyError(EngineError):
    def __init__(self):
        super().__init__("Model is not ready for transcription")


class InvalidAudioFormatError(EngineError):
    pass


class UnknownEngineError(EngineError):
    def __init__(self, engine_type: str):
        self.engine_type = engine_type
        super().__init__(f"Unknown engine type: {engine_type}")


class LocalModelEngine(ABC):
    """A speech engine that runs a model file on this machine.

    Implementations are used from worker threads; the owning manager
    serializes load, unload and transcribe calls.
    """

    engine_type: str = ""

    @abstractmethod
    def load_model(self, config: ModelConfig) -> None:
        ...

    @abstractmethod
    def unload_model(self) -> None:
        ...

    @abstractmethod
    def transcribe(self, audio_data: bytes, language: Optional[str] = None) -> str:
        """Transcribe WAV bytes and return the joined text."""

    @property
    @abstractmethod
    def status(self) -> ModelStatus:
        ...

    @abstractmethod
    def loaded_model_info(self) -> Optional[ModelInfo]:
        ...
