from .base import (
    EngineError,
    InvalidAudioFormatError,
    LocalModelEngine,
    ModelConfig,
    ModelInfo,
    ModelLoadError,
    ModelNotFoundError,
    ModelNotReadyError,
    ModelStatus,
    NoModelLoadedError,
    OutOfMemoryError,
    TranscriptionFailedError,
    UnknownEngineError,
)
from .sherpa import SherpaOnnxEngine

__all__ = [
    "EngineError",
    "InvalidAudioFormatError",
    "LocalModelEngine",
    "ModelConfig",
    "ModelInfo",
    "ModelLoadError",
    "ModelNotFoundError",
    "ModelNotReadyError",
    "ModelStatus",
    "NoModelLoadedError",
    "OutOfMemoryError",
    "SherpaOnnxEngine",
    "TranscriptionFailedError",
    "UnknownEngineError",
]
