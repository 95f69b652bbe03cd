"""Local speech engines and the registry that owns them."""

from .engines import (
    EngineError,
    LocalModelEngine,
    ModelConfig,
    ModelInfo,
    ModelStatus,
    SherpaOnnxEngine,
)
from .manager import LocalModelManager

__all__ = [
    "EngineError",
    "LocalModelEngine",
    "LocalModelManager",
    "ModelConfig",
    "ModelInfo",
    "ModelStatus",
    "SherpaOnnxEngine",
]
