"""
Registry of local speech engines.

At most one engine holds a loaded model at any time. Loading a model on a
different engine unloads the current one first, and every operation runs
under one lock so a transcription never overlaps a load or unload.
"""

import threading
from typing import Dict, Iterable, Optional

from ...utils.logger import get_logger
from .engines import (
    LocalModelEngine,
    ModelConfig,
    ModelInfo,
    ModelStatus,
    NoModelLoadedError,
    SherpaOnnxEngine,
    UnknownEngineError,
)

logger = get_logger(__name__)


class LocalModelManager:

    def __init__(self, engines: Optional[Iterable[LocalModelEngine]] = None):
        if engines is None:
            engines = [SherpaOnnxEngine()]

        self._engines: Dict[str, LocalModelEngine] = {
            engine.engine_type: engine for engine in engines
        }
        self._active_engine_type: Optional[str] = None
        self._lock = threading.Lock()

    def has_engine(self, engine_type: str) -> bool:
        return engine_type in self._engines

    @property
    def active_engine_type(self) -> Optional[str]:
        with self._lock:
            return self._active_engine_type

    def load_model(self, engine_type: str, config: ModelConfig) -> None:
        """Load ``config`` on ``engine_type``, unloading any other active engine.

        If the load fails the previous engine stays unloaded and the manager
        reports no active engine, unless the failing engine was already the
        active one (its status then reports the error).
        """
        with self._lock:
            engine = self._engines.get(engine_type)
            if engine is None:
                raise UnknownEngineError(engine_type)

            active = self._active_engine_type
            if active is not None and active != engine_type:
                logger.info(f"Unloading '{active}' engine before loading '{engine_type}'")
                self._engines[active].unload_model()
                self._active_engine_type = None

            engine.load_model(config)
            self._active_engine_type = engine_type

    def unload_model(self) -> None:
        with self._lock:
            if self._active_engine_type is None:
                return
            self._engines[self._active_engine_type].unload_model()
            self._active_engine_type = None

    def transcribe(self, audio_data: bytes, language: Optional[str] = None) -> str:
        with self._lock:
            if self._active_engine_type is None:
                raise NoModelLoadedError()
            engine = self._engines[self._active_engine_type]
            return engine.transcribe(audio_data, language)

    @property
    def status(self) -> ModelStatus:
        with self._lock:
            if self._active_engine_type is None:
                return ModelStatus.STOPPED
            return self._engines[self._active_engine_type].status

    def loaded_model_info(self) -> Optional[ModelInfo]:
        with self._lock:
            if self._active_engine_type is None:
                return None
            return self._engines[self._active_engine_type].loaded_model_info()

    @property
    def loaded_model_name(self) -> Optional[str]:
        info = self.loaded_model_info()
        return info.name if info else None
