from pathlib import Path
from typing import List, Optional

import numpy as np

from ....config import ENGINE_CHUNK_SECONDS, ENGINE_SAMPLE_RATE
from ....utils.logger import get_logger
from ...audio.analysis import decode_wav, resample, to_mono
from ...errors import AudioFormatError
from ..file_utils import (
    TRANSDUCER,
    WHISPER,
    detect_model_type,
    find_transducer_files,
    find_whisper_files,
    resolve_model_path,
)
from .base import (
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
)

logger = get_logger(__name__)

_OOM_MARKERS = ("memory", "allocation")


class SherpaOnnxEngine(LocalModelEngine):
    """Offline sherpa-onnx recognizer for Whisper and transducer model directories."""

    engine_type = "whisper"

    def __init__(self, num_threads: int = 4):
        self._num_threads = num_threads
        self._recognizer = None
        self._status = ModelStatus.STOPPED
        self._model_info: Optional[ModelInfo] = None
        self._model_type: Optional[str] = None

    @property
    def status(self) -> ModelStatus:
        return self._status

    @property
    def model_type(self) -> Optional[str]:
        return self._model_type

    def loaded_model_info(self) -> Optional[ModelInfo]:
        return self._model_info

    def load_model(self, config: ModelConfig) -> None:
        if self._recognizer is not None:
            self.unload_model()

        self._status = ModelStatus.LOADING
        model_dir = resolve_model_path(config.model_path)

        if not model_dir.exists():
            self._status = ModelStatus.ERROR
            raise ModelNotFoundError(str(model_dir))

        model_type = detect_model_type(model_dir)
        if model_type is None:
            self._status = ModelStatus.ERROR
            raise ModelLoadError(
                f"Failed to load model: no Whisper or transducer files in {model_dir}"
            )

        logger.info(f"Loading model '{config.model_name}' ({model_type}) from {model_dir}")

        try:
            import sherpa_onnx

            if model_type == WHISPER:
                recognizer = self._create_whisper(sherpa_onnx, model_dir, config.language)
            else:
                recognizer = self._create_transducer(sherpa_onnx, model_dir)
        except MemoryError as e:
            self._status = ModelStatus.ERROR
            raise OutOfMemoryError() from e
        except Exception as e:
            self._status = ModelStatus.ERROR
            message = str(e)
            if any(marker in message.lower() for marker in _OOM_MARKERS):
                raise OutOfMemoryError() from e
            raise ModelLoadError(f"Failed to load model: {message}") from e

        self._recognizer = recognizer
        self._model_type = model_type
        self._model_info = ModelInfo(
            name=config.model_name, path=str(model_dir), engine_type=self.engine_type
        )
        self._status = ModelStatus.READY
        logger.info(f"Model '{config.model_name}' ready")

    def _create_whisper(self, sherpa_onnx, model_dir: Path, language: Optional[str]):
        files = find_whisper_files(model_dir)
        return sherpa_onnx.OfflineRecognizer.from_whisper(
            encoder=str(files["encoder"]),
            decoder=str(files["decoder"]),
            tokens=str(files["tokens"]),
            language=language or "",
            task="transcribe",
            num_threads=self._num_threads,
            provider="cpu",
            debug=False,
            decoding_method="greedy_search",
        )

    def _create_transducer(self, sherpa_onnx, model_dir: Path):
        files = find_transducer_files(model_dir)
        return sherpa_onnx.OfflineRecognizer.from_transducer(
            encoder=str(files["encoder"]),
            decoder=str(files["decoder"]),
            joiner=str(files["joiner"]),
            tokens=str(files["tokens"]),
            num_threads=self._num_threads,
            provider="cpu",
            debug=False,
            decoding_method="greedy_search",
            model_type="nemo_transducer",
        )

    def unload_model(self) -> None:
        if self._recognizer is not None:
            logger.info(f"Unloading model '{self._model_info.name if self._model_info else ''}'")
            del self._recognizer
            self._recognizer = None
        self._model_info = None
        self._model_type = None
        self._status = ModelStatus.STOPPED

    def transcribe(self, audio_data: bytes, language: Optional[str] = None) -> str:
        if self._recognizer is None:
            raise NoModelLoadedError()
        if self._status != ModelStatus.READY:
            raise ModelNotReadyError()

        try:
            samples, sample_rate = decode_wav(audio_data)
        except AudioFormatError as e:
            raise InvalidAudioFormatError(str(e)) from e

        audio = resample(to_mono(samples), sample_rate, ENGINE_SAMPLE_RATE)
        if audio.size == 0:
            return ""

        try:
            segments = self._decode_segments(audio)
        except Exception as e:
            raise TranscriptionFailedError(f"Transcription failed: {e}") from e

        return " ".join(segments)

    def _decode_segments(self, audio: np.ndarray) -> List[str]:
        chunk = ENGINE_CHUNK_SECONDS * ENGINE_SAMPLE_RATE
        streams = []
        for start in range(0, audio.size, chunk):
            stream = self._recognizer.create_stream()
            stream.accept_waveform(ENGINE_SAMPLE_RATE, audio[start : start + chunk])
            streams.append(stream)

        self._recognizer.decode_streams(streams)

        texts = (stream.result.text.strip() for stream in streams)
        return [text for text in texts if text]
