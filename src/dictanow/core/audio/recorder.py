"""
Real-time microphone capture.

Audio is streamed straight to a 16-bit mono WAV file from the PortAudio
callback. The callback runs on the audio thread and must never block: it
only folds, scales and writes the block, accumulates level statistics and
emits a throttled level event.
"""

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import sounddevice as sd
import soundfile as sf

from ...config import LEVEL_EMIT_INTERVAL, MAX_CAPTURE_CHANNELS
from ...utils.logger import get_logger
from ..errors import (
    AlreadyRecordingError,
    DeviceNotFoundError,
    NoInputDeviceError,
    NotRecordingError,
    StreamError,
    WriterError,
)

logger = get_logger(__name__)


@dataclass
class AudioDevice:
    name: str
    index: int
    channels: int
    default_sample_rate: float


@dataclass
class AudioLevel:
    rms: float
    peak: float
    level: float  # 0-100 meter scale


class AudioRecorder:

    def __init__(
        self,
        on_audio_level: Optional[Callable[[AudioLevel], None]] = None,
        level_interval: float = LEVEL_EMIT_INTERVAL,
    ):
        self.on_audio_level = on_audio_level
        self.level_interval = level_interval

        self._stream: Optional[sd.InputStream] = None
        self._writer: Optional[sf.SoundFile] = None
        self._writer_lock = threading.Lock()
        self._is_recording = False

        self._output_path: Optional[Path] = None
        self._device: Optional[AudioDevice] = None
        self._sample_rate: Optional[int] = None
        self._frames_written = 0

        self._sum_squares = 0.0
        self._level_samples = 0
        self._level_peak = 0.0
        self._last_level_emit = 0.0

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def sample_rate(self) -> Optional[int]:
        return self._sample_rate

    @property
    def frames_written(self) -> int:
        return self._frames_written

    def start_recording(
        self, output_path: Path, device_name: Optional[str] = None
    ) -> AudioDevice:
        """Open the device at its native format and start writing ``output_path``.

        Returns the device actually opened. On failure nothing is left open;
        removing the partially created file is the caller's job.
        """
        if self._is_recording:
            raise AlreadyRecordingError()

        device = self._resolve_device(device_name)
        sample_rate = int(device.default_sample_rate)
        channels = max(1, min(device.channels, MAX_CAPTURE_CHANNELS))

        try:
            writer = sf.SoundFile(
                str(output_path),
                mode="w",
                samplerate=sample_rate,
                channels=1,
                format="WAV",
                subtype="PCM_16",
            )
        except (RuntimeError, OSError) as e:
            raise WriterError(f"Failed to create WAV file: {e}") from e

        self._reset_counters()
        with self._writer_lock:
            self._writer = writer

        try:
            stream = sd.InputStream(
                samplerate=sample_rate,
                channels=channels,
                device=device.index,
                dtype="float32",
                callback=self._audio_callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            self._close_writer()
            raise StreamError(f"Failed to build input stream: {e}") from e

        self._stream = stream
        self._output_path = Path(output_path)
        self._device = device
        self._sample_rate = sample_rate

        # Armed before the stream starts so the first callback block is kept.
        self._is_recording = True
        try:
            stream.start()
        except sd.PortAudioError as e:
            self._is_recording = False
            self._stream = None
            stream.close()
            self._close_writer()
            raise StreamError(f"Failed to start input stream: {e}") from e

        logger.info(
            f"Recording from '{device.name}' at {sample_rate} Hz, "
            f"{channels} channel(s) -> {output_path}"
        )
        return device

    def stop_recording(self) -> Path:
        """Stop capture and finalize the WAV file. Returns its path."""
        if not self._is_recording:
            raise NotRecordingError()

        self._is_recording = False

        stream = self._stream
        self._stream = None
        try:
            if stream is not None:
                try:
                    stream.stop()
                finally:
                    stream.close()
        except sd.PortAudioError as e:
            logger.error(f"Failed to stop input stream: {e}")
            raise StreamError(f"Failed to stop input stream: {e}") from e
        finally:
            self._close_writer()

        duration = self._frames_written / self._sample_rate if self._sample_rate else 0
        logger.info(
            f"Recording stopped: {self._frames_written} frames ({duration:.2f}s)"
        )
        return self._output_path

    def _audio_callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if not self._is_recording:
            return

        mono = indata.mean(axis=1) if indata.ndim > 1 else indata
        pcm = (np.clip(mono, -1.0, 1.0) * 32767).astype(np.int16)

        with self._writer_lock:
            if self._writer is None:
                return
            self._writer.write(pcm)
        self._frames_written += len(pcm)

        if self.on_audio_level is None or mono.size == 0:
            return

        self._sum_squares += float(np.dot(mono, mono))
        self._level_samples += mono.size
        self._level_peak = max(self._level_peak, float(np.max(np.abs(mono))))

        now = time.monotonic()
        if now - self._last_level_emit < self.level_interval:
            return

        rms = float(np.sqrt(self._sum_squares / self._level_samples))
        level = AudioLevel(
            rms=rms, peak=self._level_peak, level=min(rms * 100.0, 100.0)
        )
        self._last_level_emit = now
        self._sum_squares = 0.0
        self._level_samples = 0
        self._level_peak = 0.0
        self.on_audio_level(level)

    def _close_writer(self) -> None:
        with self._writer_lock:
            writer = self._writer
            self._writer = None
        if writer is not None:
            writer.close()

    def _reset_counters(self) -> None:
        self._frames_written = 0
        self._sum_squares = 0.0
        self._level_samples = 0
        self._level_peak = 0.0
        self._last_level_emit = 0.0

    def _resolve_device(self, device_name: Optional[str]) -> AudioDevice:
        devices = self.list_devices()

        if device_name:
            for device in devices:
                if device.name == device_name:
                    return device
            raise DeviceNotFoundError(device_name)

        if not devices:
            raise NoInputDeviceError()

        try:
            default = sd.query_devices(kind="input")
        except (sd.PortAudioError, ValueError) as e:
            raise NoInputDeviceError() from e

        for device in devices:
            if device.name == default["name"]:
                return device
        return devices[0]

    @staticmethod
    def list_devices() -> List[AudioDevice]:
        devices = []

        for i, device in enumerate(sd.query_devices()):
            if device["max_input_channels"] > 0:
                devices.append(
                    AudioDevice(
                        name=device["name"],
                        index=i,
                        channels=device["max_input_channels"],
                        default_sample_rate=device["default_samplerate"],
                    )
                )

        return devices
