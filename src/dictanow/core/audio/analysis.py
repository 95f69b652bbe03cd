"""WAV decoding and signal helpers shared by the engines and the orchestrator."""

import io
from math import gcd
from typing import Tuple

import numpy as np
import soundfile as sf
from scipy import signal

from ...config import SILENCE_PEAK_THRESHOLD, SILENCE_RMS_THRESHOLD
from ..errors import AudioFormatError

SUPPORTED_SUBTYPES = ("PCM_16", "FLOAT")


def decode_wav(audio_data: bytes) -> Tuple[np.ndarray, int]:
    """Decode WAV bytes into float32 samples shaped ``(frames, channels)``.

    Only 16-bit integer PCM and 32-bit float WAV are accepted; integer samples
    are scaled into [-1, 1].
    """
    try:
        with sf.SoundFile(io.BytesIO(audio_data)) as f:
            if f.format != "WAV":
                raise AudioFormatError(f"Unsupported container: {f.format}")
            if f.subtype not in SUPPORTED_SUBTYPES:
                raise AudioFormatError(f"Unsupported WAV sample format: {f.subtype}")
            samples = f.read(dtype="float32", always_2d=True)
            return samples, f.samplerate
    except (RuntimeError, TypeError) as e:
        raise AudioFormatError(f"Invalid WAV data: {e}") from e


def to_mono(samples: np.ndarray) -> np.ndarray:
    if samples.ndim == 1:
        return samples.astype(np.float32, copy=False)
    if samples.shape[1] == 1:
        return samples[:, 0].astype(np.float32, copy=False)
    return samples.mean(axis=1).astype(np.float32)


def resample(samples: np.ndarray, orig_rate: int, target_rate: int) -> np.ndarray:
    """Band-limited rate conversion via a Kaiser-windowed polyphase FIR."""
    if orig_rate == target_rate or samples.size == 0:
        return samples.astype(np.float32, copy=False)

    divisor = gcd(int(orig_rate), int(target_rate))
    up = int(target_rate) // divisor
    down = int(orig_rate) // divisor
    return signal.resample_poly(samples, up, down).astype(np.float32)


def compute_levels(samples: np.ndarray) -> Tuple[float, float]:
    """Return ``(rms, peak)`` of a mono signal; zero for empty input."""
    if samples.size == 0:
        return 0.0, 0.0
    as_float = samples.astype(np.float64)
    rms = float(np.sqrt(np.mean(as_float * as_float)))
    peak = float(np.max(np.abs(as_float)))
    return rms, peak


def is_silent(
    samples: np.ndarray,
    rms_threshold: float = SILENCE_RMS_THRESHOLD,
    peak_threshold: float = SILENCE_PEAK_THRESHOLD,
) -> bool:
    if samples.size == 0:
        return True
    rms, peak = compute_levels(samples)
    return rms < rms_threshold and peak < peak_threshold


def is_silent_wav(audio_data: bytes) -> bool:
    if not audio_data:
        return True
    samples, _ = decode_wav(audio_data)
    return is_silent(to_mono(samples))
