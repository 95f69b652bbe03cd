"""Locating sherpa-onnx model files on disk."""

from pathlib import Path
from typing import Dict, Iterable, Optional

import platformdirs

WHISPER = "whisper"
TRANSDUCER = "transducer"


def get_models_dir() -> Path:
    return platformdirs.user_data_path("dictanow", appauthor=False) / "models"


def find_file_by_suffix(directory: Path, *suffixes: str) -> Optional[Path]:
    try:
        entries = sorted(Path(directory).iterdir())
    except OSError:
        return None
    for entry in entries:
        if entry.is_file() and entry.name.endswith(suffixes):
            return entry
    return None


def find_file_exact(directory: Path, candidates: Iterable[str]) -> Optional[Path]:
    for name in candidates:
        path = Path(directory) / name
        if path.is_file():
            return path
    return None


def find_whisper_files(model_dir: Path) -> Dict[str, Optional[Path]]:
    return {
        "encoder": find_file_by_suffix(model_dir, "-encoder.onnx", "-encoder.int8.onnx"),
        "decoder": find_file_by_suffix(model_dir, "-decoder.onnx", "-decoder.int8.onnx"),
        "tokens": find_file_by_suffix(model_dir, "-tokens.txt", "tokens.txt"),
    }


def find_transducer_files(model_dir: Path) -> Dict[str, Optional[Path]]:
    files = {}
    for part in ("encoder", "decoder", "joiner"):
        files[part] = find_file_exact(
            model_dir, [f"{part}.onnx", f"{part}.int8.onnx", f"{part}.fp16.onnx"]
        )
    files["tokens"] = find_file_exact(model_dir, ["tokens.txt"])
    return files


def detect_model_type(model_dir: Path) -> Optional[str]:
    """Classify a model directory as ``whisper`` or ``transducer`` by its files."""
    if all(find_whisper_files(model_dir).values()):
        return WHISPER
    if all(find_transducer_files(model_dir).values()):
        return TRANSDUCER
    return None


def resolve_model_path(model_path: str) -> Path:
    """Relative paths are taken as directories under the models dir."""
    path = Path(model_path).expanduser()
    if not path.is_absolute():
        path = get_models_dir() / path
    return path
