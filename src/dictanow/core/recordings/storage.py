"""
On-disk layout of recordings.

Each recording lives in ``<recordings dir>/<timestamp ms>/`` holding
``audio.wav`` and ``meta.json``. The folder is created empty when recording
starts and is deleted whenever the recording is discarded or fails.
"""

import shutil
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ...utils.logger import get_logger
from ..errors import StorageError
from ..settings import get_data_dir
from .metadata import RecordingMetadata

logger = get_logger(__name__)

AUDIO_FILE_NAME = "audio.wav"
METADATA_FILE_NAME = "meta.json"


def get_recordings_dir() -> Path:
    path = get_data_dir() / "recordings"
    path.mkdir(parents=True, exist_ok=True)
    return path


class RecordingStorage:

    def __init__(self, root: Optional[Path] = None):
        self._root = Path(root) if root is not None else get_recordings_dir()

    @property
    def root(self) -> Path:
        return self._root

    def recording_folder(self, timestamp: int) -> Path:
        return self._root / str(timestamp)

    def create_recording_folder(self, timestamp: int) -> Path:
        folder = self.recording_folder(timestamp)
        try:
            folder.mkdir(parents=True, exist_ok=False)
            (folder / METADATA_FILE_NAME).touch()
        except OSError as e:
            raise StorageError(f"Failed to create recording folder: {e}") from e
        logger.debug(f"Created recording folder {folder}")
        return folder

    def save_audio_file(self, timestamp: int, audio_data: bytes) -> Path:
        path = self.recording_folder(timestamp) / AUDIO_FILE_NAME
        try:
            path.write_bytes(audio_data)
        except OSError as e:
            raise StorageError(f"Failed to save audio file: {e}") from e
        return path

    def save_metadata(self, timestamp: int, metadata: RecordingMetadata) -> Path:
        folder = self.recording_folder(timestamp)
        if not folder.is_dir():
            raise StorageError(f"Recording folder not found: {folder}")

        path = folder / METADATA_FILE_NAME
        try:
            path.write_text(metadata.to_json(), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to save metadata: {e}") from e
        return path

    def read_metadata(self, timestamp: int) -> Optional[RecordingMetadata]:
        path = self.recording_folder(timestamp) / METADATA_FILE_NAME
        try:
            content = path.read_text(encoding="utf-8")
        except OSError:
            return None
        if not content.strip():
            return None
        try:
            return RecordingMetadata.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Invalid metadata in {path}: {e}")
            return None

    def get_all_recordings(self) -> List[int]:
        """Timestamps of all recordings, newest first."""
        if not self._root.is_dir():
            return []
        timestamps = [
            int(entry.name)
            for entry in self._root.iterdir()
            if entry.is_dir() and entry.name.isdigit()
        ]
        return sorted(timestamps, reverse=True)

    def get_all_transcriptions(self) -> List[tuple]:
        """``(timestamp, metadata)`` pairs for finished recordings, newest first."""
        result = []
        for timestamp in self.get_all_recordings():
            metadata = self.read_metadata(timestamp)
            if metadata is not None:
                result.append((timestamp, metadata))
        return result

    def delete_recording(self, timestamp: int) -> None:
        folder = self.recording_folder(timestamp)
        if not folder.exists():
            raise StorageError(f"Recording {timestamp} not found")
        self.remove_recording_folder(folder)

    def remove_recording_folder(self, folder: Optional[Path]) -> None:
        if folder is None or not folder.exists():
            return
        try:
            shutil.rmtree(folder)
        except OSError as e:
            raise StorageError(f"Failed to remove {folder}: {e}") from e
        logger.debug(f"Removed recording folder {folder}")
