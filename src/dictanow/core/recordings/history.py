"""Access to the most recent transcript, including the paste-last shortcut."""

import time
from typing import Callable, Optional

from ...config import PASTE_LAST_DEBOUNCE_SECONDS
from ...utils.logger import get_logger
from ..errors import DeliveryError
from .storage import RecordingStorage

logger = get_logger(__name__)


def get_last_transcript(storage: RecordingStorage) -> Optional[str]:
    for timestamp, metadata in storage.get_all_transcriptions():
        if metadata.result:
            return metadata.result
    return None


class LastTranscriptPaster:
    """Pastes the newest transcript, ignoring repeats within the debounce window."""

    def __init__(
        self,
        storage: RecordingStorage,
        text_output,
        debounce: float = PASTE_LAST_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._storage = storage
        self._text_output = text_output
        self._debounce = debounce
        self._clock = clock
        self._last_paste: Optional[float] = None

    def paste_last_transcript(self) -> bool:
        now = self._clock()
        if self._last_paste is not None and now - self._last_paste < self._debounce:
            logger.debug("Paste-last ignored (debounced)")
            return False
        self._last_paste = now

        text = get_last_transcript(self._storage)
        if not text:
            logger.info("No transcript to paste")
            return False

        try:
            self._text_output.copy_and_paste(text)
        except DeliveryError as e:
            logger.error(f"Failed to paste last transcript: {e}")
            return False
        return True
