from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import requests

from ....config import REMOTE_REQUEST_TIMEOUT
from ....utils.logger import get_logger
from ...errors import ProviderError

logger = get_logger(__name__)


@dataclass
class TranscriptionSegment:
    start: float
    end: float
    text: str


@dataclass
class TranscriptionResponse:
    text: str
    language: Optional[str] = None
    segments: Optional[List[TranscriptionSegment]] = None


class RemoteTranscriptionProvider(ABC):
    """HTTP speech-to-text service. Calls block; run them off the event loop."""

    name: str = ""
    display_name: str = ""
    default_model: Optional[str] = None

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = REMOTE_REQUEST_TIMEOUT):
        self._session = session or requests.Session()
        self._timeout = timeout

    @abstractmethod
    def transcribe(
        self,
        audio_data: bytes,
        api_key: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResponse:
        ...

    def _post(self, url: str, **kwargs) -> dict:
        try:
            response = self._session.post(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise ProviderError(f"{self.display_name} request failed: {e}") from e

        if not response.ok:
            raise ProviderError(
                f"{self.display_name} API error ({response.status_code}): {response.text}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.display_name} returned invalid JSON: {e}") from e
