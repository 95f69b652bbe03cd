"""Narrow interfaces to the collaborators the pipeline depends on."""

from typing import TYPE_CHECKING, Any, Optional, Protocol

from ..utils.platform import FocusedApp

if TYPE_CHECKING:
    from .transcript_processor.llm_processor import PostProcessingRequest
    from .transcription.providers.base import TranscriptionResponse


class FocusedAppProvider(Protocol):
    def __call__(self) -> FocusedApp:
        ...


class TextOutput(Protocol):
    def copy_and_paste(self, text: str) -> None:
        ...

    def copy(self, text: str) -> None:
        ...


class SecretStore(Protocol):
    def get_api_key(self, key_id: str, provider: Optional[str] = None) -> Optional[str]:
        ...


class EventSink(Protocol):
    def emit(self, event: str, payload: Any = None) -> None:
        ...


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None:
        ...


class PostProcessor(Protocol):
    def process(self, request: "PostProcessingRequest") -> str:
        ...


class RemoteTranscriptionClient(Protocol):
    display_name: str

    def transcribe(
        self,
        audio_data: bytes,
        api_key: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ) -> "TranscriptionResponse":
        ...
