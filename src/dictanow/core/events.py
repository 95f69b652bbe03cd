"""Event names and default sinks that forward to the log."""

from typing import Any, Callable, Dict, List

from ..utils.logger import get_logger

logger = get_logger(__name__)

RECORDING_STATE_CHANGED = "recording-state-changed"
AUDIO_LEVEL = "audio-level"
TRANSCRIPTIONS_CHANGED = "transcriptions-changed"


class LoggingEventSink:
    """Logs every event and fans it out to subscribed callbacks."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: Any = None) -> None:
        if event != AUDIO_LEVEL:
            logger.debug(f"Event {event}: {payload}")
        for callback in self._subscribers.get(event, []):
            callback(payload)


class LoggingNotifier:
    def notify(self, title: str, body: str) -> None:
        logger.info(f"[notification] {title}: {body}")
