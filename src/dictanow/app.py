"""Application runtime."""

import asyncio
import sys
from typing import Awaitable, Callable, Optional, Set

from dictanow import __app_name__, __version__
from dictanow.core.asr import LocalModelManager
from dictanow.core.audio.recorder import AudioLevel, AudioRecorder
from dictanow.core.events import AUDIO_LEVEL, LoggingEventSink, LoggingNotifier
from dictanow.core.input.hotkey import HotkeyListener
from dictanow.core.input.shortcut_handler import RecordingShortcutHandler
from dictanow.core.output.text_output import TextOutputController
from dictanow.core.recording import (
    RecordingController,
    RecordingMode,
    RecordingStateManager,
)
from dictanow.core.recordings import LastTranscriptPaster, RecordingStorage
from dictanow.core.security import EnvironmentSecretStore
from dictanow.core.settings import Settings, get_settings
from dictanow.core.transcript_processor import LLMProcessor
from dictanow.core.transcription import (
    TranscriptionOrchestrator,
    load_selected_local_model,
)
from dictanow.core.transcription.providers import create_default_providers
from dictanow.utils.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


class DictaNowApp:
    """Builds the pipeline once and shares the instances between its parts."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()

        self._events = LoggingEventSink()
        self._notifier = LoggingNotifier()
        self._secret_store = EnvironmentSecretStore()
        self._storage = RecordingStorage()
        self._text_output = TextOutputController()
        self._model_manager = LocalModelManager()

        self._state = RecordingStateManager(
            RecordingMode(self._settings.voice_input.recording_mode)
        )
        self._recorder = AudioRecorder(on_audio_level=self._on_audio_level)
        self._orchestrator = TranscriptionOrchestrator(
            storage=self._storage,
            model_manager=self._model_manager,
            remote_providers=create_default_providers(),
            secret_store=self._secret_store,
            text_output=self._text_output,
            event_sink=self._events,
            notifier=self._notifier,
            post_processor=LLMProcessor(self._secret_store),
            settings_provider=self._get_settings,
        )
        self._controller = RecordingController(
            state_manager=self._state,
            recorder=self._recorder,
            orchestrator=self._orchestrator,
            storage=self._storage,
            event_sink=self._events,
            settings_provider=self._get_settings,
        )
        self._shortcuts = RecordingShortcutHandler(self._controller, self._state)
        self._paster = LastTranscriptPaster(self._storage, self._text_output)

        self._hotkey_listener: Optional[HotkeyListener] = None
        self._paste_last_listener: Optional[HotkeyListener] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: Set[asyncio.Task] = set()

    def _get_settings(self) -> Settings:
        return self._settings

    @property
    def controller(self) -> RecordingController:
        return self._controller

    def _on_audio_level(self, level: AudioLevel) -> None:
        # Audio thread: hop onto the loop without waiting.
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._events.emit, AUDIO_LEVEL, level)

    def _schedule(self, coro_factory: Callable[[], Awaitable]) -> None:
        """Run a coroutine on the app loop from a listener thread."""
        if self._loop is None:
            return

        def _spawn():
            task = asyncio.ensure_future(coro_factory())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        self._loop.call_soon_threadsafe(_spawn)

    def _start_listeners(self) -> None:
        voice_input = self._settings.voice_input

        self._hotkey_listener = HotkeyListener(
            voice_input.hotkey,
            on_pressed=lambda: self._schedule(self._shortcuts.on_pressed),
            on_released=lambda: self._schedule(self._shortcuts.on_released),
        )
        self._hotkey_listener.start()
        logger.info(f"Recording hotkey: {voice_input.hotkey.to_display_string()}")

        if voice_input.paste_last_hotkey is not None:
            self._paste_last_listener = HotkeyListener(
                voice_input.paste_last_hotkey,
                on_pressed=lambda: self._schedule(self._paste_last),
            )
            self._paste_last_listener.start()

    async def _paste_last(self) -> None:
        await asyncio.to_thread(self._paster.paste_last_transcript)

    def _stop_listeners(self) -> None:
        for listener in (self._hotkey_listener, self._paste_last_listener):
            if listener is not None:
                listener.stop()
        self._hotkey_listener = None
        self._paste_last_listener = None

    async def run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()

        logger.info(f"Starting {__app_name__} {__version__}")
        await asyncio.to_thread(load_selected_local_model, self._model_manager, self._settings)

        self._start_listeners()
        try:
            await self._stop_event.wait()
        finally:
            self._stop_listeners()
            if self._state.is_active():
                await self._controller.cancel_recording()
            await self._controller.wait_for_transcription()
            self._model_manager.unload_model()
            logger.info(f"{__app_name__} stopped")

    def request_stop(self) -> None:
        if self._loop is not None and self._stop_event is not None:
            self._loop.call_soon_threadsafe(self._stop_event.set)


def main() -> int:
    app = DictaNowApp()
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        shutdown_logging()
    return 0


if __name__ == "__main__":
    sys.exit(main())
