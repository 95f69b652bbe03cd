"""
Recording commands.

``start_recording``, ``stop_recording``, ``cancel_recording`` and
``get_recording_state`` drive the state machine, the capture engine and the
orchestrator. Stopping schedules exactly one transcription task on the event
loop and returns immediately; that task is the single place where a failed
transcription is cleaned up.
"""

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ...utils.logger import get_logger
from ..errors import CaptureError, InvalidTransitionError, StorageError
from ..events import RECORDING_STATE_CHANGED
from ..interfaces import EventSink
from ..recordings import AUDIO_FILE_NAME, RecordingStorage
from ..settings import Settings, get_settings
from ..transcription import TranscribeRequest, TranscriptionOrchestrator, TranscriptionRecord
from .state import RecordingState, RecordingStateManager

if TYPE_CHECKING:
    from ..audio.recorder import AudioRecorder

logger = get_logger(__name__)


@dataclass
class RecordingResponse:
    success: bool
    state: RecordingState
    error: Optional[str] = None
    file_path: Optional[str] = None


def _now_ms() -> int:
    return int(time.time() * 1000)


def check_model_available(settings: Settings) -> Optional[str]:
    """Return why recording cannot start, or None if the selected model is usable."""
    model_id = settings.transcription.speech_to_text_model_id
    if not model_id:
        return "No speech-to-text model selected in settings"
    model = settings.get_model(model_id)
    if model is None:
        return f"Model '{model_id}' not found in models store"
    if model.is_local and not model.downloaded:
        return f"Model '{model.name or model.id}' is not downloaded"
    return None


class RecordingController:

    def __init__(
        self,
        state_manager: RecordingStateManager,
        recorder: "AudioRecorder",
        orchestrator: TranscriptionOrchestrator,
        storage: RecordingStorage,
        event_sink: EventSink,
        settings_provider: Callable[[], Settings] = get_settings,
    ):
        self._state = state_manager
        self._recorder = recorder
        self._orchestrator = orchestrator
        self._storage = storage
        self._events = event_sink
        self._settings_provider = settings_provider
        self._command_lock = asyncio.Lock()
        self._transcription_task: Optional[asyncio.Task] = None
        # Set by cancel while a start is still opening the device.
        self._start_cancelled = False

    def _emit_state(self) -> None:
        self._events.emit(
            RECORDING_STATE_CHANGED,
            {"state": self._state.get_state().value, "error": self._state.get_error()},
        )

    def _failure(self, error: str) -> RecordingResponse:
        return RecordingResponse(success=False, state=self._state.get_state(), error=error)

    async def _fail_session(self, message: str, folder: Optional[Path]) -> None:
        self._state.force_set_state(RecordingState.ERROR)
        self._state.set_error(message)
        try:
            await asyncio.to_thread(self._storage.remove_recording_folder, folder)
        except StorageError as e:
            logger.error(f"Cleanup after failure left files behind: {e}")
        self._state.clear_session()
        self._emit_state()

    async def _abandon_cancelled_start(self, folder: Optional[Path]) -> RecordingResponse:
        """Undo a start that a cancel overtook. The state stays where cancel left it."""
        logger.info("Recording cancelled during start")
        if self._recorder.is_recording:
            try:
                await asyncio.to_thread(self._recorder.stop_recording)
            except CaptureError as e:
                logger.warning(f"Error stopping capture after cancel: {e}")
        try:
            await asyncio.to_thread(self._storage.remove_recording_folder, folder)
        except StorageError as e:
            logger.error(f"Cleanup after cancel left files behind: {e}")
        self._state.clear_session()
        self._start_cancelled = False
        return self._failure("Recording cancelled")

    async def start_recording(self) -> RecordingResponse:
        async with self._command_lock:
            if self._state.is_recording() or self._recorder.is_recording:
                return self._failure("Already recording")

            settings = self._settings_provider()
            unavailable = check_model_available(settings)
            if unavailable:
                logger.warning(f"Cannot start recording: {unavailable}")
                return self._failure(unavailable)

            if self._state.get_state() is RecordingState.ERROR:
                self.acknowledge_error()

            try:
                self._state.set_state(RecordingState.STARTING)
            except InvalidTransitionError as e:
                return self._failure(str(e))
            self._start_cancelled = False
            self._emit_state()

            timestamp = _now_ms()
            try:
                folder = await asyncio.to_thread(self._storage.create_recording_folder, timestamp)
            except StorageError as e:
                if self._start_cancelled:
                    return await self._abandon_cancelled_start(None)
                await self._fail_session(str(e), None)
                return self._failure(str(e))

            if self._start_cancelled:
                return await self._abandon_cancelled_start(folder)

            audio_path = folder / AUDIO_FILE_NAME
            device_name = settings.voice_input.microphone_device
            self._state.set_current_file(audio_path)
            self._state.set_start_time(timestamp)
            self._state.set_recording_device(device_name)

            try:
                device = await asyncio.to_thread(
                    self._recorder.start_recording, audio_path, device_name
                )
            except CaptureError as e:
                if self._start_cancelled:
                    logger.info(f"Capture failed after cancel, ignoring: {e}")
                    return await self._abandon_cancelled_start(folder)
                logger.error(f"Failed to start recording: {e}")
                await self._fail_session(str(e), folder)
                return self._failure(str(e))

            try:
                self._state.set_state(RecordingState.RECORDING)
            except InvalidTransitionError:
                # Cancelled while the device was opening.
                return await self._abandon_cancelled_start(folder)

            self._state.set_recording_device(device.name)
            self._emit_state()
            return RecordingResponse(
                success=True, state=RecordingState.RECORDING, file_path=str(audio_path)
            )

    async def stop_recording(self) -> RecordingResponse:
        async with self._command_lock:
            if not self._state.is_recording():
                return self._failure("Not recording")

            self._state.set_state(RecordingState.STOPPING)
            self._emit_state()

            file_path = self._state.get_current_file()
            start_time = self._state.get_start_time()
            device = self._state.get_recording_device()
            stopped_at = _now_ms()

            try:
                await asyncio.to_thread(self._recorder.stop_recording)
            except Exception as e:
                logger.error(f"Failed to stop recording: {e}", exc_info=True)
                await self._fail_session(str(e), file_path.parent if file_path else None)
                return self._failure(str(e))

            duration = (stopped_at - start_time) / 1000 if start_time else None
            self._transcription_task = asyncio.create_task(
                self._run_transcription(file_path, duration, device)
            )
            return RecordingResponse(
                success=True, state=RecordingState.STOPPING, file_path=str(file_path)
            )

    async def _run_transcription(
        self, file_path: Path, duration: Optional[float], device: Optional[str]
    ) -> Optional[TranscriptionRecord]:
        folder = file_path.parent
        try:
            self._state.set_state(RecordingState.TRANSCRIBING)
            self._emit_state()

            audio_data = await asyncio.to_thread(file_path.read_bytes)
            settings = self._settings_provider()
            request = TranscribeRequest(
                audio_data=audio_data,
                timestamp=int(folder.name),
                duration=duration,
                language=settings.transcription.language,
                recording_device=device,
            )
            record = await self._orchestrator.transcribe_and_process(request)
        except Exception as e:
            logger.error(f"Transcription failed: {e}", exc_info=True)
            await self._fail_session(f"Transcription failed: {e}", folder)
            return None

        if self._state.get_state() is not RecordingState.ERROR:
            self._state.force_set_state(RecordingState.IDLE)
            self._state.clear_session()
            self._emit_state()
        return record

    async def wait_for_transcription(self) -> Optional[TranscriptionRecord]:
        task = self._transcription_task
        if task is None:
            return None
        return await task

    async def cancel_recording(self) -> RecordingResponse:
        state = self._state.get_state()
        if state not in (RecordingState.RECORDING, RecordingState.STARTING):
            return self._failure("Not in a cancellable state")

        if state is RecordingState.STARTING:
            self._start_cancelled = True

        file_path = self._state.get_current_file()
        if self._recorder.is_recording:
            try:
                await asyncio.to_thread(self._recorder.stop_recording)
            except CaptureError as e:
                logger.warning(f"Error stopping capture during cancel: {e}")

        if file_path is not None:
            await asyncio.to_thread(self._storage.remove_recording_folder, file_path.parent)

        self._state.clear_session()
        self._state.force_set_state(RecordingState.IDLE)
        self._emit_state()
        logger.info("Recording cancelled")
        return RecordingResponse(success=True, state=RecordingState.IDLE)

    def get_recording_state(self) -> RecordingResponse:
        current_file = self._state.get_current_file()
        return RecordingResponse(
            success=True,
            state=self._state.get_state(),
            error=self._state.get_error(),
            file_path=str(current_file) if current_file else None,
        )

    def acknowledge_error(self) -> RecordingResponse:
        """Leave the Error state. The error stays visible until this is called."""
        if self._state.get_state() is RecordingState.ERROR:
            self._state.set_state(RecordingState.IDLE)
            self._state.set_error(None)
            self._emit_state()
        return self.get_recording_state()
