"""
End-to-end tests for the recording commands.

A fake recorder stands in for the microphone: it writes a prepared WAV file
when stopped. Everything downstream (state machine, orchestrator, storage) is
real.
"""

import asyncio
import json
import threading
from types import SimpleNamespace

import pytest

from conftest import FakeEngine, RecordingEvents, RecordingNotifier, RecordingTextOutput, DictSecretStore
from dictanow.core.asr import LocalModelManager
from dictanow.core.asr.engines import TranscriptionFailedError
from dictanow.core.errors import DeviceNotFoundError, StreamError, WriterError
from dictanow.core.recording import (
    RecordingController,
    RecordingState,
    RecordingStateManager,
    check_model_available,
)
from dictanow.core.settings import AIProcessingSettings, ModelEntry, Settings, TranscriptionSettings
from dictanow.core.transcription import TranscriptionOrchestrator
from dictanow.utils.platform import FocusedApp


class FakeRecorder:
    """Writes ``audio`` on stop. ``gate`` holds start until it is set."""

    def __init__(self, audio: bytes, start_error=None, stop_error=None, gate=None):
        self.audio = audio
        self.start_error = start_error
        self.stop_error = stop_error
        self.gate = gate
        self.entered = threading.Event()
        self.require_folder = True
        self.is_recording = False
        self.path = None

    def start_recording(self, output_path, device_name=None):
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.start_error is not None:
            raise self.start_error
        if self.require_folder and not output_path.parent.exists():
            raise WriterError(f"Failed to create WAV file: {output_path} has no folder")
        self.path = output_path
        self.is_recording = True
        return SimpleNamespace(name=device_name or "Built-in Mic")

    def stop_recording(self):
        self.is_recording = False
        if self.stop_error is not None:
            raise self.stop_error
        if self.path.parent.exists():
            self.path.write_bytes(self.audio)
        return self.path


def build(settings, storage, audio, engine=None, start_error=None, stop_error=None, gate=None):
    state = RecordingStateManager()
    events = RecordingEvents()
    notifier = RecordingNotifier()
    text_output = RecordingTextOutput()
    engine = engine or FakeEngine(text="dictated words")
    recorder = FakeRecorder(audio, start_error, stop_error, gate)
    orchestrator = TranscriptionOrchestrator(
        storage=storage,
        model_manager=LocalModelManager([engine]),
        remote_providers={},
        secret_store=DictSecretStore(),
        text_output=text_output,
        event_sink=events,
        notifier=notifier,
        focused_app_provider=lambda: FocusedApp("Notes"),
        settings_provider=lambda: settings,
    )
    controller = RecordingController(
        state_manager=state,
        recorder=recorder,
        orchestrator=orchestrator,
        storage=storage,
        event_sink=events,
        settings_provider=lambda: settings,
    )
    return SimpleNamespace(controller=controller, state=state, events=events, notifier=notifier,
                           text_output=text_output, recorder=recorder, engine=engine)


def state_events(events):
    return [p["state"] for name, p in events.events if name == "recording-state-changed"]


class TestHappyPath:

    def test_record_transcribe_deliver(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)

        async def scenario():
            started = await env.controller.start_recording()
            stopped = await env.controller.stop_recording()
            record = await env.controller.wait_for_transcription()
            return started, stopped, record

        started, stopped, record = asyncio.run(scenario())

        assert started.success and started.state is RecordingState.RECORDING
        assert stopped.success and stopped.state is RecordingState.STOPPING
        assert record.text == "dictated words"
        assert env.state.get_state() is RecordingState.IDLE
        assert env.state.get_current_file() is None
        assert env.text_output.pasted == ["dictated words"]
        assert state_events(env.events) == [
            "starting", "recording", "stopping", "transcribing", "idle",
        ]

        [timestamp] = storage.get_all_recordings()
        assert storage.read_metadata(timestamp).recording_device == "Built-in Mic"
        assert record.id == str(timestamp)

    def test_stop_returns_before_transcription(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)

        async def scenario():
            await env.controller.start_recording()
            await env.controller.stop_recording()
            mid_state = env.state.get_state()
            await env.controller.wait_for_transcription()
            return mid_state

        assert asyncio.run(scenario()) is RecordingState.STOPPING


class TestDiscardAndFailure:

    def test_silence_returns_to_idle_and_deletes(self, settings, storage, silent_wav):
        env = build(settings, storage, silent_wav)

        async def scenario():
            await env.controller.start_recording()
            await env.controller.stop_recording()
            return await env.controller.wait_for_transcription()

        assert asyncio.run(scenario()) is None
        assert env.state.get_state() is RecordingState.IDLE
        assert storage.get_all_recordings() == []
        assert env.text_output.pasted == []

    def test_engine_failure_goes_to_error(self, settings, storage, speech_wav):
        engine = FakeEngine(transcribe_error=TranscriptionFailedError("decoder crashed"))
        env = build(settings, storage, speech_wav, engine=engine)

        async def scenario():
            await env.controller.start_recording()
            await env.controller.stop_recording()
            return await env.controller.wait_for_transcription()

        assert asyncio.run(scenario()) is None
        assert env.state.get_state() is RecordingState.ERROR
        assert env.state.get_error() == "Transcription failed: decoder crashed"
        assert storage.get_all_recordings() == []

        response = env.controller.get_recording_state()
        assert response.state is RecordingState.ERROR
        assert response.error == "Transcription failed: decoder crashed"

        acknowledged = env.controller.acknowledge_error()
        assert acknowledged.state is RecordingState.IDLE
        assert acknowledged.error is None

    def test_device_failure_on_start(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav, start_error=DeviceNotFoundError("USB Mic"))

        response = asyncio.run(env.controller.start_recording())

        assert response.success is False
        assert response.error == "Device 'USB Mic' not found"
        assert env.state.get_state() is RecordingState.ERROR
        assert storage.get_all_recordings() == []

    def test_start_after_error_acknowledges(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)
        env.state.force_set_state(RecordingState.ERROR)
        env.state.set_error("old failure")

        response = asyncio.run(env.controller.start_recording())

        assert response.success
        assert env.state.get_error() is None


class TestGuards:

    def test_start_while_recording_refused(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)

        async def scenario():
            await env.controller.start_recording()
            return await env.controller.start_recording()

        second = asyncio.run(scenario())

        assert second.success is False
        assert second.error == "Already recording"
        assert second.state is RecordingState.RECORDING
        assert len(storage.get_all_recordings()) == 1

    def test_stop_when_idle(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)
        response = asyncio.run(env.controller.stop_recording())
        assert response.success is False
        assert response.error == "Not recording"

    def test_model_unavailable_blocks_start(self, storage, speech_wav):
        settings = Settings()
        env = build(settings, storage, speech_wav)

        response = asyncio.run(env.controller.start_recording())

        assert response.error == "No speech-to-text model selected in settings"
        assert env.state.get_state() is RecordingState.IDLE
        assert storage.get_all_recordings() == []

    def test_check_model_available(self):
        settings = Settings(
            transcription=TranscriptionSettings(speech_to_text_model_id="tiny"),
            models=[ModelEntry(id="tiny", provider="local-whisper", downloaded=False)],
        )
        assert "not downloaded" in check_model_available(settings)
        settings.models[0].downloaded = True
        assert check_model_available(settings) is None


class TestCancel:

    def test_cancel_recording(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)

        async def scenario():
            await env.controller.start_recording()
            return await env.controller.cancel_recording()

        response = asyncio.run(scenario())

        assert response.success and response.state is RecordingState.IDLE
        assert env.recorder.is_recording is False
        assert storage.get_all_recordings() == []
        assert env.text_output.pasted == []
        assert env.engine.calls == []
        assert env.state.get_current_file() is None

    def test_cancel_when_idle(self, settings, storage, speech_wav):
        env = build(settings, storage, speech_wav)
        response = asyncio.run(env.controller.cancel_recording())
        assert response.success is False
        assert response.error == "Not in a cancellable state"

    @pytest.mark.parametrize("device_opens", [False, True])
    def test_cancel_while_device_opening(self, settings, storage, speech_wav, device_opens):
        """Cancel during Starting wins whether or not the device open succeeds afterwards."""
        gate = threading.Event()
        env = build(settings, storage, speech_wav, gate=gate)
        env.recorder.require_folder = not device_opens

        async def scenario():
            start = asyncio.create_task(env.controller.start_recording())
            await asyncio.to_thread(env.recorder.entered.wait, 5)
            starting = env.state.get_state()
            cancelled = await env.controller.cancel_recording()
            gate.set()
            return starting, cancelled, await start

        starting, cancelled, started = asyncio.run(scenario())

        assert starting is RecordingState.STARTING
        assert cancelled.success and cancelled.state is RecordingState.IDLE
        assert started.success is False
        assert started.error == "Recording cancelled"
        assert env.state.get_state() is RecordingState.IDLE
        assert env.state.get_error() is None
        assert env.state.get_current_file() is None
        assert env.recorder.is_recording is False
        assert storage.get_all_recordings() == []
        assert env.engine.calls == []


class TestCaptureFailureOnStop:

    @pytest.mark.parametrize("error", [
        StreamError("Failed to stop input stream: device unplugged"),
        RuntimeError("driver crashed"),
    ])
    def test_stop_failure_recovers(self, settings, storage, speech_wav, error):
        env = build(settings, storage, speech_wav, stop_error=error)

        async def scenario():
            await env.controller.start_recording()
            stopped = await env.controller.stop_recording()
            env.recorder.stop_error = None
            restarted = await env.controller.start_recording()
            return stopped, restarted

        stopped, restarted = asyncio.run(scenario())

        assert stopped.success is False
        assert stopped.state is RecordingState.ERROR
        assert stopped.error == str(error)
        assert env.engine.calls == []
        assert restarted.success and restarted.state is RecordingState.RECORDING
        assert len(storage.get_all_recordings()) == 1


class TestPostProcessingWithoutModel:

    def test_raw_text_kept_and_user_notified(self, settings, storage, speech_wav):
        settings.ai_processing = AIProcessingSettings(enabled=True)
        env = build(settings, storage, speech_wav)

        async def scenario():
            await env.controller.start_recording()
            await env.controller.stop_recording()
            return await env.controller.wait_for_transcription()

        record = asyncio.run(scenario())

        assert record.text == "dictated words"
        assert env.state.get_state() is RecordingState.IDLE
        assert env.state.get_error() is None
        assert env.notifier.notifications == [(
            "Post-processing Skipped",
            "No post-processing model selected. Go to Models to select one.",
        )]
        [timestamp] = storage.get_all_recordings()
        meta = json.loads((storage.recording_folder(timestamp) / "meta.json").read_text())
        assert meta["result"] == meta["rawResult"] == "dictated words"
        assert env.text_output.pasted == ["dictated words"]
