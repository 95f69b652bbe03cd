"""
Transcription orchestrator.

Runs one finished recording through the pipeline: silence check, speech
engine, optional LLM rewrite, metadata, delivery. Content outcomes (silence,
empty transcript) return ``None``; failures in model resolution, the speech
engine or metadata persistence propagate to the caller, which owns cleanup.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from ... import __version__
from ...utils.logger import get_logger
from ...utils.platform import UNKNOWN_APP_NAME, FocusedApp, get_focused_app
from ..asr import LocalModelManager, ModelConfig
from ..audio.analysis import is_silent_wav
from ..errors import ConfigurationError, DeliveryError, DictaNowError, StorageError
from ..events import TRANSCRIPTIONS_CHANGED
from ..interfaces import (
    EventSink,
    FocusedAppProvider,
    Notifier,
    PostProcessor,
    RemoteTranscriptionClient,
    SecretStore,
    TextOutput,
)
from ..recordings import (
    ApplicationContext,
    PromptContext,
    RecordingMetadata,
    RecordingStorage,
    SystemContext,
    get_model_name,
)
from ..settings import LOCAL_PROVIDER, ModelEntry, Settings, get_settings
from ..transcript_processor import PostProcessingResult, apply_post_processing, categorize_app
from .providers import TranscriptionResponse

logger = get_logger(__name__)

POST_PROCESSING_SKIPPED_TITLE = "Post-processing Skipped"
NO_POST_PROCESSING_MODEL_BODY = (
    "No post-processing model selected. Go to Models to select one."
)
NO_POST_PROCESSOR_BODY = "Post-processing is unavailable. Using the raw transcript."


@dataclass
class TranscribeRequest:
    audio_data: bytes
    timestamp: int  # ms, also the recording folder name
    duration: Optional[float] = None  # seconds
    language: Optional[str] = None
    recording_device: Optional[str] = None


@dataclass
class TranscriptionRecord:
    id: str
    text: str
    timestamp: int
    duration: Optional[float]
    word_count: int
    model_id: str
    provider: str


class TranscriptionOrchestrator:

    def __init__(
        self,
        storage: RecordingStorage,
        model_manager: LocalModelManager,
        remote_providers: Dict[str, RemoteTranscriptionClient],
        secret_store: SecretStore,
        text_output: TextOutput,
        event_sink: EventSink,
        notifier: Notifier,
        post_processor: Optional[PostProcessor] = None,
        focused_app_provider: FocusedAppProvider = get_focused_app,
        settings_provider: Callable[[], Settings] = get_settings,
    ):
        self._storage = storage
        self._model_manager = model_manager
        self._remote_providers = remote_providers
        self._secret_store = secret_store
        self._text_output = text_output
        self._events = event_sink
        self._notifier = notifier
        self._post_processor = post_processor
        self._focused_app_provider = focused_app_provider
        self._settings_provider = settings_provider

    async def transcribe_and_process(
        self, request: TranscribeRequest
    ) -> Optional[TranscriptionRecord]:
        started = time.monotonic()
        settings = self._settings_provider()
        model = self.resolve_model(settings)
        focused_app = await self._resolve_focused_app()
        folder = self._storage.recording_folder(request.timestamp)
        language = request.language or settings.transcription.language

        if await asyncio.to_thread(is_silent_wav, request.audio_data):
            logger.info(f"Recording {request.timestamp} is silent, discarding")
            await asyncio.to_thread(self._storage.remove_recording_folder, folder)
            return None

        response = await self._transcribe(model, request.audio_data, language)
        raw_text = response.text.strip()
        if not raw_text:
            logger.info(f"Recording {request.timestamp} produced no text, discarding")
            await asyncio.to_thread(self._storage.remove_recording_folder, folder)
            return None

        if not folder.is_dir():
            raise StorageError(f"Recording folder not found: {folder}")

        post = await self._post_process(settings, raw_text, focused_app.name, language)
        final_text = post.text if post else raw_text
        category = categorize_app(focused_app.name).value

        metadata = RecordingMetadata(
            result=final_text,
            raw_result=raw_text,
            post_processed_result=post.text if post else None,
            datetime=datetime.fromtimestamp(
                request.timestamp / 1000, tz=timezone.utc
            ).isoformat(),
            duration=int(request.duration * 1000) if request.duration is not None else None,
            processing_time=int((time.monotonic() - started) * 1000),
            model_key=model.id,
            model_name=model.name or get_model_name(model.id),
            provider=model.provider,
            post_processing_model_id=post.model_id if post else None,
            post_processing_model_name=post.model_name if post else None,
            post_processing_provider=post.provider if post else None,
            language_selected=language,
            recording_device=request.recording_device,
            post_processing_enabled=settings.ai_processing.enabled,
            style_applied=post.style_applied if post else None,
            style_category=post.style_category if post else None,
            focused_app_name=focused_app.name,
            focused_app_category=category,
            prompt_context=post.prompt_context if post else PromptContext(
                system_context=SystemContext(language=language),
                application_context=ApplicationContext(
                    name=focused_app.name, category=category
                ),
            ),
            app_version=__version__,
        )
        await asyncio.to_thread(self._storage.save_metadata, request.timestamp, metadata)

        await self._deliver(settings, final_text)
        self._events.emit(TRANSCRIPTIONS_CHANGED, {"timestamp": request.timestamp})

        logger.info(
            f"Transcribed recording {request.timestamp} with {model.id} "
            f"in {metadata.processing_time} ms"
        )
        return TranscriptionRecord(
            id=str(request.timestamp),
            text=final_text,
            timestamp=request.timestamp,
            duration=request.duration,
            word_count=len(raw_text.split()),
            model_id=model.id,
            provider=model.provider,
        )

    def resolve_model(self, settings: Settings) -> ModelEntry:
        model_id = settings.transcription.speech_to_text_model_id
        if not model_id:
            raise ConfigurationError("No speech-to-text model selected in settings")
        model = settings.get_model(model_id)
        if model is None:
            raise ConfigurationError(f"Model '{model_id}' not found in models store")
        return model

    async def _resolve_focused_app(self) -> FocusedApp:
        try:
            return await asyncio.to_thread(self._focused_app_provider)
        except Exception as e:
            logger.warning(f"Focused app unavailable: {e}")
            return FocusedApp(name=UNKNOWN_APP_NAME)

    async def _transcribe(
        self, model: ModelEntry, audio_data: bytes, language: str
    ) -> TranscriptionResponse:
        if model.provider == LOCAL_PROVIDER:
            text = await asyncio.to_thread(self._transcribe_local, model, audio_data, language)
            return TranscriptionResponse(text=text, language=language)

        provider = self._remote_providers.get(model.provider)
        if provider is None:
            raise ConfigurationError(f"Unsupported provider: {model.provider}")

        api_key = self._secret_store.get_api_key(model.id, model.provider)
        if not api_key:
            raise ConfigurationError(f"{provider.display_name} API key not found")

        return await asyncio.to_thread(
            provider.transcribe, audio_data, api_key, model.api_model, language
        )

    def _transcribe_local(self, model: ModelEntry, audio_data: bytes, language: str) -> str:
        if not model.path:
            raise ConfigurationError(f"Local model '{model.id}' has no path")

        info = self._model_manager.loaded_model_info()
        if info is None or info.name != model.id:
            logger.info(f"Local model '{model.id}' not loaded, loading now")
            self._model_manager.load_model(
                model.engine,
                ModelConfig(model_path=model.path, model_name=model.id, language=language),
            )
        return self._model_manager.transcribe(audio_data, language)

    async def _post_process(
        self, settings: Settings, raw_text: str, app_name: str, language: str
    ) -> Optional[PostProcessingResult]:
        if not settings.ai_processing.enabled:
            return None

        if not settings.ai_processing.post_processing_model_id:
            logger.warning("Post-processing enabled but no model selected, using raw text")
            self._notifier.notify(POST_PROCESSING_SKIPPED_TITLE, NO_POST_PROCESSING_MODEL_BODY)
            return None

        if self._post_processor is None:
            logger.warning("Post-processing enabled but no processor configured")
            self._notifier.notify(POST_PROCESSING_SKIPPED_TITLE, NO_POST_PROCESSOR_BODY)
            return None

        try:
            return await asyncio.to_thread(
                apply_post_processing,
                self._post_processor,
                settings,
                raw_text,
                app_name,
                language,
            )
        except Exception as e:
            logger.warning(f"Post-processing failed, using raw text: {e}", exc_info=True)
            self._notifier.notify(POST_PROCESSING_SKIPPED_TITLE, str(e))
            return None

    async def _deliver(self, settings: Settings, text: str) -> None:
        try:
            if settings.system.auto_paste:
                await asyncio.to_thread(self._text_output.copy_and_paste, text)
            elif settings.system.auto_copy_to_clipboard:
                await asyncio.to_thread(self._text_output.copy, text)
        except DeliveryError as e:
            logger.error(f"Failed to deliver transcript: {e}")


def load_selected_local_model(
    model_manager: LocalModelManager, settings: Settings
) -> bool:
    """Load the selected speech model at startup if it runs locally.

    Returns True when a model was loaded. Failures are logged; the model is
    loaded again on demand at the first transcription.
    """
    model = settings.get_model(settings.transcription.speech_to_text_model_id)
    if model is None or not model.is_local or not model.path:
        return False

    try:
        model_manager.load_model(
            model.engine,
            ModelConfig(
                model_path=model.path,
                model_name=model.id,
                language=settings.transcription.language,
            ),
        )
    except DictaNowError as e:
        logger.error(f"Failed to load local model '{model.id}' at startup: {e}")
        return False
    return True
