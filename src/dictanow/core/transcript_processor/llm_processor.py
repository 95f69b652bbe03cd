import warnings
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import litellm
from litellm import completion, completion_cost

from ...utils.logger import get_logger
from ..errors import PostProcessingError
from ..interfaces import PostProcessor, SecretStore
from ..recordings.metadata import (
    ApplicationContext,
    PromptContext,
    SnippetInfo,
    SystemContext,
    get_model_name,
)
from ..settings import RAW_VIBE_ID, Settings, Snippet, Vibe
from .app_categories import categorize_app

logger = get_logger(__name__)

BASE_PROMPT = (
    "You are a transcript post-processor. Your job is to enhance the given "
    "transcript while preserving the original meaning and intent."
)

RETURN_ONLY_INSTRUCTION = (
    "IMPORTANT: Return only the enhanced transcript text. Do not include any "
    "explanations, meta-commentary, or wrapper text like 'Here is the enhanced "
    "version:'. Just return the processed transcript directly."
)

USER_MESSAGE_TEMPLATE = "Process this transcript:\n\n{text}"


@dataclass
class PostProcessingRequest:
    text: str
    model_id: str
    vocabulary: List[str] = field(default_factory=list)
    snippets: List[Snippet] = field(default_factory=list)
    vibe_prompt: Optional[str] = None


@dataclass
class PostProcessingResult:
    text: str
    model_id: str
    model_name: str
    provider: str
    prompt_context: PromptContext
    style_applied: Optional[str] = None
    style_category: Optional[str] = None


def get_model_provider(model_id: str) -> str:
    if model_id.startswith("claude-"):
        return "anthropic"
    if model_id.startswith("gpt-"):
        return "openai"
    raise PostProcessingError(
        f"Unable to determine provider from model ID: {model_id}. "
        "Model ID should start with 'claude-' or 'gpt-'."
    )


def build_system_prompt(
    vocabulary: List[str],
    snippets: List[Snippet],
    vibe_prompt: Optional[str] = None,
) -> str:
    sections = [BASE_PROMPT]

    if vocabulary:
        sections.append(
            "VOCABULARY CONTEXT:\n"
            "Ensure these words are properly recognized and capitalized:\n"
            + ", ".join(vocabulary)
        )

    if snippets:
        expansion = "\n".join(f"- '{s.trigger}' → '{s.expansion}'" for s in snippets)
        context = "\n".join(f"- {s.expansion}" for s in snippets)
        sections.append(
            "SNIPPET EXPANSION:\n"
            "If you detect these triggers in the transcript, expand them to their full form:\n"
            f"{expansion}\n\n"
            "SNIPPET CONTEXT:\n"
            "Use these snippets as examples of the user's common phrases and "
            f"communication style:\n{context}"
        )

    if vibe_prompt and vibe_prompt.strip():
        sections.append(f"FORMATTING STYLE:\n{vibe_prompt}")

    sections.append(RETURN_ONLY_INSTRUCTION)
    return "\n\n".join(sections)


def select_vibe(settings: Settings, category: str) -> Optional[Vibe]:
    """The vibe chosen for ``category``, or None for raw transcription."""
    vibe_id = settings.selected_vibes.get(category)
    if not vibe_id or vibe_id == RAW_VIBE_ID:
        return None
    vibe = settings.get_vibe(vibe_id)
    if vibe is None:
        logger.warning(f"Selected vibe '{vibe_id}' for '{category}' does not exist")
    return vibe


class LLMProcessor:
    """Rewrites transcripts through litellm using keys from the secret store."""

    def __init__(self, secret_store: SecretStore):
        self._secret_store = secret_store

    def process(self, request: PostProcessingRequest) -> str:
        provider = get_model_provider(request.model_id)
        api_key = self._secret_store.get_api_key(request.model_id, provider)
        if not api_key:
            raise PostProcessingError(
                "API key not found for selected model. Please add your API key in settings."
            )

        system_prompt = build_system_prompt(
            request.vocabulary, request.snippets, request.vibe_prompt
        )
        user_message = USER_MESSAGE_TEMPLATE.format(text=request.text)

        model_info = litellm.model_cost.get(request.model_id, {})
        if model_info.get("supports_system_messages", True):
            messages = [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ]
        else:
            messages = [{"role": "user", "content": f"{system_prompt}\n\n{user_message}"}]

        logger.info(
            f"Post-processing {len(request.text)} chars with {request.model_id}"
        )

        try:
            response = completion(
                model=f"{provider}/{request.model_id}",
                messages=messages,
                api_key=api_key,
            )
        except Exception as e:
            raise PostProcessingError(f"Post-processing request failed: {e}") from e

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise PostProcessingError("Post-processing returned an empty response")

        self._log_cost(response, len(request.text), len(content))
        return content.strip()

    @staticmethod
    def _log_cost(response, text_len: int, result_len: int) -> None:
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings(
                    "ignore", message="Pydantic serializer warnings", category=UserWarning
                )
                cost = completion_cost(completion_response=response)
        except Exception:
            cost = None

        logger.info(
            f"Post-processing complete: {text_len} -> {result_len} chars, cost=${cost:.6f}"
            if cost
            else f"Post-processing complete: {text_len} -> {result_len} chars"
        )


def apply_post_processing(
    processor: PostProcessor,
    settings: Settings,
    raw_text: str,
    app_name: str,
    language: str = "en",
) -> PostProcessingResult:
    """Rewrite ``raw_text`` with the configured model, vibe and vocabulary.

    Raises:
        PostProcessingError: no model selected, or the model call failed.
    """
    model_id = settings.ai_processing.post_processing_model_id
    if not model_id:
        raise PostProcessingError("No post-processing model selected")

    category = categorize_app(app_name).value
    vibe = select_vibe(settings, category)
    vibe_prompt = vibe.prompt if vibe else None

    prompt_context = PromptContext(
        vocabulary_used=list(settings.vocabulary),
        snippets_used=[
            SnippetInfo(trigger=s.trigger, expansion=s.expansion) for s in settings.snippets
        ],
        vibe_prompt=vibe_prompt,
        system_context=SystemContext(
            language=language,
            time=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        ),
        application_context=ApplicationContext(name=app_name, category=category),
    )

    text = processor.process(
        PostProcessingRequest(
            text=raw_text,
            model_id=model_id,
            vocabulary=list(settings.vocabulary),
            snippets=list(settings.snippets),
            vibe_prompt=vibe_prompt,
        )
    )

    return PostProcessingResult(
        text=text,
        model_id=model_id,
        model_name=get_model_name(model_id),
        provider=get_model_provider(model_id),
        prompt_context=prompt_context,
        style_applied=vibe.name if vibe else None,
        style_category=category,
    )
