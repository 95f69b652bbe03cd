"""LLM post-processing of transcripts."""

from .app_categories import AppCategory, categorize_app
from .llm_processor import (
    LLMProcessor,
    PostProcessingRequest,
    PostProcessingResult,
    apply_post_processing,
    build_system_prompt,
    get_model_provider,
)

__all__ = [
    "AppCategory",
    "LLMProcessor",
    "PostProcessingRequest",
    "PostProcessingResult",
    "apply_post_processing",
    "build_system_prompt",
    "categorize_app",
    "get_model_provider",
]
