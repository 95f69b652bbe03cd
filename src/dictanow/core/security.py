"""API key lookup from the environment."""

import os
import re
from typing import Dict, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)

# provider -> environment variable holding its key
PROVIDER_ENV_VARS: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GOOGLE_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
}


def model_env_var(key_id: str) -> str:
    """``whisper-1`` -> ``DICTANOW_API_KEY_WHISPER_1``."""
    return "DICTANOW_API_KEY_" + re.sub(r"[^A-Za-z0-9]+", "_", key_id).upper()


class EnvironmentSecretStore:
    """Reads keys from ``DICTANOW_API_KEY_<ID>`` or the provider's usual variable."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get_api_key(self, key_id: str, provider: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(model_env_var(key_id))
        if value:
            return value

        env_var = PROVIDER_ENV_VARS.get(provider or "")
        if env_var:
            value = self._environ.get(env_var)
            if value:
                return value

        logger.debug(f"No API key configured for '{key_id}' (provider={provider})")
        return None
