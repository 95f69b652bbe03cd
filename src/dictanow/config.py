"""
Development configuration.

Edit these settings to configure logging and pipeline tuning.
"""

import logging

# =============================================================================
# DEVELOPMENT SETTINGS - Edit these for local development
# =============================================================================
LOG_LEVEL = "DEBUG"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = True  # Set to True to output logs to terminal
# =============================================================================

# =============================================================================
# AUDIO SETTINGS
# =============================================================================
LEVEL_EMIT_INTERVAL = 0.033  # Seconds between audio-level events (~30 Hz)
ENGINE_SAMPLE_RATE = 16000  # Rate expected by the local speech engines
ENGINE_CHUNK_SECONDS = 30  # Whisper decodes at most 30s per stream
MAX_CAPTURE_CHANNELS = 2  # Anything wider is opened as stereo and folded
# =============================================================================

# =============================================================================
# SILENCE DETECTION
# =============================================================================
SILENCE_RMS_THRESHOLD = 0.01
SILENCE_PEAK_THRESHOLD = 0.02
# =============================================================================

# =============================================================================
# INPUT SETTINGS
# =============================================================================
SHORTCUT_THROTTLE_SECONDS = 0.3
PASTE_LAST_DEBOUNCE_SECONDS = 0.5
# =============================================================================

REMOTE_REQUEST_TIMEOUT = 120  # Seconds


def get_log_level() -> int:
    """Get the logging level as an integer."""
    return getattr(logging, LOG_LEVEL.upper(), logging.INFO)
