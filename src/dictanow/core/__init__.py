"""Core pipeline: recording, capture, speech engines, orchestration."""
