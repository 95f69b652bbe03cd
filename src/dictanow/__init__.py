# DictaNow - Dictation Recording & Transcription

"""
Push-to-talk dictation pipeline: capture microphone audio, transcribe it with a
local sherpa-onnx model or a remote speech API, optionally rewrite it with an
LLM, and paste the result into the focused application.
"""

__version__ = "0.1.0"
__app_name__ = "DictaNow"
