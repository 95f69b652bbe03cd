"""Tests for the remote transcription providers (HTTP mocked)."""

import base64
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_wav, sine
from dictanow.core.errors import ProviderError
from dictanow.core.transcription.providers import (
    ElevenLabsTranscriptionProvider,
    GoogleTranscriptionProvider,
    OpenAITranscriptionProvider,
    create_default_providers,
)
from dictanow.core.transcription.providers.google import to_language_code


def session_returning(body=None, status=200):
    session = MagicMock()
    response = session.post.return_value
    response.ok = 200 <= status < 300
    response.status_code = status
    response.json.return_value = body or {}
    response.text = "error body"
    return session


class TestOpenAI:

    def test_request_and_segments(self):
        session = session_returning({
            "text": "Hello there.",
            "language": "english",
            "segments": [{"start": 0.0, "end": 1.2, "text": "Hello there."}],
        })
        provider = OpenAITranscriptionProvider(session)

        result = provider.transcribe(b"wav", "sk-test", None, "en")

        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        assert url == "https://api.openai.com/v1/audio/transcriptions"
        assert kwargs["headers"] == {"Authorization": "Bearer sk-test"}
        assert kwargs["data"] == {"model": "whisper-1", "response_format": "verbose_json", "language": "en"}
        assert kwargs["files"]["file"][1] == b"wav"
        assert result.text == "Hello there."
        assert result.segments[0].end == 1.2

    def test_http_error(self):
        provider = OpenAITranscriptionProvider(session_returning(status=401))
        with pytest.raises(ProviderError, match="OpenAI API error \\(401\\)"):
            provider.transcribe(b"wav", "bad")

    def test_network_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")
        provider = OpenAITranscriptionProvider(session)
        with pytest.raises(ProviderError, match="request failed"):
            provider.transcribe(b"wav", "key")


class TestElevenLabs:

    def test_request(self):
        session = session_returning({"text": "hi", "language_code": "en"})
        provider = ElevenLabsTranscriptionProvider(session)

        result = provider.transcribe(b"wav", "xi-key")

        kwargs = session.post.call_args.kwargs
        assert session.post.call_args.args[0] == "https://api.elevenlabs.io/v1/speech-to-text"
        assert kwargs["headers"] == {"xi-api-key": "xi-key"}
        assert kwargs["data"]["model_id"] == "scribe_v1"
        assert result.text == "hi"


class TestGoogle:

    @pytest.mark.parametrize("language,expected", [
        (None, "en-US"),
        ("en", "en-US"),
        ("DE", "de-US"),
        ("pt-BR", "pt-BR"),
    ])
    def test_language_code(self, language, expected):
        assert to_language_code(language) == expected

    def test_request_and_first_alternative(self):
        session = session_returning({
            "results": [
                {"alternatives": [{"transcript": "first"}, {"transcript": "alt"}]},
                {"alternatives": [{"transcript": "second"}]},
            ]
        })
        provider = GoogleTranscriptionProvider(session)

        result = provider.transcribe(make_wav(sine(0.5, 48000), 48000), "g-key", language="en")

        kwargs = session.post.call_args.kwargs
        assert kwargs["params"] == {"key": "g-key"}
        config = kwargs["json"]["config"]
        assert config["encoding"] == "LINEAR16"
        assert config["sampleRateHertz"] == 16000
        assert config["languageCode"] == "en-US"
        assert config["enableAutomaticPunctuation"] is True
        pcm = base64.b64decode(kwargs["json"]["audio"]["content"])
        assert len(pcm) == 8000 * 2
        assert result.text == "first"

    def test_no_results(self):
        provider = GoogleTranscriptionProvider(session_returning({}))
        assert provider.transcribe(make_wav(sine(0.1)), "k").text == ""


def test_default_providers_keyed_by_name():
    providers = create_default_providers(MagicMock())
    assert set(providers) == {"openai", "google", "elevenlabs"}
