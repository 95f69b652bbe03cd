"""
Tests for clipboard delivery. The clipboard tool and keyboard are mocked.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("pynput.keyboard", exc_type=ImportError)

from dictanow.core.errors import DeliveryError  # noqa: E402
from dictanow.core.output.text_output import TextOutputController  # noqa: E402


@pytest.fixture
def keyboard():
    return MagicMock()


@pytest.fixture
def output(keyboard):
    with patch("dictanow.core.output.text_output.get_platform", return_value="linux"):
        return TextOutputController(paste_delay=0, keyboard=keyboard)


class TestTextOutput:

    @patch("dictanow.core.output.text_output.subprocess.run")
    def test_copy_uses_xclip(self, mock_run, output):
        output.copy("hello")

        args, kwargs = mock_run.call_args
        assert args[0] == ["xclip", "-selection", "clipboard"]
        assert kwargs["input"] == "hello"

    @patch("dictanow.core.output.text_output.subprocess.run", side_effect=FileNotFoundError("xclip"))
    def test_copy_failure_raises_delivery_error(self, _run, output):
        with pytest.raises(DeliveryError, match="Failed to set clipboard"):
            output.copy("hello")

    @patch("dictanow.core.output.text_output.subprocess.run")
    def test_copy_and_paste_taps_v(self, _run, output, keyboard):
        output.copy_and_paste("hello")
        keyboard.tap.assert_called_once_with("v")

    @patch("dictanow.core.output.text_output.subprocess.run",
           side_effect=subprocess.CalledProcessError(1, "xclip"))
    def test_paste_skipped_when_copy_fails(self, _run, output, keyboard):
        with pytest.raises(DeliveryError):
            output.copy_and_paste("hello")
        keyboard.tap.assert_not_called()

    def test_unsupported_platform(self, keyboard):
        with patch("dictanow.core.output.text_output.get_platform", return_value="plan9"):
            with pytest.raises(DeliveryError, match="unsupported"):
                TextOutputController(keyboard=keyboard)
