"""Exception hierarchy shared across the pipeline.

Every error carries a user-facing message in ``str(error)``; the recording
controller stores that message as the session error.
"""


class DictaNowError(Exception):
    pass


class ConfigurationError(DictaNowError):
    """Settings do not describe a usable model, provider or credential."""


class StorageError(DictaNowError):
    pass


class ProviderError(DictaNowError):
    """A remote transcription service rejected or failed a request."""


class PostProcessingError(DictaNowError):
    pass


class DeliveryError(DictaNowError):
    """Clipboard or paste simulation failed."""


class AudioFormatError(DictaNowError):
    pass


class InvalidTransitionError(DictaNowError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid state transition: {_state_name(current)} -> {_state_name(target)}"
        )


def _state_name(state) -> str:
    name = getattr(state, "name", str(state))
    return name.capitalize()


class CaptureError(DictaNowError):
    """Microphone capture could not start or stop."""


class NoInputDeviceError(CaptureError):
    def __init__(self, message: str = "No input device available"):
        super().__init__(message)


class DeviceNotFoundError(CaptureError):
    def __init__(self, device_name: str):
        self.device_name = device_name
        super().__init__(f"Device '{device_name}' not found")


class StreamError(CaptureError):
    pass


class WriterError(CaptureError):
    pass


class AlreadyRecordingError(CaptureError):
    def __init__(self):
        super().__init__("Already recording")


class NotRecordingError(CaptureError):
    def __init__(self):
        super().__init__("Not recording")
