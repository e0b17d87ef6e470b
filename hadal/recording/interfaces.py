"""
Platform service interfaces used by the recording controller.

The controller never talks to a microphone or a speech API directly. It is
handed a CaptureDevice and a Transcriber; real adapters live under
`hadal.infrastructure`, fakes under `hadal.testing`.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union


@dataclass(frozen=True)
class TranscriptSegment:
    """A piece of live transcript. Interim segments may be revised later."""
    text: str
    is_final: bool = False
    confidence: Optional[float] = None


class CaptureHandle(ABC):
    """An acquired microphone. Releasing twice is harmless."""

    @abstractmethod
    def chunks(self) -> Iterator[bytes]:
        """Yield PCM16 mono audio chunks until the handle is released."""

    @abstractmethod
    def release(self) -> None:
        """Stop capturing and free the device."""

    @property
    @abstractmethod
    def released(self) -> bool:
        """Whether release() has been called."""


class CaptureDevice(ABC):
    """Source of capture handles."""

    @abstractmethod
    def acquire(self) -> CaptureHandle:
        """
        Acquire the microphone.

        Raises:
            DeviceUnavailable: If permission is denied or no device exists
        """


DrainItem = Union[TranscriptSegment, Exception]


class TranscriptionSubscription(ABC):
    """A running live-transcription stream for one session."""

    @abstractmethod
    def drain(self) -> List[DrainItem]:
        """Return queued segments and errors without blocking."""

    @abstractmethod
    def finish(self, timeout: float) -> None:
        """Signal end of audio and wait up to `timeout` for final results."""

    @abstractmethod
    def close(self) -> None:
        """Abandon the stream; safe to call more than once."""


class Transcriber(ABC):
    """Factory for live transcription streams."""

    @abstractmethod
    def open(self, audio_source: CaptureHandle) -> TranscriptionSubscription:
        """
        Start transcribing audio from `audio_source`.

        Raises:
            TranscriptionUnavailable: If the platform cannot transcribe
        """
