"""
Answer capture for MockPrep

The session controller only talks to the ``AnswerCapture`` interface.
Adapters:
- UploadedAnswerCapture: audio recorded by the browser and streamed up in chunks
- TextOnlyAnswerCapture: no recording device, typed answers only
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from uuid import uuid4

from src.core.errors import DeviceUnavailable
from src.models.session import AudioAnswer, TextAnswer

logger = logging.getLogger(__name__)


@dataclass
class CaptureHandle:
    """An open recording."""

    id: str = field(default_factory=lambda: uuid4().hex[:12])
    mime_type: str = "audio/webm"
    chunks: list[bytes] = field(default_factory=list)
    closed: bool = False


class AnswerCapture(ABC):
    """Acquires a spoken or typed answer. At most one handle is open at a time."""

    @abstractmethod
    async def begin_audio_capture(self) -> CaptureHandle:
        """
        Open the recording device.

        Raises:
            DeviceUnavailable: If the device or permission cannot be acquired
        """

    @abstractmethod
    async def end_audio_capture(self, handle: CaptureHandle) -> AudioAnswer:
        """Finalize the recording. The device is released even if this fails."""

    @abstractmethod
    async def abort_audio_capture(self, handle: CaptureHandle) -> None:
        """Release the device and discard whatever was recorded."""

    def submit_text(self, value: str) -> TextAnswer:
        return TextAnswer(text=value)


class UploadedAnswerCapture(AnswerCapture):
    """
    Buffers audio the client records and uploads chunk by chunk.

    The "device" is the upload slot of one session: a second
    ``begin_audio_capture`` while a handle is open is refused.
    """

    def __init__(self, mime_type: str = "audio/webm"):
        self.mime_type = mime_type
        self._active: CaptureHandle | None = None

    @property
    def is_capturing(self) -> bool:
        return self._active is not None

    async def begin_audio_capture(self) -> CaptureHandle:
        if self._active is not None:
            raise DeviceUnavailable("A recording is already in progress")

        self._active = CaptureHandle(mime_type=self.mime_type)
        logger.debug(f"Capture {self._active.id} opened")
        return self._active

    def append_chunk(self, handle: CaptureHandle, data: bytes) -> int:
        """Add recorded bytes; returns the total buffered so far."""
        if handle.closed or handle is not self._active:
            raise DeviceUnavailable("Recording is not open")
        if data:
            handle.chunks.append(data)
        return sum(len(chunk) for chunk in handle.chunks)

    async def end_audio_capture(self, handle: CaptureHandle) -> AudioAnswer:
        try:
            return AudioAnswer(data=b"".join(handle.chunks), mime_type=handle.mime_type)
        finally:
            self._release(handle)

    async def abort_audio_capture(self, handle: CaptureHandle) -> None:
        handle.chunks.clear()
        self._release(handle)

    def _release(self, handle: CaptureHandle) -> None:
        handle.closed = True
        if self._active is handle:
            self._active = None
        logger.debug(f"Capture {handle.id} released")


class TextOnlyAnswerCapture(AnswerCapture):
    """Capture for deployments without audio answers."""

    async def begin_audio_capture(self) -> CaptureHandle:
        raise DeviceUnavailable("Audio answers are disabled")

    async def end_audio_capture(self, handle: CaptureHandle) -> AudioAnswer:
        raise DeviceUnavailable("Audio answers are disabled")

    async def abort_audio_capture(self, handle: CaptureHandle) -> None:
        return None
