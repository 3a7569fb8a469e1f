"""Narration decoding and playback.

The speech model returns little-endian 16-bit signed mono PCM at 24 kHz,
base64 encoded. It is decoded into a float32 waveform in [-1, 1) and handed
to an :class:`AudioOutput`. Only one narration should be audible at a time;
:class:`PlaybackSlot` holds the current handle and stops the previous one
when a new one is acquired.
"""

import asyncio
import base64
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000
PCM_SCALE = 32768.0


@dataclass
class AudioBuffer:
    """A mono float32 waveform ready for playback."""

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate


def decode_pcm16(data: bytes) -> np.ndarray:
    """Convert raw PCM16 bytes into float samples (``sample / 32768``)."""
    if len(data) % 2:
        logger.debug("Dropping trailing odd byte from %d byte PCM payload", len(data))
        data = data[:-1]
    return np.frombuffer(data, dtype="<i2").astype(np.float32) / PCM_SCALE


def encode_pcm16(samples: np.ndarray) -> bytes:
    """Quantize float samples into PCM16 bytes, clipping to the int16 range."""
    scaled = np.round(np.asarray(samples, dtype=np.float64) * PCM_SCALE)
    return np.clip(scaled, -32768, 32767).astype("<i2").tobytes()


def decode_audio(base64_data: str, sample_rate: int = SAMPLE_RATE) -> AudioBuffer:
    return AudioBuffer(samples=decode_pcm16(base64.b64decode(base64_data)), sample_rate=sample_rate)


class PlaybackHandle:
    """A narration that is playing.

    ``on_ended`` is called exactly once, when playback finishes on its own or
    after :meth:`stop`.
    """

    def __init__(self) -> None:
        self.on_ended: Callable[[], None] | None = None
        self._finished = False

    @property
    def is_active(self) -> bool:
        return not self._finished

    def stop(self) -> None:
        if self._finished:
            return
        self._halt()
        self._finish()

    def _halt(self) -> None:
        """Silence the device. Subclasses override."""

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self.on_ended is not None:
            self.on_ended()


class AudioOutput(ABC):
    """An audio device that can play a mono float waveform."""

    @abstractmethod
    def start(self, buffer: AudioBuffer) -> PlaybackHandle:
        """Begin playback immediately and return its handle."""
        raise NotImplementedError("Subclass must implement start method")


class SoundDeviceHandle(PlaybackHandle):
    """Plays a buffer through a PortAudio output stream."""

    def __init__(self, buffer: AudioBuffer) -> None:
        super().__init__()
        import sounddevice as sd

        self._sd = sd
        self._frames = buffer.samples.reshape(-1, 1)
        self._position = 0
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._stream = sd.OutputStream(
            samplerate=buffer.sample_rate,
            channels=1,
            dtype="float32",
            callback=self._fill,
            finished_callback=self._stream_finished,
        )
        self._stream.start()

    def _fill(self, outdata, frames, time, status) -> None:
        chunk = self._frames[self._position : self._position + frames]
        outdata[: len(chunk)] = chunk
        outdata[len(chunk) :] = 0
        self._position += len(chunk)
        if len(chunk) < frames:
            raise self._sd.CallbackStop()

    def _stream_finished(self) -> None:
        # Runs on the PortAudio thread; the stream must not be closed from here.
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._end_of_clip)
        else:
            self._finish()

    def _end_of_clip(self) -> None:
        self._close_stream()
        self._finish()

    def _close_stream(self) -> None:
        if not self._stream.closed:
            self._stream.close()

    def _halt(self) -> None:
        self._stream.abort()
        self._close_stream()


class SoundDeviceOutput(AudioOutput):
    """Default output using the system's audio device."""

    def start(self, buffer: AudioBuffer) -> PlaybackHandle:
        logger.debug("Playing %.1fs of narration", buffer.duration)
        return SoundDeviceHandle(buffer)


def play_audio(base64_data: str, output: AudioOutput, sample_rate: int = SAMPLE_RATE) -> PlaybackHandle:
    """Decode a narration payload and start playing it."""
    return output.start(decode_audio(base64_data, sample_rate))


class PlaybackSlot:
    """Holds the one narration that may be playing.

    Acquiring a new handle stops the one currently held. The slot empties
    itself when the held handle ends.
    """

    def __init__(self, output: AudioOutput, sample_rate: int = SAMPLE_RATE) -> None:
        self.output = output
        self.sample_rate = sample_rate
        self.handle: PlaybackHandle | None = None

    @property
    def is_playing(self) -> bool:
        return self.handle is not None and self.handle.is_active

    def acquire(self, handle: PlaybackHandle) -> PlaybackHandle:
        previous = self.handle
        self.handle = handle
        if previous is not None and previous is not handle:
            previous.stop()
        handle.on_ended = lambda: self._ended(handle)
        return handle

    def play(self, base64_data: str) -> PlaybackHandle:
        return self.acquire(play_audio(base64_data, self.output, self.sample_rate))

    def release(self) -> None:
        handle, self.handle = self.handle, None
        if handle is not None:
            handle.stop()

    def _ended(self, handle: PlaybackHandle) -> None:
        if self.handle is handle:
            self.handle = None
