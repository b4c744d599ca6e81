"""Microphone capture for push-to-talk dictation."""

import io
import logging
import queue
import threading
import wave

import numpy as np
import sounddevice as sd

from dictate_privacy.config import CHUNK_MS, INPUT_CHANNELS, SAMPLE_RATE

logger = logging.getLogger(__name__)


class AudioRecorder:
    """Records mono float32 audio into a buffer filled by a background thread."""

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = INPUT_CHANNELS,
        chunk_ms: float = CHUNK_MS,
        device: int | str | None = None,
    ):
        """
        Initialize the recorder.

        Args:
            sample_rate: Sample rate in Hz
            channels: Number of input channels (downmixed to mono)
            chunk_ms: Block size in milliseconds
            device: Input device index or name (None for the system default)
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self.device = device

        self._recording = False
        self._chunks: queue.Queue[np.ndarray] = queue.Queue()
        self._buffer: list[np.ndarray] = []
        self._buffer_lock = threading.Lock()
        self._stream: sd.InputStream | None = None
        self._collector: threading.Thread | None = None
        self._stop_collector = threading.Event()

    def _on_audio(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.warning("Audio input status: %s", status)
        mono = indata if indata.ndim == 1 else np.mean(indata, axis=1)
        self._chunks.put_nowait(mono.copy())

    def _collect(self) -> None:
        while not self._stop_collector.is_set():
            try:
                chunk = self._chunks.get(timeout=0.1)
            except queue.Empty:
                continue
            with self._buffer_lock:
                self._buffer.append(chunk)

    def _drain(self) -> None:
        """Move chunks still queued after the stream stopped into the buffer."""
        with self._buffer_lock:
            while True:
                try:
                    self._buffer.append(self._chunks.get_nowait())
                except queue.Empty:
                    break

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self) -> None:
        """Start capturing from the input device, discarding any earlier audio."""
        with self._buffer_lock:
            self._buffer = []
        while not self._chunks.empty():
            self._chunks.get_nowait()

        if self._collector is None or not self._collector.is_alive():
            self._stop_collector.clear()
            self._collector = threading.Thread(target=self._collect, daemon=True)
            self._collector.start()

        self._stream = sd.InputStream(
            channels=self.channels,
            samplerate=self.sample_rate,
            dtype="float32",
            callback=self._on_audio,
            blocksize=int(self.sample_rate * (self.chunk_ms / 1000.0)),
            device=self.device,
        )
        self._stream.start()
        self._recording = True
        logger.debug("Audio capture started")

    def stop(self) -> np.ndarray | None:
        """Stop capturing and return the recorded samples (None if nothing was captured)."""
        if self._stream:
            try:
                self._stream.stop()
                self._stream.close()
            except (sd.PortAudioError, RuntimeError) as e:
                logger.warning("Error closing audio stream: %s", e)
            self._stream = None
        self._recording = False
        self._join_collector()
        self._drain()
        return self.take_buffer()

    def take_buffer(self) -> np.ndarray | None:
        """Return and clear the buffered audio."""
        with self._buffer_lock:
            if not self._buffer:
                return None
            audio = np.concatenate(self._buffer).astype(np.float32)
            self._buffer.clear()
            return audio

    def shutdown(self) -> None:
        """Stop recording and the collector thread."""
        if self._recording:
            self.stop()
        self._join_collector()

    def _join_collector(self) -> None:
        # The collector must be gone before draining so no chunk is in flight
        self._stop_collector.set()
        if self._collector and self._collector.is_alive():
            self._collector.join(timeout=1.0)


def to_wav_bytes(samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Encode float samples in [-1, 1] as a mono 16-bit PCM WAV file."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())
    return buffer.getvalue()
