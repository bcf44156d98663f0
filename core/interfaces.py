"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Abstract base class for a text-to-speech API."""

    name = 'tts'

    @abstractmethod
    def generate_audio(self, text: str, output_path: str, voice: str | None = None) -> None:
        """Synthesize text and write the MP3 bytes to output_path. Raises on API errors."""
        pass

    @abstractmethod
    def get_stats(self) -> dict:
        """Get usage counters: requests, failures, bytes, total_ms."""
        pass


class LevelStore(ABC):
    """Abstract base class for level and asset storage."""

    @abstractmethod
    def load_levels(self) -> list:
        """Load all levels in manifest order. Raises if none can be loaded."""
        pass

    @abstractmethod
    def load_success_messages(self) -> list:
        """Load level-up success messages. Returns empty list if unavailable."""
        pass

    @abstractmethod
    def audio_path(self, filename: str) -> str | None:
        """Get the local path of a pre-generated audio file, or None if it does not exist."""
        pass

    @abstractmethod
    def load_avatar_config(self, name: str) -> dict:
        """Load the raw sprite animation config of an avatar."""
        pass


class AudioSource(ABC):
    """Where pre-generated audio files come from (local directory, server)."""

    @abstractmethod
    def fetch(self, filename: str) -> bytes | None:
        """Get audio bytes for a file name. Returns None if the file is not available."""
        pass


class AudioOutput(ABC):
    """Blocking audio playback device with a speech engine."""

    @abstractmethod
    def play_audio(self, data: bytes) -> None:
        """Play encoded audio bytes and block until playback ends."""
        pass

    @abstractmethod
    def speak(self, text: str) -> None:
        """Speak text with the speech engine and block until done."""
        pass

    @abstractmethod
    def play_pcm(self, samples) -> None:
        """Play 16-bit mono PCM samples without blocking."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop any current playback or speech."""
        pass
