"""Local audio playback: pre-generated files via pygame, speech via pyttsx3."""

import io
import logging
import os
import threading
import time

import numpy as np
import pygame
import pyttsx3

from core.config import LANGUAGE, SAMPLE_RATE, SPEECH_RATE, SPEECH_VOLUME
from core.interfaces import AudioSource, AudioOutput

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05


class LocalAudioSource(AudioSource):
    """Audio files from a directory on this machine."""

    def __init__(self, audio_dir: str):
        self.audio_dir = audio_dir

    def fetch(self, filename: str) -> bytes | None:
        path = os.path.join(self.audio_dir, filename)
        if not os.path.isfile(path):
            return None
        with open(path, 'rb') as f:
            return f.read()


class ServerAudioSource(AudioSource):
    """Audio files served by the tippen server. Non-audio responses count as missing."""

    def __init__(self, client):
        self.client = client

    def fetch(self, filename: str) -> bytes | None:
        result = self.client.fetch_audio(filename)
        if result is None:
            return None
        data, content_type = result
        if not content_type.startswith('audio/'):
            logger.warning(f"{filename} is not audio ({content_type})")
            return None
        return data


def _voice_languages(voice) -> list[str]:
    languages = []
    for lang in getattr(voice, 'languages', None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode('utf-8', errors='ignore')
        languages.append(str(lang).strip('\x05 ').replace('_', '-'))
    if 'german' in (getattr(voice, 'id', '') or '').lower():
        languages.append('de')
    return languages


def find_german_voice(voices: list, language: str = LANGUAGE):
    """Pick a voice for a language: Google first, then an exact match, then the base language."""
    voices = list(voices or [])
    base = language.split('-')[0].lower()
    for voice in voices:
        if language in _voice_languages(voice) and 'Google' in (voice.name or ''):
            return voice
    for voice in voices:
        if language in _voice_languages(voice):
            return voice
    for voice in voices:
        if any(lang.lower().startswith(base) for lang in _voice_languages(voice)):
            return voice
    return None


class PygameAudioOutput(AudioOutput):
    """Plays MP3 bytes and tones with the pygame mixer; speaks with pyttsx3.

    The speech engine is created inside the calling thread for every utterance,
    since pyttsx3 engines must not be shared across threads.
    """

    def __init__(self):
        self._mixer_ready = False
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._engine = None
        self._voice_id = None
        self._voice_checked = False

    def _ensure_mixer(self) -> None:
        if not self._mixer_ready:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
            self._mixer_ready = True

    def play_audio(self, data: bytes) -> None:
        with self._lock:
            self._ensure_mixer()
            self._stopped.clear()
            pygame.mixer.music.load(io.BytesIO(data), 'mp3')
            pygame.mixer.music.play()
        while pygame.mixer.music.get_busy() and not self._stopped.is_set():
            time.sleep(POLL_SECONDS)

    def speak(self, text: str) -> None:
        engine = pyttsx3.init()
        try:
            self._configure(engine)
            self._engine = engine
            engine.say(text)
            engine.runAndWait()
        finally:
            self._engine = None
            engine.stop()

    def _configure(self, engine) -> None:
        if not self._voice_checked:
            voice = find_german_voice(engine.getProperty('voices'))
            if voice:
                self._voice_id = voice.id
                logger.info(f"✅ Stimme gefunden: {voice.name}")
            else:
                logger.warning("⚠️ Keine deutsche Stimme gefunden.")
            self._voice_checked = True
        if self._voice_id:
            engine.setProperty('voice', self._voice_id)
        engine.setProperty('rate', int(engine.getProperty('rate') * SPEECH_RATE))
        engine.setProperty('volume', SPEECH_VOLUME)

    def play_pcm(self, samples) -> None:
        try:
            self._ensure_mixer()
            _, _, channels = pygame.mixer.get_init()
            samples = np.asarray(samples, dtype=np.int16)
            if channels > 1:
                samples = np.repeat(samples[:, None], channels, axis=1)
            pygame.mixer.Sound(buffer=samples.tobytes()).play()
        except pygame.error as e:
            logger.debug(f"Sound effect skipped: {e}")

    def stop(self) -> None:
        self._stopped.set()
        if self._mixer_ready:
            pygame.mixer.music.stop()
        engine = self._engine
        if engine is not None:
            engine.stop()
