"""Sequential speak-then-wait narration for words, level intros and success messages."""

import asyncio
import logging

from .config import INTRO_PAUSE_MS, DEFAULT_AVATAR
from .interfaces import AudioSource, AudioOutput
from .utils import audio_filename

logger = logging.getLogger(__name__)

# Where speech came from
FROM_FILE = 'file'
FROM_SPEECH = 'speech'
SKIPPED = 'skipped'
FAILED = 'failed'


class Narrator:
    """Speaks text and waits for it to finish.

    Pre-generated audio files are preferred; when a file is missing or cannot be
    played the speech engine reads the text instead. Blocking playback runs in
    the default executor so the event loop stays free for the avatar animation.
    """

    def __init__(self, source: AudioSource, output: AudioOutput, avatar=None,
                 display=None, intro_pause_ms: int = INTRO_PAUSE_MS,
                 avatar_name: str = DEFAULT_AVATAR):
        self.source = source
        self.output = output
        self.avatar = avatar
        self.display = display or (lambda text: None)
        self.intro_pause_ms = intro_pause_ms
        self.avatar_name = avatar_name
        self.intro_playing = False
        self._animation = None

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def stop(self) -> None:
        """Cancel any current audio or speech."""
        try:
            self.output.stop()
        except Exception as e:
            logger.warning(f"Could not stop playback: {e}")

    async def speak_and_wait(self, text: str, force: bool = False) -> str:
        """Speak text. Words are not spoken during an intro unless forced (the intro itself)."""
        if self.intro_playing and not force:
            return SKIPPED
        self.stop()

        filename = audio_filename(text)
        try:
            data = await self._run_blocking(self.source.fetch, filename)
            if data:
                await self._run_blocking(self.output.play_audio, data)
                return FROM_FILE
            logger.debug(f"No audio file {filename}, using speech engine")
        except Exception as e:
            logger.warning(f"Playing {filename} failed, using speech engine: {e}")

        try:
            await self._run_blocking(self.output.speak, text)
            return FROM_SPEECH
        except Exception as e:
            logger.warning(f"Speech engine failed for '{text}': {e}")
            return FAILED

    async def play_level_intro(self, intro: dict | None) -> None:
        """Speak level name and description with the avatar talking along."""
        self.intro_playing = True
        self.stop()
        try:
            if not intro:
                return
            self._talk()
            name = intro.get('name') or 'Level'
            self.display(name)
            await self.speak_and_wait(name, force=True)
            self._idle()
            await self._pause()

            description = intro.get('description')
            if description:
                self.display(description)
                self._talk()
                await self.speak_and_wait(description, force=True)
                self._idle()
                await self._pause()

            self.display('')
        finally:
            self.intro_playing = False
            self._hide()

    async def play_success_message(self, message: dict) -> None:
        """Play the pre-generated praise audio. There is no speech fallback for praise."""
        text = message.get('text', '')
        icon = message.get('icon', '')
        self.display(f"{text} {icon}".strip())
        self.stop()
        filename = audio_filename(text)
        try:
            data = await self._run_blocking(self.source.fetch, filename)
            if data:
                await self._run_blocking(self.output.play_audio, data)
        except Exception as e:
            logger.warning(f"Could not play success message {filename}: {e}")
        await self._pause()
        self.display('')

    async def _pause(self) -> None:
        await asyncio.sleep(self.intro_pause_ms / 1000)

    def _talk(self) -> None:
        if self.avatar is None:
            return
        self.avatar.start_talk(self.avatar_name)
        if self.avatar.is_animating and (self._animation is None or self._animation.done()):
            self._animation = asyncio.create_task(self.avatar.animate())

    def _idle(self) -> None:
        if self.avatar is None:
            return
        self._cancel_animation()
        self.avatar.set_idle(self.avatar_name)

    def _hide(self) -> None:
        if self.avatar is None:
            return
        self._cancel_animation()
        self.avatar.hide()

    def _cancel_animation(self) -> None:
        if self._animation is not None and not self._animation.done():
            self._animation.cancel()
        self._animation = None
