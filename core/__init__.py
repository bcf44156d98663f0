from .models import WordItem, Level, SuccessMessage, GameState
from .game import TypingGame
from .interfaces import TTSProvider, LevelStore, AudioSource, AudioOutput
from .narration import Narrator
from .avatar import TalkingAvatar
from .utils import normalize_filename, audio_filename
from .config import (
    PROGRESS_INCREMENT, LEVEL_UP_DELAY_MS, WORD_COMPLETE_DELAY_MS, INTRO_PAUSE_MS,
    DEFAULT_CONCURRENCY, LANGUAGE
)

__all__ = [
    'WordItem', 'Level', 'SuccessMessage', 'GameState',
    'TypingGame',
    'TTSProvider', 'LevelStore', 'AudioSource', 'AudioOutput',
    'Narrator', 'TalkingAvatar',
    'normalize_filename', 'audio_filename',
    'PROGRESS_INCREMENT', 'LEVEL_UP_DELAY_MS', 'WORD_COMPLETE_DELAY_MS', 'INTRO_PAUSE_MS',
    'DEFAULT_CONCURRENCY', 'LANGUAGE'
]
