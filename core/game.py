"""Typing game engine: word selection, keystroke validation and level progression."""

import logging
import random

from .config import MODIFIER_KEYS, PROGRESS_INCREMENT, MAX_PROGRESS
from .keyboard import finger_for, is_key_enabled
from .models import GameState, Level, SuccessMessage
from .utils import fold_case

logger = logging.getLogger(__name__)

# Keystroke outcomes
IGNORED = 'ignored'
CORRECT = 'correct'
ERROR = 'error'
WORD_COMPLETE = 'word_complete'
LEVEL_UP = 'level_up'


class TypingGame:
    """State machine driven by keystrokes.

    The game moves through levels. Each level plays an intro first; while the
    intro is playing no words are generated and keystrokes are ignored. Every
    completed word adds progress, and a full progress bar moves to the next level.
    """

    def __init__(self, levels: list[Level], success_messages: list[SuccessMessage] = None,
                 rng: random.Random = None):
        if not levels:
            raise ValueError("A game needs at least one level")
        self.levels = levels
        self.success_messages = success_messages or []
        self.rng = rng or random.Random()
        self.state = GameState()

    @property
    def current_level(self) -> Level:
        return self.levels[self.state.level]

    def start(self) -> dict | None:
        """Start the game. Returns the intro of the current level, or None if already started."""
        if self.state.game_started:
            return None
        self.state.game_started = True
        logger.info(f"Game started at level {self.state.level}")
        return self.begin_level_intro()

    def begin_level_intro(self) -> dict:
        self.state.is_level_intro_playing = True
        return self.current_level.get_intro()

    def finish_level_intro(self) -> dict | None:
        """End the intro and pick the first word of the level."""
        self.state.is_level_intro_playing = False
        return self.next_word()

    def next_word(self) -> dict | None:
        """Pick a random word of the current level not used since the last reset.

        Returns the word item as a dict, or None while an intro is playing or the
        level has no words.
        """
        if self.state.is_level_intro_playing:
            return None
        items = self.current_level.items
        if not items:
            return None
        if len(self.state.used_words) >= len(items):
            self.state.used_words = []

        available = [i for i in range(len(items)) if i not in self.state.used_words]
        index = self.rng.choice(available)
        self.state.used_words.append(index)

        item = items[index]
        self.state.current_word = item.text
        self.state.current_icons = list(item.icons)
        self.state.current_index = 0
        return item.to_dict()

    def handle_key(self, key: str) -> dict:
        """Validate one keystroke against the next expected character."""
        state = self.state
        if (not state.game_started or state.is_level_intro_playing
                or key in MODIFIER_KEYS or not key):
            return self._result(key, IGNORED)

        expected = state.next_char
        if expected is None:
            return self._result(key, IGNORED)

        level = self.current_level
        key_to_check = key
        char_to_check = expected
        if not level.case_sensitive:
            key_to_check = fold_case(key)
            char_to_check = fold_case(expected)

        if not is_key_enabled(key_to_check, level.enabled_keys, level.case_sensitive):
            return self._result(key, IGNORED)

        if key_to_check != char_to_check:
            state.error_count += 1
            return self._result(key, ERROR, expected)

        state.correct_count += 1
        state.current_index += 1
        if not state.word_complete:
            return self._result(key, CORRECT, expected)

        state.progress += PROGRESS_INCREMENT
        if state.progress >= MAX_PROGRESS:
            state.progress = MAX_PROGRESS
            result = self._result(key, LEVEL_UP, expected)
            result['level_change'] = self.level_up()
            return result
        return self._result(key, WORD_COMPLETE, expected)

    def level_up(self, show_success_message: bool = True) -> dict:
        """Move to the next level (staying on the last one) and begin its intro."""
        self.state.level = min(self.state.level + 1, len(self.levels) - 1)
        self.state.reset_level_progress()
        message = self.pick_success_message() if show_success_message else None
        logger.info(f"Level up to {self.state.level}")
        return {
            'level': self.state.level,
            'success_message': message.to_dict() if message else None,
            'intro': self.begin_level_intro()
        }

    def level_down(self) -> dict:
        self.state.level = max(self.state.level - 1, 0)
        self.state.reset_level_progress()
        logger.info(f"Level down to {self.state.level}")
        return {'level': self.state.level, 'success_message': None, 'intro': self.begin_level_intro()}

    def set_level(self, level: int) -> dict:
        if not 0 <= level < len(self.levels):
            raise ValueError(f"Level {level} out of range (0-{len(self.levels) - 1})")
        self.state.level = level
        self.state.reset_level_progress()
        return {'level': level, 'success_message': None, 'intro': self.begin_level_intro()}

    def pick_success_message(self) -> SuccessMessage:
        if self.success_messages:
            return self.rng.choice(self.success_messages)
        return SuccessMessage.default()

    def display(self) -> str:
        """Current word with the next character in brackets: HA[U]S."""
        word = self.state.current_word
        if not self.current_level.case_sensitive:
            word = ''.join(fold_case(c) for c in word)
        return ''.join(
            f'[{char}]' if i == self.state.current_index else char
            for i, char in enumerate(word)
        )

    def next_key_hint(self) -> dict | None:
        char = self.state.next_char
        if char is None:
            return None
        return {'char': char, 'finger': finger_for(char)}

    def status(self) -> dict:
        status = self.state.to_dict()
        del status['used_words']
        level = self.current_level
        status.update({
            'level_name': level.name,
            'level_count': len(self.levels),
            'display': self.display(),
            'case_sensitive': level.case_sensitive,
            'next_key': self.next_key_hint()
        })
        return status

    def _result(self, key: str, outcome: str, expected: str = None) -> dict:
        return {
            'key': key,
            'outcome': outcome,
            'expected': expected,
            'next_key': self.next_key_hint()
        }
