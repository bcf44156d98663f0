"""Domain models for tippen application."""

from .config import DEFAULT_SUCCESS_MESSAGE


class WordItem:
    """A word or phrase to type, with the icons shown next to it."""

    def __init__(self, text: str, icons: list = None):
        self.text = text
        self.icons = list(icons) if icons else []

    def to_dict(self) -> dict:
        return {'text': self.text, 'icons': self.icons}

    @classmethod
    def from_dict(cls, data: dict) -> 'WordItem':
        if not isinstance(data, dict) or not isinstance(data.get('text'), str):
            raise ValueError(f"Invalid word item: {data!r}")
        return cls(data['text'], data.get('icons') or [])

    def __eq__(self, other):
        return isinstance(other, WordItem) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"WordItem({self.text!r})"


class Level:
    """A named, ordered set of target words with optional key and case constraints."""

    def __init__(self, name: str, items: list, description: str = None,
                 enabled_keys: list = None, case_sensitive: bool = False):
        self.name = name
        self.description = description
        self.items = items
        self.enabled_keys = list(enabled_keys) if enabled_keys is not None else None
        self.case_sensitive = case_sensitive

    def to_dict(self) -> dict:
        data = {
            'name': self.name,
            'items': [item.to_dict() for item in self.items],
            'caseSensitive': self.case_sensitive
        }
        if self.description:
            data['description'] = self.description
        if self.enabled_keys is not None:
            data['enabledKeys'] = self.enabled_keys
        return data

    @classmethod
    def from_dict(cls, data, default_name: str = 'Level') -> 'Level':
        """Build a level from its JSON form.

        Accepts the current format ({name, description, items, enabledKeys, caseSensitive})
        as well as the legacy format, a bare list of items.
        """
        if isinstance(data, list):
            return cls(default_name, [WordItem.from_dict(item) for item in data])
        if not isinstance(data, dict):
            raise ValueError(f"Invalid level data: expected object or list, got {type(data).__name__}")

        items = data.get('items')
        if not isinstance(items, list):
            items = []
        enabled_keys = data.get('enabledKeys')
        if not isinstance(enabled_keys, list):
            enabled_keys = None
        return cls(
            name=data.get('name') or default_name,
            items=[WordItem.from_dict(item) for item in items],
            description=data.get('description') or None,
            enabled_keys=enabled_keys,
            case_sensitive=data.get('caseSensitive') is True
        )

    def get_intro(self) -> dict:
        return {'name': self.name, 'description': self.description}

    def summary(self, index: int) -> dict:
        return {
            'index': index,
            'name': self.name,
            'description': self.description,
            'word_count': len(self.items),
            'case_sensitive': self.case_sensitive,
            'enabled_keys': self.enabled_keys
        }


class SuccessMessage:
    """Praise shown and spoken on level up."""

    def __init__(self, text: str, icon: str = ''):
        self.text = text
        self.icon = icon

    def to_dict(self) -> dict:
        return {'text': self.text, 'icon': self.icon}

    @classmethod
    def from_dict(cls, data: dict) -> 'SuccessMessage':
        return cls(data['text'], data.get('icon', ''))

    @classmethod
    def default(cls) -> 'SuccessMessage':
        return cls.from_dict(DEFAULT_SUCCESS_MESSAGE)


class GameState:
    """In-memory state of one game: current word, position, counters, used words."""

    def __init__(self):
        self.current_word = ''
        self.current_icons = []
        self.current_index = 0
        self.correct_count = 0
        self.error_count = 0
        self.level = 0
        self.progress = 0
        self.used_words = []  # Indices into the current level's items
        self.is_level_intro_playing = False
        self.game_started = False

    def to_dict(self) -> dict:
        return {
            'current_word': self.current_word,
            'current_icons': self.current_icons,
            'current_index': self.current_index,
            'correct_count': self.correct_count,
            'error_count': self.error_count,
            'level': self.level,
            'progress': self.progress,
            'used_words': self.used_words,
            'is_level_intro_playing': self.is_level_intro_playing,
            'game_started': self.game_started
        }

    @property
    def next_char(self) -> str | None:
        if self.current_index < len(self.current_word):
            return self.current_word[self.current_index]
        return None

    @property
    def word_complete(self) -> bool:
        return bool(self.current_word) and self.current_index >= len(self.current_word)

    def reset_level_progress(self) -> None:
        """Clear progress and used words when the level changes."""
        self.progress = 0
        self.used_words = []
