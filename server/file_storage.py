"""File-based level and asset storage."""

import json
import logging
import os

from core.config import LEVEL_MANIFEST_FILE, SUCCESS_MESSAGES_FILE, AUDIO_EXTENSION
from core.interfaces import LevelStore
from core.models import Level, SuccessMessage

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class FileLevelStore(LevelStore):
    """Reads levels, success messages, audio and avatars from directories on disk.

    Layout (defaults relative to the project root):
        data/levels.json              manifest: list of level file names
        data/<level>.json             one level per file
        data/success-messages.json    optional praise messages
        audio/<normalized>.mp3        pre-generated pronunciations
        avatars/<name>/talk-animation.json
    """

    def __init__(self, data_dir: str = None, audio_dir: str = None, avatar_dir: str = None):
        self.data_dir = data_dir or os.environ.get('TIPPEN_DATA_DIR') or os.path.join(PROJECT_ROOT, 'data')
        self.audio_dir = audio_dir or os.environ.get('TIPPEN_AUDIO_DIR') or os.path.join(PROJECT_ROOT, 'audio')
        self.avatar_dir = avatar_dir or os.environ.get('TIPPEN_AVATAR_DIR') or os.path.join(PROJECT_ROOT, 'avatars')

    def _read_json(self, path: str):
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def load_levels(self) -> list[Level]:
        manifest_path = os.path.join(self.data_dir, LEVEL_MANIFEST_FILE)
        if not os.path.exists(manifest_path):
            raise FileNotFoundError(f"Could not load level manifest: {manifest_path}")
        level_files = self._read_json(manifest_path)
        if not isinstance(level_files, list):
            raise ValueError(f"Level manifest must be a list of file names: {manifest_path}")

        levels = []
        for level_file in level_files:
            path = os.path.join(self.data_dir, level_file)
            if not os.path.exists(path):
                logger.warning(f"Could not load level file: {level_file}")
                continue
            try:
                default_name = os.path.splitext(os.path.basename(level_file))[0]
                levels.append(Level.from_dict(self._read_json(path), default_name=default_name))
            except (ValueError, OSError) as e:
                logger.error(f"Error loading or parsing level file {level_file}: {e}")

        if not levels:
            raise RuntimeError("No level files found.")
        logger.info(f"Loaded {len(levels)} level files.")
        return levels

    def load_success_messages(self) -> list[SuccessMessage]:
        path = os.path.join(self.data_dir, SUCCESS_MESSAGES_FILE)
        if not os.path.exists(path):
            logger.warning(f"Could not load {SUCCESS_MESSAGES_FILE}")
            return []
        try:
            data = self._read_json(path)
            messages = [SuccessMessage.from_dict(m) for m in data
                        if isinstance(m, dict) and isinstance(m.get('text'), str)]
        except (ValueError, TypeError, OSError) as e:
            logger.warning(f"Error loading {SUCCESS_MESSAGES_FILE}: {e}")
            return []
        logger.info(f"Loaded success messages: {len(messages)}")
        return messages

    def audio_path(self, filename: str) -> str | None:
        """Path of an existing audio file, or None. Rejects names that leave the audio dir."""
        if os.path.basename(filename) != filename or not filename.endswith(AUDIO_EXTENSION):
            return None
        path = os.path.join(self.audio_dir, filename)
        return path if os.path.isfile(path) else None

    def load_avatar_config(self, name: str) -> dict:
        if os.path.basename(name) != name:
            raise ValueError(f"Invalid avatar name: {name}")
        path = os.path.join(self.avatar_dir, name, 'talk-animation.json')
        if not os.path.exists(path):
            raise FileNotFoundError(f"Failed to load avatar config: {path}")
        return self._read_json(path)
