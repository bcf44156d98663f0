"""Configuration constants for tippen application."""

LANGUAGE = 'de-DE'

# Game progression
PROGRESS_INCREMENT = 10       # Progress gained per completed word
MAX_PROGRESS = 100            # Progress at which the level goes up
LEVEL_UP_DELAY_MS = 2000
WORD_COMPLETE_DELAY_MS = 1000
INTRO_PAUSE_MS = 500

DEFAULT_SUCCESS_MESSAGE = {'text': 'Super gemacht!', 'icon': '🎉'}

# Keys that never count as a typing attempt
MODIFIER_KEYS = frozenset([
    'Shift', 'Control', 'Alt', 'Meta', 'CapsLock', 'Tab', 'Escape',
    'ArrowLeft', 'ArrowRight', 'ArrowUp', 'ArrowDown', 'ContextMenu',
    'ScrollLock', 'Pause', 'Insert', 'Home', 'End', 'PageUp', 'PageDown',
] + [f'F{i}' for i in range(1, 25)])

# Speech fallback
SPEECH_RATE = 0.8
SPEECH_VOLUME = 1.0

# Avatar
DEFAULT_AVATAR = 'tiger'
MIN_FRAME_MS = 16
DEFAULT_FRAME_MS = 100
DEFAULT_FRAME_SIZE = 300

# Sound effects
SAMPLE_RATE = 44100
PEAK_VOLUME = 0.25
ATTACK_SECONDS = 0.05

# Audio pre-generation
AUDIO_EXTENSION = '.mp3'
DEFAULT_TTS_PROVIDER = 'elevenlabs'
DEFAULT_CONCURRENCY = 2
REQUEST_DELAY_SECONDS = 0.5
SUCCESS_MESSAGES_FILE = 'success-messages.json'
LEVEL_MANIFEST_FILE = 'levels.json'
