"""Utility functions for tippen application."""

import re

from .config import AUDIO_EXTENSION

_REPLACEMENTS = [
    (' ', '_'),
    ('Ä', 'AE'), ('Ö', 'OE'), ('Ü', 'UE'),
    ('ä', 'ae'), ('ö', 'oe'), ('ü', 'ue'),
    ('ß', 'SS'),
]


def normalize_filename(text) -> str:
    """Map display text to a filesystem-safe name: 'Grüße Dich' -> 'GrueSSe_Dich'."""
    if not isinstance(text, str):
        return ''
    for old, new in _REPLACEMENTS:
        text = text.replace(old, new)
    return re.sub(r'[^A-Za-z0-9_]', '', text)


def audio_filename(text) -> str:
    """Name of the pre-generated audio file for a word or phrase."""
    return f"{normalize_filename(text).lower()}{AUDIO_EXTENSION}"


def fold_case(char: str) -> str:
    """Upper-case a single typed character. 'ß' has no single-letter capital and stays as is."""
    if char == 'ß':
        return char
    return char.upper()
