"""OpenAI text-to-speech provider."""

import os

from server.http_tts import HTTPTTSProvider

API_URL = 'https://api.openai.com/v1/audio/speech'
DEFAULT_VOICE = 'alloy'
MODEL = 'tts-1-hd'


class OpenAIProvider(HTTPTTSProvider):
    """OpenAI speech endpoint returning MP3."""

    name = 'openai'

    def __init__(self, api_key: str = None, default_voice: str = None, session=None):
        api_key = api_key or os.environ.get('OPENAI_API_KEY')
        if not api_key:
            raise RuntimeError("Missing OPENAI_API_KEY environment variable.")
        super().__init__(api_key, session)
        self.default_voice = default_voice or os.environ.get('OPENAI_VOICE') or DEFAULT_VOICE

    def generate_audio(self, text: str, output_path: str, voice: str | None = None) -> None:
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }
        body = {
            'model': MODEL,
            'input': text,
            'voice': voice or self.default_voice,
            'response_format': 'mp3'
        }
        self._post_and_save(API_URL, headers, body, output_path)
