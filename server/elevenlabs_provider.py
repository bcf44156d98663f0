"""ElevenLabs text-to-speech provider."""

import os

from server.http_tts import HTTPTTSProvider

API_URL = 'https://api.elevenlabs.io/v1/text-to-speech/{voice_id}'
DEFAULT_VOICE_ID = 'NBqeXKdZHweef6y0B67V'
MODEL_ID = 'eleven_multilingual_v2'
VOICE_SETTINGS = {'stability': 0.5, 'similarity_boost': 0.75}


class ElevenLabsProvider(HTTPTTSProvider):
    """ElevenLabs multilingual voice, German pronunciation."""

    name = 'elevenlabs'

    def __init__(self, api_key: str = None, default_voice: str = None, session=None):
        api_key = api_key or os.environ.get('XI_API_KEY')
        if not api_key:
            raise RuntimeError("XI_API_KEY is not defined. Please set it in your environment or .env file.")
        super().__init__(api_key, session)
        self.default_voice = default_voice or os.environ.get('ELEVENLABS_VOICE') or DEFAULT_VOICE_ID

    def generate_audio(self, text: str, output_path: str, voice: str | None = None) -> None:
        voice_id = voice or self.default_voice
        headers = {
            'Accept': 'audio/mpeg',
            'Content-Type': 'application/json',
            'xi-api-key': self.api_key,
        }
        body = {
            'text': text,
            'model_id': MODEL_ID,
            'voice_settings': VOICE_SETTINGS,
            'lang': 'de'
        }
        self._post_and_save(API_URL.format(voice_id=voice_id), headers, body, output_path)
