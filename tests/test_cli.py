"""Unit tests for tippen CLI client."""

import asyncio
import os
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from cli.api_client import TippenAPIClient
from cli.audio import LocalAudioSource, ServerAudioSource, PygameAudioOutput, find_german_voice
from cli.console import ConsoleUI
from core.avatar import TALK, IDLE, HIDDEN
from core.config import SAMPLE_RATE


def make_state(**overrides) -> dict:
    state = {
        'level': 0,
        'level_name': 'Grundreihe',
        'level_count': 3,
        'progress': 10,
        'correct_count': 3,
        'error_count': 1,
        'current_word': 'das',
        'current_icons': ['📦'],
        'current_index': 0,
        'display': '[D]AS',
        'case_sensitive': False,
        'next_key': {'char': 'd', 'finger': 'mittel'},
        'is_level_intro_playing': False,
        'game_started': True,
    }
    state.update(overrides)
    return state


def make_voice(voice_id, name, languages):
    voice = MagicMock()
    voice.id = voice_id
    voice.name = name
    voice.languages = languages
    return voice


class TestTippenAPIClient(unittest.TestCase):
    """Tests for TippenAPIClient request building."""

    def setUp(self):
        self.client = TippenAPIClient('http://tippen.local:8000/', user_id='anna')
        self.client.session = MagicMock()
        self.response = MagicMock()
        self.response.json.return_value = {'ok': True}
        self.client.session.get.return_value = self.response
        self.client.session.post.return_value = self.response

    def test_press_keys(self):
        self.client.press_keys('da')
        self.client.session.post.assert_called_once_with(
            'http://tippen.local:8000/api/keys', json={'keys': ['d', 'a'], 'user_id': 'anna'}
        )
        self.response.raise_for_status.assert_called_once()

    def test_set_level(self):
        self.client.set_level(2)
        self.client.session.post.assert_called_once_with(
            'http://tippen.local:8000/api/level/2', json={'user_id': 'anna'}
        )

    def test_get_keyboard(self):
        self.client.get_keyboard()
        self.client.session.get.assert_called_once_with(
            'http://tippen.local:8000/api/keyboard', params={'user_id': 'anna'}
        )

    def test_get_levels(self):
        self.response.json.return_value = {'levels': [{'index': 0}]}
        self.assertEqual(self.client.get_levels(), [{'index': 0}])

    def test_fetch_audio(self):
        self.response.status_code = 200
        self.response.content = b'ID3mp3'
        self.response.headers = {'content-type': 'audio/mpeg'}
        self.assertEqual(self.client.fetch_audio('das.mp3'), (b'ID3mp3', 'audio/mpeg'))
        self.client.session.get.assert_called_once_with('http://tippen.local:8000/audio/das.mp3')

    def test_fetch_audio_missing(self):
        self.response.status_code = 404
        self.assertIsNone(self.client.fetch_audio('tier.mp3'))
        self.response.raise_for_status.assert_not_called()


class TestAudioSources(unittest.TestCase):
    """Tests for local and server audio sources."""

    def test_local_source(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, 'das.mp3'), 'wb') as f:
                f.write(b'ID3mp3')
            source = LocalAudioSource(tmp)
            self.assertEqual(source.fetch('das.mp3'), b'ID3mp3')
            self.assertIsNone(source.fetch('tier.mp3'))

    def test_server_source(self):
        client = MagicMock()
        client.fetch_audio.return_value = (b'ID3mp3', 'audio/mpeg')
        self.assertEqual(ServerAudioSource(client).fetch('das.mp3'), b'ID3mp3')

    def test_server_source_non_audio(self):
        client = MagicMock()
        client.fetch_audio.return_value = (b'<html>', 'text/html; charset=utf-8')
        self.assertIsNone(ServerAudioSource(client).fetch('das.mp3'))

    def test_server_source_missing(self):
        client = MagicMock()
        client.fetch_audio.return_value = None
        self.assertIsNone(ServerAudioSource(client).fetch('das.mp3'))


class TestFindGermanVoice(unittest.TestCase):
    """Tests for speech engine voice selection."""

    def test_prefers_google_german(self):
        voices = [
            make_voice('en', 'English', ['en_US']),
            make_voice('de-1', 'Anna', ['de_DE']),
            make_voice('de-2', 'Google Deutsch', ['de-DE']),
        ]
        self.assertEqual(find_german_voice(voices).id, 'de-2')

    def test_any_german_region(self):
        voices = [make_voice('en', 'English', ['en_US']), make_voice('at', 'Wien', [b'\x05de-AT'])]
        self.assertEqual(find_german_voice(voices).id, 'at')

    def test_german_by_id(self):
        voices = [make_voice('HKEY\\TTS_MS_German_Hedda', 'Hedda', [])]
        self.assertEqual(find_german_voice(voices).name, 'Hedda')

    def test_none(self):
        self.assertIsNone(find_german_voice([make_voice('en', 'English', ['en_GB'])]))
        self.assertIsNone(find_german_voice(None))

    def test_configured_language(self):
        voices = [make_voice('de', 'Anna', ['de_DE']), make_voice('at', 'Wien', ['de_AT'])]
        self.assertEqual(find_german_voice(voices).id, 'de')
        self.assertEqual(find_german_voice(voices, language='de-AT').id, 'at')


class TestPygameAudioOutput(unittest.TestCase):
    """Tests for playback and speech with pygame and pyttsx3 mocked out."""

    def setUp(self):
        self.pyttsx3 = patch('cli.audio.pyttsx3').start()
        self.pygame = patch('cli.audio.pygame').start()
        self.pygame.error = type('PygameError', (Exception,), {})
        self.addCleanup(patch.stopall)
        self.engine = self.pyttsx3.init.return_value
        properties = {'voices': [make_voice('de-id', 'Google Deutsch', ['de-DE'])], 'rate': 200}
        self.engine.getProperty.side_effect = lambda name: properties[name]
        self.output = PygameAudioOutput()

    def test_speak_configures_german_voice(self):
        self.output.speak('Haus')

        self.engine.setProperty.assert_any_call('voice', 'de-id')
        self.engine.setProperty.assert_any_call('rate', 160)
        self.engine.setProperty.assert_any_call('volume', 1.0)
        self.engine.say.assert_called_once_with('Haus')
        self.engine.runAndWait.assert_called_once()
        self.engine.stop.assert_called_once()
        self.assertIsNone(self.output._engine)

    def test_voice_lookup_happens_once(self):
        self.output.speak('Haus')
        self.output.speak('Maus')
        voice_lookups = [c for c in self.engine.getProperty.call_args_list if c.args == ('voices',)]
        self.assertEqual(len(voice_lookups), 1)

    def test_play_audio(self):
        self.pygame.mixer.music.get_busy.return_value = False

        self.output.play_audio(b'ID3data')

        self.pygame.mixer.init.assert_called_once_with(frequency=SAMPLE_RATE, size=-16, channels=1)
        data, kind = self.pygame.mixer.music.load.call_args.args
        self.assertEqual(data.getvalue(), b'ID3data')
        self.assertEqual(kind, 'mp3')
        self.pygame.mixer.music.play.assert_called_once()

    def test_play_pcm_stereo_mixer(self):
        self.pygame.mixer.get_init.return_value = (SAMPLE_RATE, -16, 2)

        self.output.play_pcm([0, 100, -100])

        buffer = self.pygame.mixer.Sound.call_args.kwargs['buffer']
        self.assertEqual(len(buffer), 3 * 2 * 2)
        self.pygame.mixer.Sound.return_value.play.assert_called_once()

    def test_play_pcm_without_audio_device(self):
        self.pygame.mixer.init.side_effect = self.pygame.error('No available audio device')
        self.output.play_pcm([0, 1])
        self.pygame.mixer.Sound.assert_not_called()

    def test_stop(self):
        engine = MagicMock()
        self.output._mixer_ready = True
        self.output._engine = engine

        self.output.stop()

        self.pygame.mixer.music.stop.assert_called_once()
        engine.stop.assert_called_once()
        self.assertTrue(self.output._stopped.is_set())

    def test_stop_before_playback(self):
        self.output.stop()
        self.pygame.mixer.music.stop.assert_not_called()


class TestConsoleUI(unittest.TestCase):
    """Tests for the console flow with a mocked server and narrator."""

    def setUp(self):
        self.client = MagicMock()
        self.narrator = MagicMock()
        self.narrator.speak_and_wait = AsyncMock()
        self.narrator.play_level_intro = AsyncMock()
        self.narrator.play_success_message = AsyncMock()
        self.output = MagicMock()
        self.ui = ConsoleUI(self.client, self.narrator, self.output)
        self.ui.state = make_state()
        self.sleep = patch('cli.console.asyncio.sleep', new=AsyncMock()).start()
        self.addCleanup(patch.stopall)
        self.print = patch('builtins.print').start()

    def test_wrong_key(self):
        self.client.press_keys.return_value = {
            'results': [{'key': 'x', 'outcome': 'error', 'expected': 'd', 'next_key': None}],
            'state': make_state(error_count=2),
            'level_change': None
        }
        asyncio.run(self.ui.submit('x'))

        self.assertEqual(self.output.play_pcm.call_count, 1)
        self.assertEqual(self.ui.state['error_count'], 2)
        self.client.next_word.assert_not_called()
        self.narrator.speak_and_wait.assert_not_awaited()

    def test_word_complete_moves_on(self):
        self.client.press_keys.return_value = {
            'results': [
                {'key': 'd', 'outcome': 'correct', 'expected': 'd', 'next_key': None},
                {'key': 'a', 'outcome': 'correct', 'expected': 'a', 'next_key': None},
                {'key': 's', 'outcome': 'word_complete', 'expected': 's', 'next_key': None},
            ],
            'state': make_state(current_index=3, progress=20),
            'level_change': None
        }
        self.client.next_word.return_value = make_state(current_word='als', display='[A]LS')

        asyncio.run(self.ui.submit('das'))

        self.client.press_keys.assert_called_once_with(['d', 'a', 's'])
        self.sleep.assert_awaited_once_with(1.0)
        self.assertEqual(self.ui.state['current_word'], 'als')
        self.narrator.speak_and_wait.assert_awaited_once_with('als')
        self.assertEqual(self.output.play_pcm.call_count, 3)

    def test_level_change(self):
        change = {
            'level': 1,
            'success_message': {'text': 'Klasse!', 'icon': '👏'},
            'intro': {'name': 'Obere Reihe', 'description': None}
        }
        self.client.press_keys.return_value = {
            'results': [{'key': 's', 'outcome': 'level_up', 'expected': 's', 'next_key': None}],
            'state': make_state(level=1, is_level_intro_playing=True),
            'level_change': change
        }
        self.client.complete_intro.return_value = make_state(level=1, current_word='Tier', display='[T]IER')

        asyncio.run(self.ui.submit('s'))

        self.narrator.play_success_message.assert_awaited_once_with(change['success_message'])
        self.narrator.play_level_intro.assert_awaited_once_with(change['intro'])
        self.client.complete_intro.assert_called_once()
        self.client.next_word.assert_not_called()
        self.narrator.speak_and_wait.assert_awaited_once_with('Tier')

    def test_change_level(self):
        self.client.level_down.return_value = make_state(
            is_level_intro_playing=True, intro={'name': 'Grundreihe', 'description': None})
        self.client.complete_intro.return_value = make_state(current_word='als')

        asyncio.run(self.ui.change_level(self.client.level_down))

        self.narrator.play_level_intro.assert_awaited_once_with({'name': 'Grundreihe', 'description': None})
        self.narrator.speak_and_wait.assert_awaited_once_with('als')

    def test_reconnect_keeps_current_word(self):
        self.client.start.return_value = make_state(current_word='sah', progress=40)

        state = asyncio.run(self.ui.play_intro(self.client.start()))

        self.assertEqual(state['current_word'], 'sah')
        self.narrator.play_level_intro.assert_not_awaited()
        self.client.complete_intro.assert_not_called()

    def test_print_keyboard(self):
        self.ui.print_keyboard({'level': 0, 'rows': [{
            'left': [{'key': 'a', 'label': 'a', 'enabled': True}, {'key': 'q', 'label': 'q', 'enabled': False}],
            'right': [{'key': ' ', 'label': 'Leertaste', 'enabled': True}]
        }]})
        self.print.assert_any_call('  a ·   Leertaste')

    def test_run_commands(self):
        intro = {'name': 'Grundreihe', 'description': None}
        self.client.health_check.return_value = {'service': 'Tippen API', 'levels': 3}
        self.client.get_levels.return_value = [{'index': 0, 'name': 'Grundreihe', 'word_count': 5}]
        self.client.start.return_value = make_state(current_word='', is_level_intro_playing=True, intro=intro)
        self.client.complete_intro.return_value = make_state()
        self.client.get_status.return_value = make_state()
        self.client.get_keyboard.return_value = {'level': 0, 'rows': []}
        for request in (self.client.level_up, self.client.level_down, self.client.set_level):
            request.return_value = make_state(is_level_intro_playing=True, intro=intro)
        self.ui.read_line = AsyncMock(
            side_effect=['', 'status', 'keys', 'up', 'down', 'level 1', 'level x', 'exit'])

        asyncio.run(self.ui._run())

        self.client.start.assert_called_once()
        self.client.get_status.assert_called_once()
        self.client.get_keyboard.assert_called_once()
        self.client.level_up.assert_called_once()
        self.client.level_down.assert_called_once()
        self.client.set_level.assert_called_once_with(1)
        self.client.press_keys.assert_not_called()
        self.assertEqual(self.client.complete_intro.call_count, 4)
        self.assertEqual(self.narrator.play_level_intro.await_count, 4)
        # start, the empty line repeat and the three level changes
        self.assertEqual(self.narrator.speak_and_wait.await_count, 5)
        self.print.assert_any_call('Usage: level N')
        self.print.assert_any_call('Tschüss!')

    def test_run_typed_word(self):
        self.client.health_check.return_value = {'service': 'Tippen API', 'levels': 3}
        self.client.get_levels.return_value = []
        self.client.start.return_value = make_state()
        self.client.press_keys.return_value = {
            'results': [{'key': 'x', 'outcome': 'error', 'expected': 'd', 'next_key': None}],
            'state': make_state(error_count=2),
            'level_change': None
        }
        self.ui.read_line = AsyncMock(side_effect=['x', 'exit'])

        asyncio.run(self.ui._run())

        self.client.press_keys.assert_called_once_with(['x'])
        self.client.complete_intro.assert_not_called()

    def test_run_without_server(self):
        self.client.health_check.side_effect = ConnectionError('refused')
        self.ui.read_line = AsyncMock()

        asyncio.run(self.ui._run())

        self.client.start.assert_not_called()
        self.ui.read_line.assert_not_awaited()

    def test_show_avatar_prints_transitions_only(self):
        avatar = MagicMock()
        avatar.name = 'tiger'
        with patch('builtins.print') as mock_print:
            for state in (TALK, TALK, TALK, IDLE, HIDDEN):
                self.ui.show_avatar(state, avatar)
        self.assertEqual(mock_print.call_count, 2)


if __name__ == '__main__':
    unittest.main()
