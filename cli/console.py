"""Console UI for tippen application."""

import asyncio
import logging
import time

from core import tones
from core.avatar import TALK, IDLE
from core.config import WORD_COMPLETE_DELAY_MS, LEVEL_UP_DELAY_MS
from core.narration import Narrator
from cli.api_client import TippenAPIClient

logger = logging.getLogger(__name__)

PROGRESS_WIDTH = 20


class ConsoleUI:
    """Console user interface for tippen application."""

    def __init__(self, client: TippenAPIClient, narrator: Narrator, output):
        self.client = client
        self.narrator = narrator
        self.output = output
        self.state = None
        self._avatar_state = None

    def print_levels(self, levels: list[dict]):
        print('\n' + '=' * 50)
        print('LEVELS')
        print('=' * 50)
        for level in levels:
            print(f"  {level['index']} - {level['name']} ({level['word_count']} Wörter)")
        print('=' * 50)

    def print_progress_bar(self, state: dict):
        filled = state['progress'] * PROGRESS_WIDTH // 100
        bar = '#' * filled + '-' * (PROGRESS_WIDTH - filled)
        print(f"Level {state['level']} ({state['level_name']}) [{bar}] {state['progress']}%"
              f" | Richtig: {state['correct_count']} | Fehler: {state['error_count']}")

    def print_word(self, state: dict):
        """Print the word to type with icons and the finger for the next key."""
        icons = ' '.join(state['current_icons'])
        print('\n' + '-' * 40)
        self.print_progress_bar(state)
        print(f"\n>>> {state['display']}   {icons}")
        hint = state.get('next_key')
        if hint:
            key = 'Leertaste' if hint['char'] == ' ' else hint['char']
            print(f"    Nächste Taste: {key} ({hint['finger']})")

    def print_status(self, state: dict):
        print('\n' + '=' * 50)
        print('STATUS')
        print('=' * 50)
        print(f"Level: {state['level']}/{state['level_count'] - 1} ({state['level_name']})")
        print(f"Fortschritt: {state['progress']}%")
        print(f"Richtig: {state['correct_count']}")
        print(f"Fehler: {state['error_count']}")
        print('=' * 50 + '\n')

    def print_keyboard(self, keyboard: dict):
        """Print the keyboard of a level. Keys the level does not use are dots."""
        print(f"\nTastatur (Level {keyboard['level']}):")
        for row in keyboard['rows']:
            left = ' '.join(key['label'] if key['enabled'] else '·' for key in row['left'])
            right = ' '.join(key['label'] if key['enabled'] else '·' for key in row['right'])
            print(f"  {left}   {right}".rstrip())

    def show_avatar(self, avatar_state: str, avatar):
        """Avatar observer: print state transitions, not every frame."""
        logger.debug(f"{avatar.name} {avatar_state} frame {avatar.frame} at {avatar.offset()}")
        if avatar_state == self._avatar_state:
            return
        self._avatar_state = avatar_state
        if avatar_state == TALK:
            print(f"  ({avatar.name} spricht...)")
        elif avatar_state == IDLE:
            print(f"  ({avatar.name} hört zu)")

    async def play_intro(self, state: dict) -> dict:
        """Narrate the level intro, then tell the server to pick the first word.

        A game that is already running (reconnect with the same user) has no
        intro playing and keeps its current word.
        """
        if not state.get('is_level_intro_playing'):
            return state
        await self.narrator.play_level_intro(state.get('intro'))
        return self.client.complete_intro()

    async def speak_current_word(self):
        if self.state and self.state['current_word']:
            await self.narrator.speak_and_wait(self.state['current_word'])

    async def handle_level_change(self, change: dict) -> dict:
        """Fanfare, praise, and intro of the new level."""
        started = time.monotonic()
        self.output.play_pcm(tones.level_up_fanfare())
        print(f"\n*** LEVEL UP! Jetzt Level {change['level']} ***\n")
        if change.get('success_message'):
            await self.narrator.play_success_message(change['success_message'])
        await self.narrator.play_level_intro(change.get('intro'))
        remaining = LEVEL_UP_DELAY_MS / 1000 - (time.monotonic() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)
        return self.client.complete_intro()

    async def submit(self, text: str) -> None:
        """Send each typed character as a keystroke and react to the outcomes."""
        response = self.client.press_keys(list(text))
        self.state = response['state']
        word_completed = False
        for result in response['results']:
            outcome = result['outcome']
            if outcome == 'correct':
                self.output.play_pcm(tones.key_correct_sound())
            elif outcome == 'error':
                self.output.play_pcm(tones.key_error_sound())
                print(f"  ✗ '{result['key']}' statt '{result['expected']}'")
            elif outcome == 'word_complete':
                word_completed = True

        if response.get('level_change'):
            self.state = await self.handle_level_change(response['level_change'])
            await self.show_new_word()
        elif word_completed:
            self.output.play_pcm(tones.word_complete_sound())
            print('\n  *** Super! ***')
            await asyncio.sleep(WORD_COMPLETE_DELAY_MS / 1000)
            self.state = self.client.next_word()
            await self.show_new_word()
        else:
            self.print_word(self.state)

    async def show_new_word(self):
        self.print_word(self.state)
        await self.speak_current_word()

    async def change_level(self, request) -> None:
        self.state = request()
        self.state = await self.play_intro(self.state)
        await self.show_new_word()

    async def read_line(self) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, input, '==> ')

    def run(self):
        """Run the main application loop."""
        asyncio.run(self._run())

    async def _run(self):
        try:
            health = self.client.health_check()
            print(f"Connected to tippen server ({health['service']})")
        except Exception as e:
            print(f"Error: Cannot connect to server at {self.client.base_url}: {e}")
            print("Make sure the server is running: python run_server.py")
            return

        self.print_levels(self.client.get_levels())
        print('\nTippe das angezeigte Wort und drücke Enter.')
        print('Befehle: "status", "keys", "up", "down", "level N", leere Zeile = Wort nochmal hören, "exit"\n')

        self.state = self.client.start()
        self.state = await self.play_intro(self.state)
        await self.show_new_word()

        while True:
            line = await self.read_line()
            command = line.strip().lower()

            if command == 'exit':
                print('Tschüss!')
                return
            elif command == 'status':
                self.print_status(self.client.get_status())
                self.print_word(self.state)
            elif command == 'up':
                await self.change_level(self.client.level_up)
            elif command == 'down':
                await self.change_level(self.client.level_down)
            elif command == 'keys':
                self.print_keyboard(self.client.get_keyboard())
            elif command.startswith('level '):
                try:
                    level = int(command.split()[1])
                except ValueError:
                    print('Usage: level N')
                    continue
                try:
                    await self.change_level(lambda: self.client.set_level(level))
                except Exception as e:
                    print(f"Error changing level: {e}")
            elif command == '':
                await self.speak_current_word()
            else:
                try:
                    await self.submit(line)
                except Exception as e:
                    print(f"Error sending keys: {e}")
