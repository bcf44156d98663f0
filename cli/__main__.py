"""Entry point for tippen CLI client."""

import argparse
import logging
import sys

from core.avatar import TalkingAvatar
from core.config import DEFAULT_AVATAR
from core.narration import Narrator
from cli.api_client import TippenAPIClient
from cli.audio import LocalAudioSource, ServerAudioSource, PygameAudioOutput
from cli.console import ConsoleUI


def show_text(text: str):
    if text:
        print(f"  {text}")


def main():
    parser = argparse.ArgumentParser(description='Tippen - German typing practice')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    parser.add_argument(
        '--audio-dir',
        default=None,
        help='Play pre-generated audio from this local directory instead of the server'
    )
    parser.add_argument(
        '--avatar',
        default=DEFAULT_AVATAR,
        help=f'Talking avatar (default: {DEFAULT_AVATAR})'
    )
    parser.add_argument('--verbose', action='store_true', help='Show debug logging')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    client = TippenAPIClient(base_url=args.server, user_id=args.user)
    source = LocalAudioSource(args.audio_dir) if args.audio_dir else ServerAudioSource(client)
    output = PygameAudioOutput()
    avatar = TalkingAvatar(client.get_avatar_config)
    narrator = Narrator(source, output, avatar=avatar, display=show_text, avatar_name=args.avatar)
    ui = ConsoleUI(client, narrator, output)
    avatar.observers.append(ui.show_avatar)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nTschüss!')
        sys.exit(0)
    finally:
        avatar.dispose()


if __name__ == '__main__':
    main()
