#!/usr/bin/env python3
"""Pre-generate pronunciation audio for all level words, level intros and success messages.

Usage:
    python -m scripts.generate_audio                      # clean up and generate missing files
    python -m scripts.generate_audio --list-audio-status  # only report missing/unused files

Provider selection: TTS_PROVIDER from the environment (or .env), then the
generate-audio.config JSON file next to this script, then 'elevenlabs'.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv

from core.config import (
    DEFAULT_TTS_PROVIDER, DEFAULT_CONCURRENCY, REQUEST_DELAY_SECONDS,
    SUCCESS_MESSAGES_FILE, AUDIO_EXTENSION
)
from core.interfaces import TTSProvider
from core.utils import audio_filename
from server.elevenlabs_provider import ElevenLabsProvider
from server.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'generate-audio.config')
SETTING_KEYS = ['TTS_PROVIDER', 'OPENAI_VOICE', 'ELEVENLABS_VOICE']

PROVIDERS = {
    'elevenlabs': ElevenLabsProvider,
    'openai': OpenAIProvider,
}


def load_settings(config_path: str = CONFIG_FILE, environ=None) -> dict:
    """Resolve provider and voices. Environment wins over the config file."""
    environ = os.environ if environ is None else environ
    settings = {key: environ.get(key) for key in SETTING_KEYS}
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
            if isinstance(config, dict):
                for key in SETTING_KEYS:
                    value = config.get(key)
                    if not settings[key] and isinstance(value, str) and value.strip():
                        settings[key] = value.strip()
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring config file {config_path}: {e}")
    if not settings['TTS_PROVIDER']:
        settings['TTS_PROVIDER'] = DEFAULT_TTS_PROVIDER
    return settings


def get_concurrency(value=None, environ=None) -> int:
    environ = os.environ if environ is None else environ
    if value is None:
        value = environ.get('AUDIO_GEN_CONCURRENCY')
    try:
        concurrency = int(value)
    except (TypeError, ValueError):
        return DEFAULT_CONCURRENCY
    return concurrency if concurrency > 0 else DEFAULT_CONCURRENCY


def create_provider(settings: dict) -> TTSProvider:
    name = settings['TTS_PROVIDER']
    if name not in PROVIDERS:
        raise RuntimeError(f"Unknown TTS provider '{name}'. Choose one of: {', '.join(PROVIDERS)}")
    voice = settings.get('OPENAI_VOICE') if name == 'openai' else settings.get('ELEVENLABS_VOICE')
    return PROVIDERS[name](default_voice=voice)


def collect_words(data_dir: str) -> tuple[list[str], list[str]]:
    """Gather every text that needs audio from the JSON data files.

    Returns (words, expected_filenames), both unique and in first-seen order.
    Raises OSError or ValueError when the data cannot be read.
    """
    words = {}
    data_files = sorted(f for f in os.listdir(data_dir) if f.endswith('.json'))
    for filename in data_files:
        with open(os.path.join(data_dir, filename), 'r', encoding='utf-8') as f:
            data = json.load(f)

        if filename == SUCCESS_MESSAGES_FILE and isinstance(data, list):
            for message in data:
                if isinstance(message, dict) and isinstance(message.get('text'), str):
                    words[message['text']] = None
            continue

        if isinstance(data, list):
            # Legacy format: array of items. The level manifest (array of names) adds nothing.
            items = data
        elif isinstance(data, dict) and isinstance(data.get('items'), list):
            for key in ('name', 'description'):
                if isinstance(data.get(key), str) and data[key]:
                    words[data[key]] = None
            items = data['items']
        else:
            continue
        for item in items:
            if isinstance(item, dict) and isinstance(item.get('text'), str):
                words[item['text']] = None

    word_list = list(words)
    expected = list(dict.fromkeys(audio_filename(w) for w in word_list))
    return word_list, expected


def audio_status(expected: list[str], audio_dir: str) -> tuple[list[str], list[str]]:
    """Get (missing, unused) audio file names."""
    actual = set()
    if os.path.isdir(audio_dir):
        actual = {f for f in os.listdir(audio_dir) if f.endswith(AUDIO_EXTENSION)}
    expected_set = set(expected)
    missing = [f for f in expected if f not in actual]
    unused = sorted(actual - expected_set)
    return missing, unused


def print_status(missing: list[str], unused: list[str]) -> None:
    print("=== Audio File Status ===")
    print(f"Missing audio files ({len(missing)}):")
    for name in missing or ['None']:
        print(f"  {name}")
    print(f"\nUnused audio files ({len(unused)}):")
    for name in unused or ['None']:
        print(f"  {name}")


def cleanup_unused(expected: list[str], audio_dir: str) -> list[str]:
    """Delete audio files no data file refers to anymore."""
    _, unused = audio_status(expected, audio_dir)
    for name in unused:
        os.remove(os.path.join(audio_dir, name))
        logger.info(f"Removed unused audio file: {name}")
    if unused:
        logger.info(f"Removed {len(unused)} unused audio file(s).")
    else:
        logger.info("No unused audio files to remove.")
    return unused


def generate_audio_for_word(provider: TTSProvider, word: str, audio_dir: str) -> str:
    """Generate one file. Returns 'skipped', 'generated' or 'failed'; never raises for API errors."""
    filename = audio_filename(word)
    path = os.path.join(audio_dir, filename)
    if os.path.exists(path):
        logger.info(f'Skipping "{word}", file already exists.')
        return 'skipped'

    logger.info(f'Generating audio for "{word}" using {provider.name}...')
    try:
        provider.generate_audio(word, path)
    except (RuntimeError, OSError) as e:
        logger.error(f'Error generating audio for "{word}": {e}')
        return 'failed'
    logger.info(f"Successfully saved {filename}")
    return 'generated'


async def process_with_concurrency_limit(items: list, worker, concurrency: int = DEFAULT_CONCURRENCY) -> list:
    """Run an async worker over items with at most `concurrency` in flight.

    Dispatches until the limit is reached, then refills one slot per finished
    task. A failing item is logged and yields None; the rest keep going.
    Results are returned in item order.
    """
    concurrency = max(1, concurrency)
    results = [None] * len(items)
    pending = {}
    index = 0
    while index < len(items) or pending:
        while len(pending) < concurrency and index < len(items):
            task = asyncio.create_task(worker(items[index]))
            pending[task] = index
            index += 1
        done, _ = await asyncio.wait(pending.keys(), return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            i = pending.pop(task)
            try:
                results[i] = task.result()
            except Exception as e:
                logger.error(f"Error processing item {items[i]!r}: {e}")
    return results


async def generate_missing(provider: TTSProvider, words: list[str], audio_dir: str,
                           concurrency: int, delay: float = REQUEST_DELAY_SECONDS) -> list:
    loop = asyncio.get_running_loop()

    async def worker(word):
        status = await loop.run_in_executor(None, generate_audio_for_word, provider, word, audio_dir)
        # Small pause so the API is not hammered
        await asyncio.sleep(delay)
        return status

    return await process_with_concurrency_limit(words, worker, concurrency)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Pre-generate word audio with a TTS provider')
    parser.add_argument(
        '--list-missing-unused', '--list-audio-status',
        dest='list_mode', action='store_true',
        help='Only list missing and unused audio files'
    )
    parser.add_argument(
        '--data-dir',
        default=os.environ.get('TIPPEN_DATA_DIR') or os.path.join(PROJECT_ROOT, 'data'),
        help='Directory with level JSON files (default: data/)'
    )
    parser.add_argument(
        '--audio-dir',
        default=os.environ.get('TIPPEN_AUDIO_DIR') or os.path.join(PROJECT_ROOT, 'audio'),
        help='Directory for generated MP3 files (default: audio/)'
    )
    parser.add_argument(
        '--concurrency',
        type=int,
        default=None,
        help=f'Concurrent API requests (default: AUDIO_GEN_CONCURRENCY or {DEFAULT_CONCURRENCY})'
    )
    parser.add_argument(
        '--config',
        default=CONFIG_FILE,
        help='JSON config file with TTS_PROVIDER, OPENAI_VOICE, ELEVENLABS_VOICE'
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv(os.path.join(PROJECT_ROOT, '.env'))
    logging.basicConfig(level=logging.INFO, format='%(message)s')
    args = parse_args(argv)
    settings = load_settings(args.config)

    try:
        words, expected = collect_words(args.data_dir)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read data files from '{args.data_dir}': {e}")
        return 1

    if args.list_mode:
        missing, unused = audio_status(expected, args.audio_dir)
        print_status(missing, unused)
        return 0

    try:
        provider = create_provider(settings)
    except RuntimeError as e:
        logger.error(f"FATAL: {e}")
        return 1

    os.makedirs(args.audio_dir, exist_ok=True)
    cleanup_unused(expected, args.audio_dir)

    logger.info(f"Found {len(words)} unique words to process.")
    missing, _ = audio_status(expected, args.audio_dir)
    by_filename = {audio_filename(w): w for w in words}
    missing_words = [by_filename[f] for f in missing if f in by_filename]
    logger.info(f"Need to generate {len(missing_words)} audio files (missing).")
    if not missing_words:
        logger.info("No missing audio files. All files are up to date.")
        return 0

    concurrency = get_concurrency(args.concurrency)
    logger.info(f"Using concurrency limit: {concurrency}")
    results = asyncio.run(
        generate_missing(provider, missing_words, args.audio_dir, concurrency, REQUEST_DELAY_SECONDS)
    )

    failed = results.count('failed') + results.count(None)
    stats = provider.get_stats()
    logger.info(f"\nAll audio generation complete! {results.count('generated')} generated, "
                f"{failed} failed, {stats['bytes']} bytes in {stats['total_ms']}ms")
    return 0


def cli():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print('\nAborted.')
        sys.exit(130)


if __name__ == '__main__':
    cli()
