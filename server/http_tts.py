"""Shared HTTP plumbing for text-to-speech providers."""

import logging
import os
import threading
import time

import requests

from core.interfaces import TTSProvider

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60


class HTTPTTSProvider(TTSProvider):
    """Posts a JSON body to a TTS endpoint and writes the returned audio bytes."""

    def __init__(self, api_key: str, session: requests.Session = None):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.stats = {'requests': 0, 'failures': 0, 'bytes': 0, 'total_ms': 0}
        self._stats_lock = threading.Lock()

    def _record(self, **counts) -> None:
        # Providers are shared by the executor threads of the generation script
        with self._stats_lock:
            for key, value in counts.items():
                self.stats[key] += value

    def _post_and_save(self, url: str, headers: dict, body: dict, output_path: str) -> None:
        start_time = time.time()
        self._record(requests=1)
        try:
            response = self.session.post(url, headers=headers, json=body, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            self._record(failures=1)
            raise RuntimeError(f"Request error: {e}") from e
        finally:
            self._record(total_ms=int((time.time() - start_time) * 1000))

        if not response.ok:
            self._record(failures=1)
            raise RuntimeError(
                f"{self.name} API error: {response.status_code} {response.reason} - {response.text}"
            )

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, 'wb') as f:
            f.write(response.content)
        self._record(bytes=len(response.content))
        logger.debug(f"{self.name}: wrote {len(response.content)} bytes to {output_path}")

    def get_stats(self) -> dict:
        with self._stats_lock:
            return dict(self.stats)
