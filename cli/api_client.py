"""REST API client for tippen server."""

import requests


class TippenAPIClient:
    """Client for communicating with the tippen REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        if data is None:
            data = {}
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_levels(self) -> list[dict]:
        return self._get("/api/levels")['levels']

    def get_keyboard(self, level: int = None) -> dict:
        params = {'level': level} if level is not None else None
        return self._get("/api/keyboard", params)

    def start(self) -> dict:
        """Start the game. Returns state with the intro of the current level."""
        return self._post("/api/start")

    def complete_intro(self) -> dict:
        return self._post("/api/intro/complete")

    def press_keys(self, keys: list[str]) -> dict:
        """Send keystrokes. Returns {results, state, level_change}."""
        return self._post("/api/keys", {'keys': list(keys)})

    def next_word(self) -> dict:
        return self._post("/api/next")

    def level_up(self) -> dict:
        return self._post("/api/level/up")

    def level_down(self) -> dict:
        return self._post("/api/level/down")

    def set_level(self, level: int) -> dict:
        return self._post(f"/api/level/{level}")

    def get_status(self) -> dict:
        return self._get("/api/status")

    def fetch_audio(self, filename: str) -> tuple[bytes, str] | None:
        """Download a pre-generated audio file. Returns (data, content_type) or None if missing."""
        response = self.session.get(f"{self.base_url}/audio/{filename}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content, response.headers.get('content-type', '')

    def get_avatar_config(self, name: str) -> dict:
        response = self.session.get(f"{self.base_url}/avatars/{name}/talk-animation.json")
        response.raise_for_status()
        return response.json()
