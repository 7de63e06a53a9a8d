"""REST API client for alefbet server."""

import requests


class AlefbetAPIClient:
    """Client for communicating with the alefbet REST API."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        response = self.session.get(f"{self.base_url}{endpoint}", params=params or {})
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        response = self.session.post(f"{self.base_url}{endpoint}", json=data or {})
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_state(self) -> dict:
        """Get the current round, feedback and score."""
        return self._get("/api/state")

    def new_round(self) -> dict:
        """Skip to a new round."""
        return self._post("/api/round")

    def choose_image(self, item: dict) -> dict:
        """Choose one of the picture options."""
        return self._post("/api/answer/image", {
            'word': item['word'],
            'symbol': item['symbol']
        })

    def choose_symbol(self, symbol: str) -> dict:
        """Choose one of the letter options."""
        return self._post("/api/answer/symbol", {'symbol': symbol})

    def choose_word(self, word: str) -> dict:
        """Choose one of the word options."""
        return self._post("/api/answer/word", {'word': word})

    def submit_drawing(self, passed: bool, score: float = None) -> dict:
        """Report the verdict for a drawing round."""
        return self._post("/api/drawing", {'passed': passed, 'score': score})

    def move_letter(self, from_area: str, from_index: int, to_area: str, to_index: int) -> dict:
        """Move a scramble letter between bank and slots."""
        return self._post("/api/scramble/move", {
            'from_area': from_area,
            'from_index': from_index,
            'to_area': to_area,
            'to_index': to_index
        })

    def toggle_recording(self) -> dict:
        """Pause or resume history recording."""
        return self._post("/api/recording/toggle")

    def get_stats(self) -> dict:
        """Get per-letter statistics."""
        return self._get("/api/stats")

    def clear_history(self) -> dict:
        """Delete all recorded answers."""
        response = self.session.delete(f"{self.base_url}/api/history")
        response.raise_for_status()
        return response.json()
