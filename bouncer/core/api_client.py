# ABOUTME: HTTP client for the live venue admission game API
# ABOUTME: Single responsibility - handle HTTP communication, retries and response parsing

import os
import requests
import logging
import time
import random
import threading
from typing import Dict, Optional, Any
from .domain import GameState, Person, Constraint, AttributeStatistics


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://berghain.challenges.listenlabs.ai"
DEFAULT_PLAYER_ID = "00000000-0000-0000-0000-000000000000"


class BouncerAPIError(Exception):
    """Non-retryable or exhausted-retry failure talking to the game API."""
    pass


class GameFinishedError(BouncerAPIError):
    """The server says the game is already over. Terminal, never retried."""
    pass


def parse_person(data: Optional[Dict[str, Any]]) -> Optional[Person]:
    if not data:
        return None
    try:
        return Person(index=int(data["personIndex"]), attributes=dict(data["attributes"]))
    except (KeyError, TypeError, ValueError) as e:
        raise BouncerAPIError(f"Malformed person payload: {e}")


class BouncerAPIClient:
    """HTTP client mirroring the two endpoints of the game."""

    # Global semaphore to limit concurrent API calls across all instances
    _api_concurrency_limit = int(os.getenv("BOUNCER_MAX_API_CONCURRENCY", "10"))
    _api_semaphore = threading.Semaphore(_api_concurrency_limit)

    def __init__(self, base_url: str = DEFAULT_BASE_URL,
                 player_id: str = DEFAULT_PLAYER_ID,
                 timeout: int = 60, max_retries: int = 6,
                 base_delay: float = 1.5, max_delay: float = 10.0):
        # Allow overrides via environment
        self.base_url = os.getenv("BOUNCER_BASE_URL", base_url).rstrip("/")
        self.player_id = os.getenv("BOUNCER_PLAYER_ID", player_id)
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.session = requests.Session()
        self.default_headers = {
            "User-Agent": "python-requests",
            "Accept": "application/json",
            "Connection": "close",
        }

    def start_new_game(self, scenario: int) -> GameState:
        """Start a new game and return initial game state."""
        url = f"{self.base_url}/new-game"
        params = {
            "scenario": scenario,
            "playerId": self.player_id
        }
        data = self._get_with_backoff(url, params)

        try:
            constraints = [
                Constraint(c["attribute"], int(c["minCount"]))
                for c in data["constraints"]
            ]

            stats = data["attributeStatistics"]
            statistics = AttributeStatistics(
                frequencies=stats["relativeFrequencies"],
                correlations=stats.get("correlations", {})
            )

            game_state = GameState(
                game_id=data["gameId"],
                scenario=scenario,
                constraints=constraints,
                statistics=statistics
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BouncerAPIError(f"Invalid API response: {e}")

        logger.info(f"Started new game {game_state.game_id[:8]} for scenario {scenario}")
        return game_state

    def decide_and_next(self, game_state: GameState, person_index: int,
                        accept: Optional[bool] = None) -> Dict[str, Any]:
        """Submit the decision for person_index (if any) and get the next person or the result."""
        url = f"{self.base_url}/decide-and-next"
        params = {
            "gameId": game_state.game_id,
            "personIndex": person_index
        }

        if accept is not None:
            params["accept"] = str(accept).lower()

        response = self._get_with_backoff(url, params)
        if "status" not in response:
            raise BouncerAPIError(f"Invalid API response, missing status: {response}")
        return response

    def get_first_person(self, game_state: GameState) -> Optional[Person]:
        """Fetch person 0 without deciding anything."""
        response = self.decide_and_next(game_state, 0)
        if response["status"] != "running":
            return None
        return parse_person(response.get("nextPerson"))

    def close(self):
        """Clean up resources."""
        self.session.close()

    # --- Internal helpers ---
    def _backoff_delay(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 2))) + random.uniform(0, 0.5)

    def _get_with_backoff(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET with bounded exponential backoff on network errors, 429 and 5xx."""
        last_exc: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            if attempt > 1:
                time.sleep(self._backoff_delay(attempt))
            try:
                with self._api_semaphore:
                    resp = requests.get(url, params=params, headers=self.default_headers,
                                        timeout=(10, self.timeout))
            except requests.RequestException as e:
                logger.warning(f"Request to {url} failed (attempt {attempt}/{self.max_retries}): {e}")
                last_exc = e
                continue

            if resp.status_code == 429:
                ra = resp.headers.get("Retry-After")
                if ra:
                    try:
                        time.sleep(min(15.0, float(ra)))
                    except ValueError:
                        logger.debug(f"Ignoring unparseable Retry-After header: {ra}")
                logger.warning(f"Rate limited by {url} (attempt {attempt}/{self.max_retries})")
                last_exc = BouncerAPIError("HTTP 429 Too Many Requests")
                continue
            if 500 <= resp.status_code < 600:
                logger.warning(f"Server error {resp.status_code} from {url} (attempt {attempt}/{self.max_retries})")
                last_exc = BouncerAPIError(f"HTTP {resp.status_code}")
                continue
            if resp.status_code == 400 and "finished" in resp.text.lower():
                raise GameFinishedError(f"Game already finished: {resp.text.strip()}")
            if resp.status_code >= 400:
                raise BouncerAPIError(f"HTTP {resp.status_code}: {resp.text.strip()}")

            try:
                return resp.json()
            except ValueError as e:
                raise BouncerAPIError(f"Malformed JSON from {url}: {e}")

        raise BouncerAPIError(f"HTTP request failed after retries: {last_exc}")
