# power_countdown/games/countdown/services/puzzle_source.py
"""
Puzzle and hint providers.

Two sources share one small interface (generate_puzzle / get_hint):

  GeminiPuzzleSource  asks Gemini over its REST API
  LocalPuzzleSource   serves curated targets, no network

Callers go through fetch_puzzle()/fetch_hint(), which never raise: any
provider failure turns into the fallback puzzle or fallback hint.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
import json
import logging
import random

import requests
from requests.adapters import HTTPAdapter

from ...core.coerce_utils import coerce_target, coerce_number_list
from ..logic.cards import FIXED_DECK
from .prompts import PUZZLE_SCHEMA, hint_prompt, puzzle_prompt

logger = logging.getLogger(__name__)

FALLBACK_TARGET = 80  # 16 * 5
EMPTY_HINT = "Check if you can make roots using reciprocals."
FALLBACK_HINT = "Remember that 243 is 3^5 and 343 is 7^3."
PUZZLE_ERROR_MESSAGE = "Failed to load a new puzzle. Here is a standard one instead."

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class PuzzleSourceError(RuntimeError):
    pass


@dataclass(frozen=True)
class PuzzleData:
    target: int
    numbers: Tuple[float, ...] = FIXED_DECK


def fallback_puzzle() -> PuzzleData:
    return PuzzleData(target=FALLBACK_TARGET, numbers=FIXED_DECK)


class PuzzleSource(Protocol):
    def generate_puzzle(self, difficulty: str) -> PuzzleData:
        ...

    def get_hint(self, target: float, values: Sequence[float]) -> str:
        ...


# ============================================================
# Gemini
# ============================================================

def _build_session() -> requests.Session:
    s = requests.Session()
    adapter = HTTPAdapter(pool_connections=4, pool_maxsize=8, max_retries=0)
    s.mount("https://", adapter)
    s.headers.update({"Content-Type": "application/json"})
    return s


class GeminiClient:
    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash",
                 timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or _build_session()

    def generate_text(self, prompt: str, schema: Optional[Dict[str, Any]] = None) -> str:
        if not self.api_key:
            raise PuzzleSourceError("API key missing")

        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            }

        try:
            r = self.session.post(
                GEMINI_URL.format(model=self.model),
                json=body,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except requests.exceptions.RequestException as exc:
            raise PuzzleSourceError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise PuzzleSourceError("Gemini returned a non-JSON body") from exc

        try:
            parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return ""
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


class GeminiPuzzleSource:
    def __init__(self, client: GeminiClient, deck: Sequence[float] = FIXED_DECK):
        self.client = client
        self.deck = tuple(deck)

    def generate_puzzle(self, difficulty: str) -> PuzzleData:
        text = self.client.generate_text(puzzle_prompt(difficulty, self.deck), schema=PUZZLE_SCHEMA)
        if not text:
            raise PuzzleSourceError("No response from AI")
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise PuzzleSourceError(f"Puzzle is not JSON: {text[:80]!r}") from exc
        if not isinstance(data, dict):
            raise PuzzleSourceError("Puzzle JSON is not an object")

        target = coerce_target(data.get("target"))
        if target is None:
            raise PuzzleSourceError(f"Unusable target: {data.get('target')!r}")

        returned = coerce_number_list(data.get("numbers"))
        if sorted(returned) != sorted(float(n) for n in self.deck):
            logger.info("Provider returned numbers %s; using the fixed deck", returned)
        # the deck never comes from the provider
        return PuzzleData(target=target, numbers=self.deck)

    def get_hint(self, target: float, values: Sequence[float]) -> str:
        return self.client.generate_text(hint_prompt(target, values, self.deck))


# ============================================================
# Local
# ============================================================

# Each target below is reachable from the fixed deck, using each card at most once.
LOCAL_TARGETS: Dict[str, List[int]] = {
    # 2*5, 16*5, 2^5, 5^2, 16^2, 2*512, 243*5, 2*343
    "EASY": [10, 80, 32, 25, 256, 1024, 1215, 686],
    # 16^(1/2), (16^(1/2))*5, 2*5*16, 5*512, 3^2 with 3 = 243^(1/5), 2^16
    "MEDIUM": [4, 20, 160, 2560, 9, 65536],
    # 243^(1/5), 3*2, 3*16, 343^(1/3), 512^(1/3), 7*2
    "HARD": [3, 6, 48, 7, 8, 14],
}

LOCAL_HINTS = [
    FALLBACK_HINT,
    "A reciprocal turns a power into a root: 16^(1/2) = 4.",
    "512 is 8^3, so a reciprocal of 3 unlocks 8.",
    "Try multiplying two deck numbers before reaching for powers.",
    EMPTY_HINT,
]


class LocalPuzzleSource:
    def __init__(self, rng: Optional[random.Random] = None, deck: Sequence[float] = FIXED_DECK):
        self.rng = rng or random.Random()
        self.deck = tuple(deck)

    def generate_puzzle(self, difficulty: str) -> PuzzleData:
        pool = LOCAL_TARGETS.get(difficulty) or LOCAL_TARGETS["MEDIUM"]
        return PuzzleData(target=self.rng.choice(pool), numbers=self.deck)

    def get_hint(self, target: float, values: Sequence[float]) -> str:
        return LOCAL_HINTS[int(target) % len(LOCAL_HINTS)]


# ============================================================
# Safe entry points
# ============================================================

def fetch_puzzle(source: PuzzleSource, difficulty: str) -> Tuple[PuzzleData, Optional[str]]:
    """(puzzle, error_message). On failure the fallback puzzle comes with a message for the player."""
    try:
        puzzle = source.generate_puzzle(difficulty)
    except Exception:
        logger.exception("Failed to generate %s puzzle; using fallback", difficulty)
        return fallback_puzzle(), PUZZLE_ERROR_MESSAGE
    return PuzzleData(target=puzzle.target, numbers=FIXED_DECK), None


def fetch_hint(source: PuzzleSource, target: float, values: Sequence[float]) -> str:
    try:
        text = source.get_hint(target, values)
    except Exception as exc:
        logger.warning("Hint request failed: %s", exc)
        return FALLBACK_HINT
    return (text or "").strip() or EMPTY_HINT


def build_source(config: Dict[str, Any]) -> PuzzleSource:
    """Pick the provider from app config."""
    kind = str(config.get("PUZZLE_SOURCE") or "").strip().lower()
    api_key = config.get("GEMINI_API_KEY")
    if kind == "local" or (not kind and not api_key):
        logger.info("Using local puzzle source")
        return LocalPuzzleSource()
    client = GeminiClient(
        api_key=api_key,
        model=config.get("GEMINI_MODEL", "gemini-2.5-flash"),
        timeout=float(config.get("GEMINI_TIMEOUT", 10)),
    )
    logger.info("Using Gemini puzzle source (model=%s)", client.model)
    return GeminiPuzzleSource(client)
