# power_countdown/games/countdown/player.py
"""
One player's live game, as held by the web layer.

GameState transitions are pure; PlayerSession is the mutable holder that
serialises them behind a lock and runs the two slow provider calls
(puzzle, hint) without holding that lock. Each provider call remembers the
generation it was launched for and its result is dropped if a newer puzzle
has been started in the meantime.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import threading

from ..core.coerce_utils import normalize_difficulty
from ..core.playflow import Playflow
from .logic.state import GameState, Action, Combine, Undo, reduce, start, state_payload
from .services.puzzle_source import PuzzleSource, fetch_hint, fetch_puzzle

logger = logging.getLogger(__name__)


class PlayerSession:
    def __init__(self, session_id: str, difficulty: str = "MEDIUM"):
        self.session_id = session_id
        self.difficulty = normalize_difficulty(difficulty)
        self.state = GameState(difficulty=self.difficulty)
        self.started = False
        self.generation = 0          # bumped on every applied puzzle
        self.loading = False         # puzzle request outstanding
        self.loading_hint = False    # hint request outstanding
        self.hint: Optional[str] = None
        self.error: Optional[str] = None
        self.playflow = Playflow(session_id=session_id)
        self._lock = threading.Lock()

    # ---- puzzle ----
    def new_puzzle(self, source: PuzzleSource, difficulty: Optional[str] = None) -> bool:
        """Fetch and start a puzzle. False when one is already loading or the result went stale."""
        with self._lock:
            if self.loading:
                logger.debug("[%s] puzzle request ignored, one is in flight", self.session_id)
                return False
            if difficulty is not None:
                self.difficulty = normalize_difficulty(difficulty)
            ticket = self.generation
            wanted = self.difficulty
            self.loading = True
            self.error = None
            self.hint = None

        try:
            puzzle, error = fetch_puzzle(source, wanted)
        except Exception:
            with self._lock:
                self.loading = False
            raise

        with self._lock:
            self.loading = False
            if self.generation != ticket:
                logger.info("[%s] dropping stale puzzle for generation %d", self.session_id, ticket)
                return False
            self._start_locked(puzzle.target, puzzle.numbers, wanted)
            self.error = error
            logger.info("[%s] new %s puzzle: target=%s", self.session_id, wanted, puzzle.target)
            return True

    def _start_locked(self, target, numbers, difficulty: str) -> None:
        self.generation += 1
        self.difficulty = difficulty
        self.state = start(target, numbers, difficulty=difficulty, generation=self.generation)
        self.started = True
        self.hint = None
        self.playflow.start_puzzle(self.generation, target, difficulty)

    # ---- moves ----
    def apply(self, action: Action) -> bool:
        """Run one transition; True when the state changed."""
        with self._lock:
            before = self.state
            after = reduce(before, action)
            if after is before:
                return False
            self.state = after
            if isinstance(action, Combine):
                self.playflow.combined(after.solved)
                self.hint = None
            elif isinstance(action, Undo):
                self.playflow.undone()
                self.hint = None
            return True

    # ---- hint ----
    def request_hint(self, source: PuzzleSource) -> Optional[str]:
        with self._lock:
            if self.loading_hint or self.state.solved or not self.started:
                return None
            ticket = self.generation
            target = self.state.target
            values = self.state.available_values()
            self.loading_hint = True

        try:
            text = fetch_hint(source, target, values)
        except Exception:
            with self._lock:
                self.loading_hint = False
            raise

        with self._lock:
            self.loading_hint = False
            if self.generation != ticket:
                logger.info("[%s] dropping stale hint for generation %d", self.session_id, ticket)
                return None
            self.hint = text
            self.playflow.hinted()
            return text

    # ---- readout ----
    def payload(self) -> Dict[str, Any]:
        with self._lock:
            out = state_payload(self.state)
            out.update(
                started=self.started,
                loading=self.loading,
                loading_hint=self.loading_hint,
                hint=self.hint,
                error=self.error,
                difficulty=self.difficulty,
            )
            return out

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return self.playflow.summary()
