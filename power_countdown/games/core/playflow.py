# power_countdown/games/core/playflow.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, List
from time import time

Outcome = str  # 'solved'|'abandoned'


def _now_ms() -> int:
    return int(time() * 1000)


@dataclass
class PuzzleRun:
    generation: int
    target: float
    difficulty: str
    started_at_ms: int = field(default_factory=_now_ms)
    ended_at_ms: Optional[int] = None
    combines: int = 0
    undos: int = 0
    hints: int = 0
    solved: bool = False
    final_outcome: Optional[Outcome] = None

    def mark_end(self, outcome: Outcome):
        if self.ended_at_ms is None:
            self.ended_at_ms = _now_ms()
        self.final_outcome = outcome


@dataclass
class Playflow:
    """Per-player record of puzzles played this session."""
    session_id: str
    started_at_ms: int = field(default_factory=_now_ms)
    current: Optional[PuzzleRun] = None
    runs: Dict[int, PuzzleRun] = field(default_factory=dict)  # generation -> PuzzleRun

    # ---- lifecycle ----
    def start_puzzle(self, generation: int, target: float, difficulty: str):
        # a puzzle left hanging counts as abandoned
        if self.current and not self.current.final_outcome:
            self.current.mark_end('abandoned')
        run = PuzzleRun(generation=generation, target=target, difficulty=difficulty)
        self.runs[generation] = run
        self.current = run

    def combined(self, solved: bool):
        if not self.current:
            return
        self.current.combines += 1
        if solved:
            self.current.solved = True
            self.current.mark_end('solved')

    def undone(self):
        if not self.current:
            return
        self.current.undos += 1
        # undo re-opens a solved puzzle
        if self.current.final_outcome == 'solved':
            self.current.solved = False
            self.current.final_outcome = None
            self.current.ended_at_ms = None

    def hinted(self):
        if self.current:
            self.current.hints += 1

    # ---- readout ----
    def summary(self) -> Dict:
        totals = dict(played=len(self.runs), solved=0, solved_no_hint=0, abandoned=0,
                      combines=0, undos=0, hints=0)
        by_difficulty: Dict[str, Dict[str, int]] = {}
        per_puzzle: List[Dict] = []

        for gen in sorted(self.runs):
            it = self.runs[gen]
            row = by_difficulty.setdefault(it.difficulty, {"played": 0, "solved": 0})
            row["played"] += 1
            if it.solved:
                totals['solved'] += 1
                row["solved"] += 1
                if it.hints == 0:
                    totals['solved_no_hint'] += 1
            if it.final_outcome == 'abandoned':
                totals['abandoned'] += 1
            totals['combines'] += it.combines
            totals['undos'] += it.undos
            totals['hints'] += it.hints

            per_puzzle.append(dict(
                generation=gen,
                target=it.target,
                difficulty=it.difficulty,
                final_outcome=it.final_outcome,
                combines=it.combines,
                undos=it.undos,
                hints=it.hints,
                solved=it.solved,
                started_at_ms=it.started_at_ms,
                ended_at_ms=it.ended_at_ms,
            ))

        return dict(
            session_id=self.session_id,
            started_at_ms=self.started_at_ms,
            totals=totals,
            by_difficulty=by_difficulty,
            per_puzzle=per_puzzle,
        )
