# power_countdown/games/countdown/logic/state.py
"""
Game session state for Power Countdown.

The session is an immutable GameState advanced by pure transitions:

    state = start(80, FIXED_DECK)
    state = reduce(state, Stage(CardRef(Location.HAND, "g0-c2"), Location.SLOT_A))
    state = reduce(state, Stage(CardRef(Location.HAND, "g0-c1"), Location.SLOT_B))
    state = reduce(state, Combine(Operation.MULTIPLY))   # 16 x 5 -> solved

A transition whose preconditions do not hold returns the very same object,
so callers can test `new is old` to see whether anything happened.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional, Sequence, Tuple, Union
import logging

from ...core.numeric import is_target_reached
from .cards import Card, FIXED_DECK, card_id, make_original_cards
from .combine import InvalidCombination, Operation, combine
from .slots import CardRef, Location, return_card, return_to_hand, stage

logger = logging.getLogger(__name__)

Hand = Tuple[Card, ...]


@dataclass(frozen=True)
class GameState:
    target: float = 0
    hand: Hand = ()
    slot_a: Optional[Card] = None
    slot_b: Optional[Card] = None
    history: Tuple[Hand, ...] = ()
    solved: bool = False
    difficulty: str = "MEDIUM"
    generation: int = 0
    next_seq: int = 0

    # ---- readout ----
    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def live_cards(self) -> Hand:
        """Hand plus whatever is staged, A then B."""
        staged = tuple(c for c in (self.slot_a, self.slot_b) if c is not None)
        return self.hand + staged

    def available_values(self):
        return [c.value for c in self.live_cards()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "hand": [c.to_dict() for c in self.hand],
            "slot_a": self.slot_a.to_dict() if self.slot_a else None,
            "slot_b": self.slot_b.to_dict() if self.slot_b else None,
            "history": [[c.to_dict() for c in snap] for snap in self.history],
            "solved": self.solved,
            "difficulty": self.difficulty,
            "generation": self.generation,
            "next_seq": self.next_seq,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameState":
        def opt(c):
            return Card.from_dict(c) if c else None
        return cls(
            target=d.get("target", 0),
            hand=tuple(Card.from_dict(c) for c in d.get("hand") or []),
            slot_a=opt(d.get("slot_a")),
            slot_b=opt(d.get("slot_b")),
            history=tuple(tuple(Card.from_dict(c) for c in snap) for snap in d.get("history") or []),
            solved=bool(d.get("solved", False)),
            difficulty=str(d.get("difficulty") or "MEDIUM"),
            generation=int(d.get("generation", 0)),
            next_seq=int(d.get("next_seq", 0)),
        )


# ============================================================
# Actions
# ============================================================

@dataclass(frozen=True)
class Stage:
    ref: CardRef
    slot: Location


@dataclass(frozen=True)
class ReturnToHand:
    ref: CardRef


@dataclass(frozen=True)
class ReturnCard:
    """Return a staged card by id, whichever slot holds it."""
    card_id: str


@dataclass(frozen=True)
class Combine:
    operation: Operation


@dataclass(frozen=True)
class Undo:
    pass


Action = Union[Stage, ReturnToHand, ReturnCard, Combine, Undo]


# ============================================================
# Transitions
# ============================================================

def start(target: float, numbers: Sequence[float] = FIXED_DECK,
          difficulty: str = "MEDIUM", generation: int = 0) -> GameState:
    hand = tuple(make_original_cards(numbers, generation))
    return GameState(
        target=target,
        hand=hand,
        difficulty=difficulty,
        generation=generation,
        next_seq=len(hand),
    )


def request_combine(state: GameState, op: Operation) -> GameState:
    if state.solved or state.slot_a is None or state.slot_b is None:
        return state

    snapshot = state.live_cards()
    try:
        outcome = combine(state.slot_a, state.slot_b, op, card_id(state.generation, state.next_seq))
    except InvalidCombination as e:
        logger.debug("combine rejected (%s): %s", op.value, e)
        return state

    new_card = outcome.card
    return replace(
        state,
        hand=state.hand + outcome.returned + (new_card,),
        slot_a=None,
        slot_b=None,
        history=state.history + (snapshot,),
        solved=is_target_reached(new_card.value, state.target),
        next_seq=state.next_seq + 1,
    )


def undo(state: GameState) -> GameState:
    """Restore the hand from before the last combine. Always re-opens play."""
    if not state.history:
        return state
    return replace(
        state,
        hand=state.history[-1],
        history=state.history[:-1],
        slot_a=None,
        slot_b=None,
        solved=False,
    )


def reduce(state: GameState, action: Action) -> GameState:
    if isinstance(action, Stage):
        return stage(state, action.ref, action.slot)
    if isinstance(action, ReturnToHand):
        return return_to_hand(state, action.ref)
    if isinstance(action, ReturnCard):
        return return_card(state, action.card_id)
    if isinstance(action, Combine):
        return request_combine(state, action.operation)
    if isinstance(action, Undo):
        return undo(state)
    raise TypeError(f"Unknown action: {action!r}")


def state_payload(state: GameState) -> Dict[str, Any]:
    """What a client needs to draw the board."""
    def card_view(c: Optional[Card]):
        if c is None:
            return None
        d = c.to_dict()
        # show the approximate value when the label is an expression
        d["approx"] = None if c.label.replace(".", "").isdigit() else round(c.value, 2)
        return d

    return {
        "target": state.target,
        "difficulty": state.difficulty,
        "hand": [card_view(c) for c in state.hand],
        "slot_a": card_view(state.slot_a),
        "slot_b": card_view(state.slot_b),
        "can_undo": state.can_undo,
        "solved": state.solved,
        "generation": state.generation,
    }
