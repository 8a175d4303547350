# power_countdown/games/countdown/logic/slots.py
"""
Slot pair transitions: moving cards between the hand and the two staging
slots. Every function takes a GameState and returns a GameState; a move that
refers to a card not at its claimed location returns the input unchanged.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState
    from .cards import Card


class Location(str, Enum):
    HAND = "hand"
    SLOT_A = "slotA"
    SLOT_B = "slotB"

    @property
    def is_slot(self) -> bool:
        return self is not Location.HAND

    @classmethod
    def parse(cls, raw) -> "Location":
        key = str(raw or "").strip()
        aliases = {"hand": "hand", "a": "slotA", "slot_a": "slotA", "slota": "slotA",
                   "b": "slotB", "slot_b": "slotB", "slotb": "slotB"}
        key = aliases.get(key.lower(), key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown card location: {raw!r}") from None


@dataclass(frozen=True)
class CardRef:
    """Where the client believes a card is."""
    kind: Location
    card_id: str


def slot_card(state: "GameState", slot: Location) -> Optional["Card"]:
    if slot is Location.SLOT_A:
        return state.slot_a
    if slot is Location.SLOT_B:
        return state.slot_b
    return None


def _with_slot(state: "GameState", slot: Location, card: Optional["Card"]) -> "GameState":
    if slot is Location.SLOT_A:
        return replace(state, slot_a=card)
    return replace(state, slot_b=card)


def resolve(state: "GameState", ref: CardRef) -> Optional["Card"]:
    """The referenced card, only if it is really at ref.kind."""
    if ref.kind is Location.HAND:
        for c in state.hand:
            if c.id == ref.card_id:
                return c
        return None
    c = slot_card(state, ref.kind)
    return c if c is not None and c.id == ref.card_id else None


def stage(state: "GameState", ref: CardRef, target: Location) -> "GameState":
    if state.solved or not target.is_slot or ref.kind is target:
        return state
    card = resolve(state, ref)
    if card is None:
        return state

    displaced = slot_card(state, target)

    if ref.kind is Location.HAND:
        hand = tuple(c for c in state.hand if c.id != card.id)
        if displaced is not None:
            hand = hand + (displaced,)
        return _with_slot(replace(state, hand=hand), target, card)

    # slot -> other slot: exchange (displaced may be None, which empties the source)
    moved = _with_slot(state, target, card)
    return _with_slot(moved, ref.kind, displaced)


def return_to_hand(state: "GameState", ref: CardRef) -> "GameState":
    if not ref.kind.is_slot:
        return state
    card = resolve(state, ref)
    if card is None:
        return state
    emptied = _with_slot(state, ref.kind, None)
    return replace(emptied, hand=state.hand + (card,))


def return_card(state: "GameState", card_id: str) -> "GameState":
    """Return a staged card by id, whichever slot holds it."""
    for slot in (Location.SLOT_A, Location.SLOT_B):
        c = slot_card(state, slot)
        if c is not None and c.id == card_id:
            return return_to_hand(state, CardRef(slot, card_id))
    return state
