# power_countdown/games/countdown/logic/__init__.py
from .cards import Card, FIXED_DECK
from .combine import InvalidCombination, Operation, combine
from .slots import CardRef, Location
from .state import (
    GameState, Stage, ReturnToHand, ReturnCard, Combine, Undo,
    start, request_combine, undo, reduce, state_payload,
)
