import pytest

from power_countdown import create_app
from power_countdown.games.countdown.logic.cards import FIXED_DECK
from power_countdown.games.countdown.logic.slots import CardRef, Location
from power_countdown.games.countdown.logic.state import Stage, reduce, start
from power_countdown.games.countdown.services.puzzle_source import PuzzleData


class FakeSource:
    """Scripted puzzle source; set `fail=True` to make every call raise."""

    def __init__(self, targets=(80,), hint="Try 16 and 5.", fail=False):
        self.targets = list(targets)
        self.hint = hint
        self.fail = fail
        self.puzzle_calls = []
        self.hint_calls = []
        self.on_call = None

    def generate_puzzle(self, difficulty):
        self.puzzle_calls.append(difficulty)
        if self.on_call:
            self.on_call()
        if self.fail:
            raise RuntimeError("provider down")
        target = self.targets[min(len(self.puzzle_calls), len(self.targets)) - 1]
        return PuzzleData(target=target, numbers=(1, 1, 1))

    def get_hint(self, target, values):
        self.hint_calls.append((target, list(values)))
        if self.on_call:
            self.on_call()
        if self.fail:
            raise RuntimeError("provider down")
        return self.hint


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def app(source):
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": False, "PUZZLE_SOURCE": "local"})
    app.extensions["countdown.source"] = source
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def deck_state():
    """target 80 with the fixed deck; ids g1-c0 .. g1-c5 map to 2, 5, 16, 243, 343, 512."""
    return start(80, FIXED_DECK, generation=1)


def card_by_value(state, value):
    return next(c for c in state.hand if c.value == value)


def stage_values(state, a, b):
    """Stage hand cards with values a and b into slots A and B."""
    ca = card_by_value(state, a)
    state = reduce(state, Stage(CardRef(Location.HAND, ca.id), Location.SLOT_A))
    cb = card_by_value(state, b)
    return reduce(state, Stage(CardRef(Location.HAND, cb.id), Location.SLOT_B))
