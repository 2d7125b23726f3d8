"""
Pytest fixtures for Sleuth tests.
"""

import pytest

from ..catalog import load_builtin_catalog
from ..engine_core.cards import Card, CardCategory
from ..engine_core.evaluator import DeductionEngine
from ..engine_core.players import Player


def make_cards(rooms, subjects, tools) -> dict[str, Card]:
    """Cards keyed by id."""
    cards = {}
    for category, ids in (
        (CardCategory.ROOM, rooms),
        (CardCategory.SUBJECT, subjects),
        (CardCategory.TOOL, tools),
    ):
        for card_id in ids:
            cards[card_id] = Card(card_id, category)
    return cards


@pytest.fixture
def six_cards() -> dict[str, Card]:
    """Two cards per category: r1, r2, s1, s2, t1, t2."""
    return make_cards(["r1", "r2"], ["s1", "s2"], ["t1", "t2"])


@pytest.fixture
def nine_cards() -> dict[str, Card]:
    """Three cards per category, same ids as the small catalog."""
    return make_cards(["r1", "r2", "r3"], ["s1", "s2", "s3"], ["t1", "t2", "t3"])


@pytest.fixture
def four_players() -> list[Player]:
    """Anna (viewpoint), Ben, Chris, Daniel."""
    return [
        Player(0, "Anna", is_viewpoint=True),
        Player(1, "Ben"),
        Player(2, "Chris"),
        Player(3, "Daniel"),
    ]


@pytest.fixture
def three_players() -> list[Player]:
    """Anna (viewpoint), Ben, Chris."""
    return [
        Player(0, "Anna", is_viewpoint=True),
        Player(1, "Ben"),
        Player(2, "Chris"),
    ]


@pytest.fixture
def five_players() -> list[Player]:
    """The default simulated table: Anna (viewpoint), Ben, Chris, Daniel, Emil."""
    names = ["Anna", "Ben", "Chris", "Daniel", "Emil"]
    return [Player(idx, name, is_viewpoint=idx == 0) for idx, name in enumerate(names)]


@pytest.fixture
def standard_cards() -> frozenset[Card]:
    return load_builtin_catalog("standard")


@pytest.fixture
def small_cards() -> frozenset[Card]:
    return load_builtin_catalog("small")


@pytest.fixture
def six_card_engine(six_cards, four_players) -> DeductionEngine:
    """
    4 players, 6 cards; Anna holds r1 and s1, t2 is a leftover.
    """
    c = six_cards
    return DeductionEngine.create(
        players=four_players,
        all_cards=c.values(),
        leftover_cards=[c["t2"]],
        own_cards=[c["r1"], c["s1"]],
    )


@pytest.fixture
def nine_card_engine(nine_cards, three_players) -> DeductionEngine:
    """
    3 players, 9 cards, hand size 2, no leftovers; Anna holds r1 and s1.
    """
    c = nine_cards
    return DeductionEngine.create(
        players=three_players,
        all_cards=c.values(),
        leftover_cards=[],
        own_cards=[c["r1"], c["s1"]],
    )
