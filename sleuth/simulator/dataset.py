"""
Game Data Set - Generated ground truth for simulated games.

The data set decides:
- The solution: one random card per category
- The leftover cards: (total - 3) mod player_count cards nobody gets
- The hands: the remaining cards in equal chunks, dealt in turn order

The deduction engine never sees a data set. It only receives the
viewpoint player's own hand and the public leftover cards.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..engine_core.cards import Card, CardCategory, cards_by_category, sort_cards
from ..engine_core.errors import DataSetError
from ..engine_core.players import Player, sort_by_position, validate_players


@dataclass(frozen=True)
class GameDataSet:
    """Who holds what in a simulated game."""
    players: tuple[Player, ...]
    all_cards: frozenset[Card]
    solution_cards: frozenset[Card]
    leftover_cards: frozenset[Card]
    player_cards: dict[Player, frozenset[Card]] = field(default_factory=dict, hash=False)

    @classmethod
    def generate_default(
        cls,
        cards: Iterable[Card],
        players: Sequence[Player],
        shuffled: bool = True,
        rng: random.Random | None = None,
    ) -> GameDataSet:
        """
        Deal a fresh game.

        Args:
            cards: Full card catalog
            players: Participants (exactly one viewpoint player)
            shuffled: Shuffle the deck before dealing; otherwise deal in id order
            rng: Random source (a new unseeded one if omitted)
        """
        validate_players(players)

        rng = rng or random.Random()
        deck = sorted(set(cards), key=lambda c: c.id)
        if shuffled:
            rng.shuffle(deck)

        grouped = cards_by_category(deck)
        missing = [category.value for category, group in grouped.items() if not group]
        if missing:
            raise DataSetError(f"No cards for categories: {', '.join(missing)}")

        solution = frozenset(rng.choice(grouped[category]) for category in CardCategory)

        ordered_players = tuple(sort_by_position(players))
        remaining = [card for card in deck if card not in solution]
        leftover_count = (len(deck) - len(CardCategory)) % len(ordered_players)
        leftovers = frozenset(remaining[:leftover_count])
        dealt = remaining[leftover_count:]

        hand_size = len(dealt) // len(ordered_players)
        if hand_size == 0:
            raise DataSetError(
                f"{len(deck)} cards are not enough for {len(ordered_players)} players"
            )

        player_cards = {
            player: frozenset(dealt[idx * hand_size:(idx + 1) * hand_size])
            for idx, player in enumerate(ordered_players)
        }

        return cls(
            players=ordered_players,
            all_cards=frozenset(deck),
            solution_cards=solution,
            leftover_cards=leftovers,
            player_cards=player_cards,
        )

    @property
    def hand_size(self) -> int:
        return len(self.own_cards())

    def own_player(self) -> Player:
        """The viewpoint player."""
        for player in self.players:
            if player.is_viewpoint:
                return player
        raise DataSetError("Own player not set")

    def own_cards(self) -> frozenset[Card]:
        """The viewpoint player's hand."""
        cards = self.player_cards.get(self.own_player())
        if cards is None:
            raise DataSetError("Own player cards not set")
        return cards

    def holder_of(self, card: Card) -> Player | None:
        """The player holding `card`, or None for solution and leftover cards."""
        for player, cards in self.player_cards.items():
            if card in cards:
                return player
        return None

    def describe(self) -> list[str]:
        """Summary lines: solution, leftovers and every hand."""
        width = max((len(p.name) for p in self.players), default=10)
        lines = [
            f"[SC] {[c.id for c in sort_cards(self.solution_cards)]}",
            f"[LO] {[c.id for c in sort_cards(self.leftover_cards)]}",
        ]
        for player in self.players:
            hand = sort_cards(self.player_cards.get(player, frozenset()))
            lines.append(f"[P]  {player.name.ljust(width)} -> {[c.id for c in hand]}")
        return lines

    def log(self, logger: logging.Logger | None, level: int = logging.DEBUG):
        if logger is None:
            return
        logger.log(level, "DataSet:")
        for line in self.describe():
            logger.log(level, line)
