"""
Knowledge Matrix - What is known about who holds which card.

Each (player, card) cell is one of:
- YES: the player certainly holds the card
- NO: the player certainly does not hold the card
- NOT_CLEAR: undetermined

Cells are stored in a dense 2-D list indexed by small integers assigned
once at setup (players in turn order, cards by category then id). The
public contract stays pair-keyed: matrix[player, card].

The module-level helpers are pure queries over a matrix. They are used by
the deduction engine and by the simulator's question strategies.
"""

from __future__ import annotations
from enum import Enum
from typing import Iterable, Iterator, Sequence

from .cards import Card, sort_cards
from .errors import InconsistentKnowledgeError
from .players import Player, next_player, sort_by_position


class HasCard(Enum):
    """Tri-state cell value."""
    YES = "yes"
    NO = "no"
    NOT_CLEAR = "not_clear"


class KnowledgeMatrix:
    """
    Tri-state (player, card) matrix.

    Writes that flip a definite value (YES <-> NO) raise
    InconsistentKnowledgeError instead of overwriting.
    """

    def __init__(self, players: Iterable[Player], cards: Iterable[Card]):
        self.players: tuple[Player, ...] = tuple(sort_by_position(list(players)))
        self.cards: tuple[Card, ...] = tuple(sort_cards(set(cards)))
        self._player_idx = {player: idx for idx, player in enumerate(self.players)}
        self._card_idx = {card: idx for idx, card in enumerate(self.cards)}
        self._cells: list[list[HasCard]] = [
            [HasCard.NOT_CLEAR] * len(self.cards) for _ in self.players
        ]
        self._frozen = False

    # ------------------------------------------------------------------
    # Pair-keyed access
    # ------------------------------------------------------------------

    def __getitem__(self, key: tuple[Player, Card]) -> HasCard:
        player, card = key
        return self._cells[self._player_idx[player]][self._card_idx[card]]

    def __setitem__(self, key: tuple[Player, Card], value: HasCard):
        player, card = key
        self.set(player, card, value)

    def __contains__(self, key) -> bool:
        try:
            player, card = key
        except (TypeError, ValueError):
            return False
        return player in self._player_idx and card in self._card_idx

    def __eq__(self, other) -> bool:
        if not isinstance(other, KnowledgeMatrix):
            return NotImplemented
        return (
            self.players == other.players
            and self.cards == other.cards
            and self._cells == other._cells
        )

    def __hash__(self):
        return hash((self.players, self.cards, tuple(tuple(row) for row in self._cells)))

    def set(self, player: Player, card: Card, value: HasCard) -> bool:
        """
        Set a cell. Returns True if the value changed.

        A definite value may only be confirmed, never flipped.
        """
        if self._frozen:
            raise TypeError("Knowledge matrix is frozen")
        row = self._cells[self._player_idx[player]]
        col = self._card_idx[card]
        current = row[col]
        if current == value:
            return False
        if current != HasCard.NOT_CLEAR and value != HasCard.NOT_CLEAR:
            raise InconsistentKnowledgeError(
                f"{player.name} / {card.id}: cannot change {current.name} to {value.name}",
                player=player,
                card=card,
            )
        row[col] = value
        return True

    def mark_holder(self, holder: Player, card: Card) -> None:
        """The card belongs to `holder`: YES for them, NO for everyone else."""
        for player in self.players:
            if player != holder:
                self.set(player, card, HasCard.NO)
        self.set(holder, card, HasCard.YES)

    def mark_nobody(self, card: Card) -> None:
        """No player holds the card."""
        for player in self.players:
            self.set(player, card, HasCard.NO)

    # ------------------------------------------------------------------
    # Bulk views
    # ------------------------------------------------------------------

    def row(self, player: Player) -> Iterator[tuple[Card, HasCard]]:
        """(card, value) pairs for one player, in card order."""
        return zip(self.cards, self._cells[self._player_idx[player]])

    def column(self, card: Card) -> Iterator[tuple[Player, HasCard]]:
        """(player, value) pairs for one card, in turn order."""
        col = self._card_idx[card]
        return ((player, self._cells[idx][col]) for idx, player in enumerate(self.players))

    def items(self) -> Iterator[tuple[tuple[Player, Card], HasCard]]:
        for p_idx, player in enumerate(self.players):
            for c_idx, card in enumerate(self.cards):
                yield (player, card), self._cells[p_idx][c_idx]

    def count(self, value: HasCard, player: Player | None = None) -> int:
        """Number of cells with `value`, optionally for one player only."""
        if player is not None:
            return self._cells[self._player_idx[player]].count(value)
        return sum(row.count(value) for row in self._cells)

    @property
    def size(self) -> int:
        return len(self.players) * len(self.cards)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> KnowledgeMatrix:
        """Mutable copy."""
        clone = KnowledgeMatrix.__new__(KnowledgeMatrix)
        clone.players = self.players
        clone.cards = self.cards
        clone._player_idx = self._player_idx
        clone._card_idx = self._card_idx
        clone._cells = [list(row) for row in self._cells]
        clone._frozen = False
        return clone

    def freeze(self) -> KnowledgeMatrix:
        """Read-only copy."""
        clone = self.copy()
        clone._frozen = True
        return clone

    def as_dict(self) -> dict[tuple[Player, Card], HasCard]:
        return dict(self.items())


# =============================================================================
# Derived queries
# =============================================================================

def player_cards(matrix: KnowledgeMatrix, player: Player) -> list[Card]:
    """Cards known to be held by `player`."""
    return [card for card, value in matrix.row(player) if value == HasCard.YES]


def player_card_set(matrix: KnowledgeMatrix) -> set[Card]:
    """Cards known to be held by any player."""
    return {card for (_, card), value in matrix.items() if value == HasCard.YES}


def player_card_map(
    matrix: KnowledgeMatrix,
    players: Sequence[Player] | None = None,
) -> dict[Player, list[Card]]:
    """Known held cards for every player."""
    return {
        player: player_cards(matrix, player)
        for player in (players if players is not None else matrix.players)
    }


def non_player_cards(matrix: KnowledgeMatrix, player: Player) -> list[Card]:
    """Cards known not to be held by `player`."""
    return [card for card, value in matrix.row(player) if value == HasCard.NO]


def not_clear_cards(matrix: KnowledgeMatrix) -> list[Card]:
    """Cards with at least one undetermined cell."""
    return [
        card for card in matrix.cards
        if any(value == HasCard.NOT_CLEAR for _, value in matrix.column(card))
    ]


def complete_excluded_cards(matrix: KnowledgeMatrix) -> list[Card]:
    """Cards that no player can hold."""
    return [
        card for card in matrix.cards
        if all(value == HasCard.NO for _, value in matrix.column(card))
    ]


def other_player_cards_in_reverse_order(
    matrix: KnowledgeMatrix,
    players: Sequence[Player],
    excluded_player: Player,
) -> list[Card]:
    """
    Known cards of every player except `excluded_player`.

    Players are taken in turn order starting after `excluded_player` and
    then reversed, so the player who answers last comes first.
    """
    start = next_player(players, excluded_player)
    others = [p for p in sort_by_position(players, start) if p != excluded_player]
    cards: list[Card] = []
    for player in reversed(others):
        cards.extend(player_cards(matrix, player))
    return cards


def count_state(matrix: KnowledgeMatrix) -> dict[HasCard, int]:
    """Cell counts per value."""
    return {value: matrix.count(value) for value in HasCard}
