"""
Turns - Questions, answers and the append-only turn log.

A question names one card of each category. The answer carries the player
who showed a card and what the observer learned about it:
- no answer / empty cards: nobody could answer
- one card: exactly this card was shown
- several cards: one of them was shown, observers do not know which
  (the whole question for turns the viewpoint player only watched)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator

from .cards import Card, CardCategory, sort_cards
from .players import Player


@dataclass(frozen=True)
class Question:
    """A player asking for one room, one subject and one tool."""
    asking_player: Player
    cards: frozenset[Card]

    def __post_init__(self):
        cards = frozenset(self.cards)
        object.__setattr__(self, "cards", cards)
        if len(cards) != len(CardCategory):
            raise ValueError(f"A question needs exactly 3 cards, got {len(cards)}")
        categories = {card.category for card in cards}
        if categories != set(CardCategory):
            raise ValueError(
                "A question needs one card per category, got "
                + ", ".join(sorted(c.value for c in categories))
            )

    @classmethod
    def of(cls, asking_player: Player, *cards: Card) -> Question:
        return cls(asking_player=asking_player, cards=frozenset(cards))

    @property
    def ordered_cards(self) -> list[Card]:
        """Question cards in category order."""
        return sort_cards(self.cards)

    def card_for(self, category: CardCategory) -> Card:
        for card in self.cards:
            if card.category == category:
                return card
        raise KeyError(category)


@dataclass(frozen=True)
class Answer:
    """The response to a question."""
    answering_player: Player
    cards: frozenset[Card]

    def __post_init__(self):
        object.__setattr__(self, "cards", frozenset(self.cards))

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def is_exact(self) -> bool:
        """Exactly one card is known to have been shown."""
        return len(self.cards) == 1

    @property
    def is_ambiguous(self) -> bool:
        return len(self.cards) > 1


@dataclass(frozen=True)
class Turn:
    """One observed question/answer pair with its sequence number."""
    question: Question
    answer: Answer | None
    sequence_number: int

    @property
    def unanswered(self) -> bool:
        """Nobody could answer."""
        return self.answer is None or self.answer.is_empty


class TurnLog:
    """
    Append-only sequence of turns.

    Sequence numbers are dense and zero-based: each turn gets the number of
    turns recorded before it.
    """

    def __init__(self, turns: Iterable[Turn] | None = None):
        self._turns: list[Turn] = []
        for turn in turns or []:
            self.append(turn.question, turn.answer)

    def append(self, question: Question, answer: Answer | None) -> Turn:
        if answer is not None and not answer.cards <= question.cards:
            raise ValueError("Answer cards must be a subset of the question cards")
        turn = Turn(question=question, answer=answer, sequence_number=len(self._turns))
        self._turns.append(turn)
        return turn

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __getitem__(self, idx: int) -> Turn:
        return self._turns[idx]

    def as_list(self) -> list[Turn]:
        return list(self._turns)
