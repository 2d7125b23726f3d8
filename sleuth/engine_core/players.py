"""
Players - Participants and turn order.

Turn order is ascending position, wrapping around. Exactly one player per
game is the viewpoint player: the one whose hand the engine knows.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .errors import GameConfigurationError


@dataclass(frozen=True)
class Player:
    """A participant in a game."""
    position: int
    name: str
    is_viewpoint: bool = False

    def __post_init__(self):
        if self.position < 0:
            raise ValueError(f"Player position must be >= 0, got {self.position}")


def sort_by_position(players: Sequence[Player], first: Player | None = None) -> list[Player]:
    """
    Players in turn order.

    Without `first`, ascending position. With `first`, the order starts at
    `first` and wraps around to the lower positions.
    """
    if first is None:
        return sorted(players, key=lambda p: p.position)
    return sorted(players, key=lambda p: (p.position < first.position, p.position))


def next_player(players: Sequence[Player], player: Player) -> Player | None:
    """The player following `player` in turn order, or None if unknown."""
    ordered = sort_by_position(players)
    if not ordered:
        return None
    if player not in ordered:
        return None
    idx = ordered.index(player)
    return ordered[(idx + 1) % len(ordered)]


def players_between(players: Sequence[Player], first: Player, second: Player) -> list[Player]:
    """
    Players strictly between `first` and `second`, walking in turn order
    from `first`. Empty if either player is unknown.
    """
    ordered = sort_by_position(players, first)
    if first not in ordered or second not in ordered:
        return []
    return ordered[1:ordered.index(second)]


def viewpoint_player(players: Sequence[Player]) -> Player:
    """
    The single viewpoint player.

    Raises GameConfigurationError if there is none or more than one.
    """
    viewpoints = [p for p in players if p.is_viewpoint]
    if len(viewpoints) != 1:
        raise GameConfigurationError(
            f"Exactly one player must be the viewpoint player, found {len(viewpoints)}"
        )
    return viewpoints[0]


def validate_players(players: Sequence[Player]) -> None:
    """Check positions are unique and exactly one viewpoint player exists."""
    if not players:
        raise GameConfigurationError("A game needs at least one player")
    positions = [p.position for p in players]
    if len(set(positions)) != len(positions):
        raise GameConfigurationError(f"Player positions must be unique: {sorted(positions)}")
    viewpoint_player(players)
