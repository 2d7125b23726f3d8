"""
Matrix Renderer - Human-readable grid of the knowledge matrix.

Rows are cards grouped by category, columns are players:
    ✔  holds the card
    ✖  does not hold the card
       (blank) undetermined
The footer carries per-player tallies. Output is for inspection only and
is never read back by the engine.
"""

from __future__ import annotations
import logging

from .cards import CardCategory
from .knowledge import HasCard, KnowledgeMatrix, player_card_set

SYMBOLS = {
    HasCard.YES: "✔",
    HasCard.NO: "✖",
    HasCard.NOT_CLEAR: "",
}


def render_matrix(
    matrix: KnowledgeMatrix,
    only_stats: bool = False,
    caption: str = "",
) -> str:
    """Format the matrix as a fixed-width text grid."""
    players = matrix.players
    cards = matrix.cards

    card_col = max([len(card.id) for card in cards] + [len(caption), 8]) + 2
    player_col = max([len(player.name) for player in players] + [3]) + 2

    lines: list[str] = []
    lines.append(caption.ljust(card_col) + "".join(p.name.ljust(player_col) for p in players))
    lines.append("=" * (card_col + player_col * len(players)))

    if not only_stats:
        current_category: CardCategory | None = None
        for card in cards:
            if card.category != current_category:
                current_category = card.category
                lines.append(f"[{current_category.label}]")
            row = card.id.ljust(card_col)
            for player in players:
                row += SYMBOLS[matrix[player, card]].ljust(player_col)
            lines.append(row.rstrip())

    held = len(player_card_set(matrix))
    lines.append(
        f"PLC({held})".ljust(card_col)
        + "".join(f"✔{matrix.count(HasCard.YES, p)}".ljust(player_col) for p in players).rstrip()
    )
    lines.append(
        "".ljust(card_col)
        + "".join(f"✖{matrix.count(HasCard.NO, p)}".ljust(player_col) for p in players).rstrip()
    )
    lines.append(
        "".ljust(card_col)
        + "".join(f"?{matrix.count(HasCard.NOT_CLEAR, p)}".ljust(player_col) for p in players).rstrip()
    )
    return "\n".join(lines)


def log_matrix(
    logger: logging.Logger | None,
    matrix: KnowledgeMatrix,
    only_stats: bool = False,
    caption: str = "",
    level: int = logging.DEBUG,
):
    """Send the rendered matrix to a logger, if one is given and enabled."""
    if logger is None or not logger.isEnabledFor(level):
        return
    logger.log(level, "\n%s", render_matrix(matrix, only_stats=only_stats, caption=caption))
