"""
Sleuth - Deduction Engine for Cluedo-style Games

A deterministic engine that tracks what is known about a hidden-information
"who / what / where" card game and deduces the hidden solution.
The engine provides:
- A tri-state knowledge matrix over (player, card)
- Fixpoint constraint propagation over the turn history
- A turn simulator with question strategies and answer resolution
- Game sessions binding catalog, players and turn log
"""

__version__ = "0.1.0"
