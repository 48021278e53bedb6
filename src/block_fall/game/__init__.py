"""Game module for Block Fall.

Exports the rule engine and supporting classes:
- GameGrid: Board occupancy, placement checks and line clearing
- Piece / PieceCatalog: Immutable falling pieces and their random source
- SpeedRules: Tick interval and speed-up configuration
- BlockFallGame: Game loop and state machine
- ManualScheduler: Deterministic scheduler for tests and environments
"""

from .grid import GameGrid, ROWS, COLS
from .pieces import Piece, PieceCatalog, SHAPES, COLORS, color_hex
from .rules import SpeedRules
from .scheduling import ManualScheduler
from .interfaces import NullRenderer, Renderer, Scheduler, InputSource
from .core import BlockFallGame, Action, GameConfig, GameStatus

__all__ = [
    "GameGrid",
    "ROWS",
    "COLS",
    "Piece",
    "PieceCatalog",
    "SHAPES",
    "COLORS",
    "color_hex",
    "SpeedRules",
    "ManualScheduler",
    "NullRenderer",
    "Renderer",
    "Scheduler",
    "InputSource",
    "BlockFallGame",
    "Action",
    "GameConfig",
    "GameStatus",
]
