from __future__ import annotations

import random
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple


Coordinate = Tuple[int, int]

# Offsets are (row, col) inside a 4x4 local box.
SHAPES: Tuple[Tuple[Coordinate, ...], ...] = (
    ((1, 2), (2, 1), (2, 2), (2, 3)),
    ((0, 2), (1, 2), (2, 2), (3, 2)),
    ((0, 2), (1, 2), (2, 1), (2, 2)),
    ((0, 1), (1, 1), (2, 1), (2, 2)),
    ((0, 1), (1, 1), (1, 2), (2, 2)),
    ((0, 2), (1, 1), (1, 2), (2, 2)),
    ((1, 1), (1, 2), (2, 1), (2, 2)),
)

# Colour ids are 1-based so that 0 can mean "empty" on the grid.
COLORS: Tuple[str, ...] = ("#5F2674", "#D4076F", "#8AE300", "#FFF100", "#2A4EE1", "#FA6000")

BOX_SIZE = 4


def color_hex(color: int) -> str:
    if not 1 <= color <= len(COLORS):
        raise ValueError(f"Unknown colour id: {color}")
    return COLORS[color - 1]


@dataclass(frozen=True)
class Piece:
    cells: Tuple[Coordinate, ...]
    color: int
    row: int = 0
    col: int = 0

    def absolute_cells(self) -> FrozenSet[Coordinate]:
        return frozenset((self.row + r, self.col + c) for r, c in self.cells)

    def translated(self, d_row: int, d_col: int) -> "Piece":
        return Piece(self.cells, self.color, self.row + d_row, self.col + d_col)

    def rotated(self) -> "Piece":
        # Quarter turn about the centre of the 4x4 box, not the piece's centroid.
        rotated = tuple((c, BOX_SIZE - 1 - r) for r, c in self.cells)
        return Piece(rotated, self.color, self.row, self.col)


class PieceCatalog:
    """Uniform random source of pieces drawn from SHAPES and COLORS."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def seed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    def random_piece(self, row: int = 0, col: int = 0) -> Piece:
        color = self.rng.randrange(len(COLORS)) + 1
        cells = self.rng.choice(SHAPES)
        return Piece(cells=cells, color=color, row=row, col=col)
