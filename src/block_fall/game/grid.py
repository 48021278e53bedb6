from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, List, Optional

import numpy as np

from .interfaces import NullRenderer, Renderer
from .pieces import Coordinate


logger = logging.getLogger(__name__)

ROWS = 20
COLS = 10


class GameGrid:
    """Authoritative occupancy of the board.

    The grid uses 0 for empty cells and colour ids (1..6) for occupied cells.
    Every mutation is mirrored to the renderer after it has been applied.
    """

    def __init__(self, renderer: Optional[Renderer] = None) -> None:
        self.height = ROWS
        self.width = COLS
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)
        self.renderer: Renderer = renderer or NullRenderer()

    def reset(self) -> None:
        self.grid.fill(0)
        self.renderer.clear_board()

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def is_occupied(self, row: int, col: int) -> bool:
        return bool(self.grid[row, col] != 0)

    def color_at(self, row: int, col: int) -> int:
        return int(self.grid[row, col])

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for row, col in cells:
            if not self.is_inside(row, col):
                return False
            if self.grid[row, col] != 0:
                return False
        return True

    def commit_new_piece(self, cells: AbstractSet[Coordinate], color: int) -> bool:
        if not self.can_place(cells):
            return False
        for row, col in cells:
            self._place_cell(row, col, color)
        return True

    def apply_transform(self, old_cells: AbstractSet[Coordinate], new_cells: AbstractSet[Coordinate], color: int) -> bool:
        """Move a piece from ``old_cells`` to ``new_cells`` in one step.

        Only the cell difference is checked, so cells shared by both positions
        never block the move. Nothing is written unless every added cell is free.
        """
        to_remove = set(old_cells) - set(new_cells)
        to_add = set(new_cells) - set(old_cells)
        if not self.can_place(to_add):
            return False
        for row, col in to_remove:
            self._remove_cell(row, col)
        for row, col in to_add:
            self._place_cell(row, col, color)
        return True

    def completed_rows(self) -> List[int]:
        return [int(r) for r in np.flatnonzero(np.all(self.grid != 0, axis=1))]

    def clear_completed_lines(self) -> int:
        """Remove full rows and let everything above fall into the gap.

        Cleared rows are grouped into runs of consecutive indices. Runs are
        handled from the bottom up, and the rows between a run and the next
        run above it drop by the total height cleared so far.
        """
        deleted = self.completed_rows()
        for row in deleted:
            for col in range(self.width):
                self._remove_cell(row, col)
        if not deleted:
            return 0

        runs: List[List[int]] = []
        for row in deleted:
            if runs and row == runs[-1][-1] + 1:
                runs[-1].append(row)
            else:
                runs.append([row])

        dropped = 0
        for idx in range(len(runs) - 1, -1, -1):
            run = runs[idx]
            dropped += len(run)
            start_row = runs[idx - 1][-1] + 1 if idx > 0 else 0
            self._move_rows_down(start_row, run[0], dropped)

        logger.debug("Cleared rows %s in %d run(s)", deleted, len(runs))
        return len(deleted)

    def _move_rows_down(self, start_row: int, end_row: int, count: int) -> None:
        # Bottom-up so no cell is overwritten before it has moved.
        for row in range(end_row - 1, start_row - 1, -1):
            for col in np.flatnonzero(self.grid[row]):
                self._move_cell_down(row, int(col), count)

    def _place_cell(self, row: int, col: int, color: int) -> None:
        self.grid[row, col] = color
        self.renderer.draw_cell(row, col, color)

    def _remove_cell(self, row: int, col: int) -> None:
        self.grid[row, col] = 0
        self.renderer.remove_cell(row, col)

    def _move_cell_down(self, row: int, col: int, count: int) -> None:
        self.grid[row + count, col] = self.grid[row, col]
        self.grid[row, col] = 0
        self.renderer.move_cell_down(row, col, count)

    def get_max_height(self) -> int:
        # row 0 is top; find first non-empty from top
        non_empty_rows = np.flatnonzero(np.any(self.grid != 0, axis=1))
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def count_holes(self) -> int:
        holes = 0
        for col in range(self.width):
            seen_block = False
            for cell in self.grid[:, col]:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
