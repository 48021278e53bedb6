from __future__ import annotations

from typing import Dict, Optional, Tuple

import pygame

from block_fall.game import COLS, ROWS, color_hex


Cell = Tuple[int, int]


class PygameRenderer:
    """Retained-mode renderer fed by engine notifications.

    The engine tells it which cells appear, vanish or fall; ``draw`` paints
    the current picture onto a pygame surface.
    """

    def __init__(self, cell_size: int = 28, margin: int = 20, preview_cells: int = 4) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.preview_cells = preview_cells
        self.board: Dict[Cell, int] = {}
        self.preview: Dict[Cell, int] = {}
        self.score = 0
        self.message: Optional[str] = None
        self._font: Optional[pygame.font.Font] = None

    @property
    def size(self) -> Tuple[int, int]:
        width = self.margin * 3 + COLS * self.cell_size + self.preview_cells * self.cell_size
        height = self.margin * 2 + ROWS * self.cell_size
        return width, height

    # ---------- Renderer protocol ----------
    def draw_cell(self, row: int, col: int, color: int) -> None:
        self.board[(row, col)] = color

    def remove_cell(self, row: int, col: int) -> None:
        self.board.pop((row, col), None)

    def move_cell_down(self, row: int, col: int, row_count: int) -> None:
        color = self.board.pop((row, col), None)
        if color is not None:
            self.board[(row + row_count, col)] = color

    def clear_board(self) -> None:
        self.board.clear()
        self.message = None

    def clear_preview(self) -> None:
        self.preview.clear()

    def draw_preview_cell(self, row: int, col: int, color: int) -> None:
        self.preview[(row, col)] = color

    def draw_score(self, score: int) -> None:
        self.score = score

    def show_game_over(self, message: str) -> None:
        self.message = message

    # ---------- Painting ----------
    def _cell_rect(self, x0: int, y0: int, row: int, col: int) -> pygame.Rect:
        return pygame.Rect(
            x0 + col * self.cell_size,
            y0 + row * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _board_surface(self) -> pygame.Surface:
        surf = pygame.Surface((COLS * self.cell_size, ROWS * self.cell_size))
        surf.fill((30, 30, 36))
        for row in range(ROWS):
            for col in range(COLS):
                pygame.draw.rect(surf, (20, 20, 26), self._cell_rect(0, 0, row, col))
        for (row, col), color in self.board.items():
            pygame.draw.rect(surf, pygame.Color(color_hex(color)), self._cell_rect(0, 0, row, col))
        return surf

    def draw(self, screen: pygame.Surface) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        screen.fill((10, 10, 14))
        screen.blit(self._board_surface(), (self.margin, self.margin))

        x0 = self.margin * 2 + COLS * self.cell_size
        y0 = self.margin
        screen.blit(self._font.render(f"Score: {self.score}", True, (230, 230, 230)), (x0, y0))
        preview_y = y0 + 30
        for (row, col), color in self.preview.items():
            pygame.draw.rect(screen, pygame.Color(color_hex(color)), self._cell_rect(x0, preview_y, row, col))

        if self.message:
            text = self._font.render(self.message, True, (255, 100, 100))
            board_center = (self.margin + COLS * self.cell_size // 2, self.margin + ROWS * self.cell_size // 2)
            screen.blit(text, text.get_rect(center=board_center))
        pygame.display.flip()
