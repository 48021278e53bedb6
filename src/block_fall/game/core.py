from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Optional

import numpy as np

from .grid import COLS, GameGrid
from .interfaces import InputSource, NullRenderer, Renderer, Scheduler
from .pieces import Piece, PieceCatalog
from .rules import SpeedRules
from .scheduling import ManualScheduler


logger = logging.getLogger(__name__)

GAME_OVER_MESSAGE = "Game over!"


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    DOWN = 3
    NONE = 4


class GameStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    random_seed: Optional[int] = None
    spawn_row: int = 0


Transform = Callable[[Piece], Piece]


class BlockFallGame:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[SpeedRules] = None,
        renderer: Optional[Renderer] = None,
        scheduler: Optional[Scheduler] = None,
        input_source: Optional[InputSource] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or SpeedRules()
        self.renderer: Renderer = renderer or NullRenderer()
        self.scheduler: Scheduler = scheduler or ManualScheduler()
        self.input_source = input_source
        self.catalog = PieceCatalog(random.Random(self.config.random_seed))
        self.grid = GameGrid(self.renderer)
        self.status = GameStatus.IDLE
        self.score = 0
        self.interval = self.rules.initial_interval
        self.pieces_spawned = 0
        self.current_piece: Optional[Piece] = None
        self.next_piece: Optional[Piece] = None
        self._timer: Any = None
        self._subscription: Any = None

    @property
    def spawn_col(self) -> int:
        return COLS // 2 - 2

    @property
    def game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    # ---------- Lifecycle ----------
    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.catalog.seed(seed)
        self.start_new_game()

    def start_new_game(self) -> None:
        self._detach()
        self.grid.reset()
        self.current_piece = None
        self.next_piece = None
        self.score = 0
        self.interval = self.rules.initial_interval
        self.pieces_spawned = 0
        self.renderer.clear_preview()
        self.renderer.draw_score(self.score)
        self.status = GameStatus.RUNNING
        self._attach()
        logger.info("New game started (interval %.3fs)", self.interval)

    def pause(self) -> bool:
        if self.status is not GameStatus.RUNNING:
            return False
        self._detach()
        self.status = GameStatus.PAUSED
        return True

    def resume(self) -> bool:
        if self.status is not GameStatus.PAUSED:
            return False
        self.status = GameStatus.RUNNING
        self._attach()
        return True

    def toggle_pause(self) -> bool:
        if self.status is GameStatus.RUNNING:
            return self.pause()
        return self.resume()

    def _attach(self) -> None:
        if self._timer is None:
            self._timer = self.scheduler.schedule(self.interval, self.tick)
        if self.input_source is not None and self._subscription is None:
            self._subscription = self.input_source.subscribe(self.handle_action)

    def _detach(self) -> None:
        if self._timer is not None:
            self.scheduler.cancel(self._timer)
            self._timer = None
        if self.input_source is not None and self._subscription is not None:
            self.input_source.unsubscribe(self._subscription)
            self._subscription = None

    def _restart_timer(self) -> None:
        if self._timer is not None:
            self.scheduler.cancel(self._timer)
        self._timer = self.scheduler.schedule(self.interval, self.tick)

    # ---------- Pieces ----------
    def spawn_next(self) -> bool:
        if self.next_piece is not None:
            piece = self.next_piece.translated(self.config.spawn_row, self.spawn_col)
        else:
            piece = self.catalog.random_piece(self.config.spawn_row, self.spawn_col)
        if not self.grid.commit_new_piece(piece.absolute_cells(), piece.color):
            return False
        self.current_piece = piece
        self.pieces_spawned += 1
        self.next_piece = self.catalog.random_piece(0, 0)
        self._draw_preview()
        logger.debug("Spawned piece #%d at (%d, %d)", self.pieces_spawned, piece.row, piece.col)
        return True

    def _draw_preview(self) -> None:
        self.renderer.clear_preview()
        if self.next_piece is None:
            return
        for row, col in sorted(self.next_piece.absolute_cells()):
            self.renderer.draw_preview_cell(row, col, self.next_piece.color)

    def attempt_transform(self, transform: Transform) -> bool:
        if self.current_piece is None:
            return False
        candidate = transform(self.current_piece)
        if self.grid.apply_transform(
            self.current_piece.absolute_cells(), candidate.absolute_cells(), candidate.color
        ):
            self.current_piece = candidate
            return True
        return False

    def move(self, d_row: int, d_col: int) -> bool:
        return self.attempt_transform(lambda piece: piece.translated(d_row, d_col))

    def rotate(self) -> bool:
        return self.attempt_transform(lambda piece: piece.rotated())

    def handle_action(self, action: Action) -> bool:
        action = Action(action)
        if self.status is not GameStatus.RUNNING:
            return False
        if action == Action.LEFT:
            return self.move(0, -1)
        if action == Action.RIGHT:
            return self.move(0, 1)
        if action == Action.ROTATE:
            return self.rotate()
        if action == Action.DOWN:
            return self.move(1, 0)
        return False

    # ---------- Ticking ----------
    def tick(self) -> None:
        if self.status is not GameStatus.RUNNING:
            return
        if self.current_piece is not None:
            if self.move(1, 0):
                return
            self.current_piece = None
            self._add_score(self.grid.clear_completed_lines())
        if self.current_piece is None and not self.spawn_next():
            self._end_game()

    def _add_score(self, lines: int) -> None:
        if lines <= 0:
            return
        self.score += lines
        self.renderer.draw_score(self.score)
        if self.rules.should_speed_up(self.score):
            self.interval = self.rules.next_interval(self.interval, self.score)
            self._restart_timer()
            logger.info("Score %d: tick interval now %.4fs", self.score, self.interval)

    def _end_game(self) -> None:
        self._detach()
        self.status = GameStatus.GAME_OVER
        self.renderer.show_game_over(GAME_OVER_MESSAGE)
        logger.info("Game over with score %d after %d pieces", self.score, self.pieces_spawned)

    # ---------- Observation ----------
    def get_state(self) -> np.ndarray:
        # 1 for settled cells, 2 for the falling piece
        state = (self.grid.grid != 0).astype(np.int8)
        if self.current_piece is not None:
            for row, col in self.current_piece.absolute_cells():
                state[row, col] = 2
        return state
