"""Collaborators the engine talks to but does not own.

The engine only ever calls these after it has committed the matching state
change, so implementations are free to be purely presentational.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


Callback = Callable[[], None]


class Renderer(Protocol):
    def draw_cell(self, row: int, col: int, color: int) -> None: ...

    def remove_cell(self, row: int, col: int) -> None: ...

    def move_cell_down(self, row: int, col: int, row_count: int) -> None: ...

    def clear_board(self) -> None: ...

    def clear_preview(self) -> None: ...

    def draw_preview_cell(self, row: int, col: int, color: int) -> None: ...

    def draw_score(self, score: int) -> None: ...

    def show_game_over(self, message: str) -> None: ...


class Scheduler(Protocol):
    def schedule(self, interval: float, callback: Callback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class InputSource(Protocol):
    """Delivers discrete move intents (``Action`` values) to a subscriber."""

    def subscribe(self, callback: Callable[[Any], Any]) -> Any: ...

    def unsubscribe(self, handle: Any) -> None: ...


class NullRenderer:
    def draw_cell(self, row: int, col: int, color: int) -> None:
        pass

    def remove_cell(self, row: int, col: int) -> None:
        pass

    def move_cell_down(self, row: int, col: int, row_count: int) -> None:
        pass

    def clear_board(self) -> None:
        pass

    def clear_preview(self) -> None:
        pass

    def draw_preview_cell(self, row: int, col: int, color: int) -> None:
        pass

    def draw_score(self, score: int) -> None:
        pass

    def show_game_over(self, message: str) -> None:
        pass
