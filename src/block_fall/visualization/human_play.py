from __future__ import annotations

import argparse
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

import pygame

from block_fall.game import Action, BlockFallGame, GameConfig
from .renderer import PygameRenderer


logger = logging.getLogger(__name__)

KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.DOWN,
}


class PygameScheduler:
    """Periodic callbacks on the pygame clock, fired from ``pump`` once per frame."""

    def __init__(self) -> None:
        # handle -> [interval_ms, next_due_ms, callback]
        self._timers: Dict[int, List[Any]] = {}
        self._ids = itertools.count(1)

    def schedule(self, interval: float, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        interval_ms = max(1, int(round(interval * 1000)))
        self._timers[handle] = [interval_ms, pygame.time.get_ticks() + interval_ms, callback]
        return handle

    def cancel(self, handle: int) -> None:
        self._timers.pop(handle, None)

    def pump(self) -> None:
        now = pygame.time.get_ticks()
        for handle in list(self._timers):
            timer = self._timers.get(handle)
            if timer is None or timer[1] > now:
                continue
            timer[1] = now + timer[0]
            timer[2]()


class PygameInput:
    """Turns KEYDOWN events into engine actions for the current subscribers."""

    def __init__(self) -> None:
        self._subscribers: Dict[int, Callable[[Action], Any]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, callback: Callable[[Action], Any]) -> int:
        handle = next(self._ids)
        self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscribers.pop(handle, None)

    def dispatch(self, event: pygame.event.Event) -> None:
        action = KEY_TO_ACTION.get(event.key)
        if action is None:
            return
        for callback in list(self._subscribers.values()):
            callback(action)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Fall with the keyboard.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def run(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    try:
        renderer = PygameRenderer(cell_size=args.cell_size)
        scheduler = PygameScheduler()
        keyboard = PygameInput()
        game = BlockFallGame(
            GameConfig(random_seed=args.seed),
            renderer=renderer,
            scheduler=scheduler,
            input_source=keyboard,
        )
        screen = pygame.display.set_mode(renderer.size)
        pygame.display.set_caption("Block Fall")
        clock = pygame.time.Clock()
        game.start_new_game()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_n:
                        game.start_new_game()
                    elif event.key == pygame.K_p:
                        game.toggle_pause()
                    else:
                        keyboard.dispatch(event)

            scheduler.pump()
            renderer.draw(screen)
            clock.tick(args.fps)
        logger.info("Session closed with score %d", game.score)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
