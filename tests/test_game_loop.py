import unittest

import numpy as np

from block_fall.game import (
    COLS,
    ROWS,
    SHAPES,
    Action,
    BlockFallGame,
    GameConfig,
    GameStatus,
    ManualScheduler,
    Piece,
)

from fakes import FakeInput, RecordingRenderer, grid_picture


class GameTestCase(unittest.TestCase):
    def setUp(self):
        self.renderer = RecordingRenderer()
        self.scheduler = ManualScheduler()
        self.keys = FakeInput()
        self.game = BlockFallGame(
            GameConfig(random_seed=1234),
            renderer=self.renderer,
            scheduler=self.scheduler,
            input_source=self.keys,
        )

    def _place_active(self, piece):
        self.assertTrue(self.game.grid.commit_new_piece(piece.absolute_cells(), piece.color))
        self.game.current_piece = piece

    def _fill(self, cells, color=1):
        self.assertTrue(self.game.grid.commit_new_piece(set(cells), color))


class TestLifecycle(GameTestCase):
    def test_given_idle_game_when_started_then_running_with_fresh_session(self):
        self.assertEqual(self.game.status, GameStatus.IDLE)
        self.game.start_new_game()
        self.assertEqual(self.game.status, GameStatus.RUNNING)
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.game.interval, 1.0)
        self.assertIsNone(self.game.current_piece)
        self.assertIsNone(self.game.next_piece)
        self.assertEqual(self.scheduler.active, 1)
        self.assertEqual(len(self.keys.subscribers), 1)
        self.assertEqual(self.renderer.scores, [0])

    def test_given_repeated_starts_when_counting_timers_then_only_one_of_each(self):
        for _ in range(3):
            self.game.start_new_game()
        self.assertEqual(self.scheduler.active, 1)
        self.assertEqual(len(self.keys.subscribers), 1)

    def test_given_played_game_when_restarted_then_board_and_score_reset(self):
        self.game.start_new_game()
        self.game.tick()
        self.game.score = 7
        self.game.interval = 0.5
        self.game.start_new_game()
        self.assertEqual(int(np.count_nonzero(self.game.grid.grid)), 0)
        self.assertEqual(self.renderer.board, {})
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.game.interval, 1.0)
        self.assertIsNone(self.game.current_piece)

    def test_given_running_game_when_paused_and_resumed_then_handles_detached_and_restored(self):
        self.game.start_new_game()
        self.game.tick()
        piece = self.game.current_piece
        before = self.game.grid.clone_state()

        self.assertTrue(self.game.pause())
        self.assertEqual(self.game.status, GameStatus.PAUSED)
        self.assertEqual(self.scheduler.active, 0)
        self.assertEqual(self.keys.subscribers, {})
        self.assertFalse(self.game.pause())
        self.scheduler.advance(10.0)
        self.assertFalse(self.game.handle_action(Action.LEFT))
        np.testing.assert_array_equal(self.game.grid.grid, before)
        self.assertEqual(self.game.current_piece, piece)

        self.assertTrue(self.game.resume())
        self.assertEqual(self.game.status, GameStatus.RUNNING)
        self.assertEqual(self.scheduler.active, 1)
        self.assertEqual(len(self.keys.subscribers), 1)
        self.assertFalse(self.game.resume())

    def test_given_running_game_when_toggle_pause_twice_then_running_again(self):
        self.game.start_new_game()
        self.game.toggle_pause()
        self.assertEqual(self.game.status, GameStatus.PAUSED)
        self.game.toggle_pause()
        self.assertEqual(self.game.status, GameStatus.RUNNING)

    def test_given_same_seed_when_reset_then_same_piece_sequence(self):
        other = BlockFallGame(GameConfig(random_seed=99))
        runs = []
        for game in (self.game, other):
            game.reset(seed=7)
            pieces = []
            for _ in range(5):
                game.current_piece = None
                game.grid.reset()
                game.tick()
                pieces.append(game.current_piece)
            runs.append(pieces)
        self.assertEqual(runs[0], runs[1])


class TestSpawning(GameTestCase):
    def test_given_no_queued_piece_when_first_tick_then_piece_spawns_at_spawn_column(self):
        self.game.start_new_game()
        self.game.tick()
        piece = self.game.current_piece
        self.assertIsNotNone(piece)
        self.assertEqual((piece.row, piece.col), (0, COLS // 2 - 2))
        self.assertEqual(set(grid_picture(self.game.grid)), set(piece.absolute_cells()))
        self.assertIsNotNone(self.game.next_piece)
        self.assertEqual(self.game.pieces_spawned, 1)

    def test_given_next_piece_when_spawning_then_it_is_what_spawns(self):
        self.game.start_new_game()
        self.game.tick()
        queued = self.game.next_piece
        self.assertEqual(set(self.renderer.preview), set(queued.absolute_cells()))
        self.game.current_piece = None
        self.game.grid.reset()
        self.assertTrue(self.game.spawn_next())
        self.assertEqual(self.game.current_piece, queued.translated(0, COLS // 2 - 2))

    def test_given_blocked_spawn_area_when_spawning_then_game_over_without_score_change(self):
        self.game.start_new_game()
        self._fill({(r, c) for r in range(4) for c in range(3, 7)})
        before = self.game.grid.clone_state()
        self.assertFalse(self.game.spawn_next())
        np.testing.assert_array_equal(self.game.grid.grid, before)

        self.game.tick()
        self.assertEqual(self.game.status, GameStatus.GAME_OVER)
        self.assertTrue(self.game.game_over)
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.scheduler.active, 0)
        self.assertEqual(self.keys.subscribers, {})
        self.assertEqual(self.renderer.messages, ["Game over!"])

    def test_given_game_over_when_ticking_or_acting_then_nothing_changes(self):
        self.game.start_new_game()
        self._fill({(r, c) for r in range(4) for c in range(3, 7)})
        self.game.tick()
        before = self.game.grid.clone_state()
        self.game.tick()
        self.assertFalse(self.game.handle_action(Action.DOWN))
        np.testing.assert_array_equal(self.game.grid.grid, before)
        self.assertEqual(self.renderer.messages, ["Game over!"])


class TestMovement(GameTestCase):
    def setUp(self):
        super().setUp()
        self.game.start_new_game()

    def test_given_active_piece_when_moved_left_until_wall_then_stops_at_column_zero(self):
        self._place_active(Piece(SHAPES[6], 2, row=5, col=3))
        moves = 0
        while self.game.handle_action(Action.LEFT):
            moves += 1
        self.assertEqual(moves, 4)
        self.assertEqual(min(c for _, c in self.game.current_piece.absolute_cells()), 0)
        self.assertEqual(set(grid_picture(self.game.grid)), set(self.game.current_piece.absolute_cells()))

    def test_given_active_piece_when_moved_right_into_block_then_rejected(self):
        self._place_active(Piece(SHAPES[6], 2, row=5, col=3))
        self._fill({(6, 6)}, 4)
        before = self.game.grid.clone_state()
        self.assertFalse(self.game.handle_action(Action.RIGHT))
        np.testing.assert_array_equal(self.game.grid.grid, before)
        self.assertEqual(self.game.current_piece.col, 3)

    def test_given_bar_against_wall_when_rotated_out_of_bounds_then_rejected(self):
        bar = Piece(SHAPES[1], 3, row=2, col=-2)
        self._place_active(bar)
        self.assertFalse(self.game.handle_action(Action.ROTATE))
        self.assertEqual(self.game.current_piece, bar)

    def test_given_bar_in_open_space_when_rotated_then_lies_flat(self):
        self._place_active(Piece(SHAPES[1], 3, row=2, col=3))
        self.assertTrue(self.game.handle_action(Action.ROTATE))
        self.assertEqual(self.game.current_piece.absolute_cells(), {(4, 3), (4, 4), (4, 5), (4, 6)})
        self.assertEqual(set(grid_picture(self.game.grid)), {(4, 3), (4, 4), (4, 5), (4, 6)})

    def test_given_input_source_when_down_intent_then_piece_moves_one_row(self):
        self._place_active(Piece(SHAPES[6], 2, row=5, col=3))
        self.keys.emit(Action.DOWN)
        self.assertEqual(self.game.current_piece.row, 6)

    def test_given_piece_on_floor_when_down_intent_then_rejected_without_finalizing(self):
        piece = Piece(SHAPES[6], 2, row=ROWS - 3, col=3)
        self._place_active(piece)
        self.assertFalse(self.game.handle_action(Action.DOWN))
        self.assertEqual(self.game.current_piece, piece)

    def test_given_none_or_unknown_action_when_handled_then_false_or_error(self):
        self._place_active(Piece(SHAPES[6], 2, row=5, col=3))
        self.assertFalse(self.game.handle_action(Action.NONE))
        with self.assertRaises(ValueError):
            self.game.handle_action(99)

    def test_given_no_active_piece_when_transform_attempted_then_false(self):
        self.assertFalse(self.game.attempt_transform(lambda p: p.translated(0, 1)))


class TestTicking(GameTestCase):
    def setUp(self):
        super().setUp()
        self.game.start_new_game()

    def test_given_falling_piece_when_ticked_then_moves_down_one_row(self):
        self.game.tick()
        row = self.game.current_piece.row
        self.game.tick()
        self.assertEqual(self.game.current_piece.row, row + 1)

    def test_given_scheduler_when_time_passes_then_one_tick_per_interval(self):
        self.assertEqual(self.scheduler.advance(1.0), 1)
        self.assertEqual(self.game.current_piece.row, 0)
        self.assertEqual(self.scheduler.advance(2.0), 2)
        self.assertEqual(self.game.current_piece.row, 2)

    def test_given_landed_piece_when_ticked_then_finalized_and_next_spawned(self):
        piece = Piece(SHAPES[6], 2, row=ROWS - 3, col=0)
        self._place_active(piece)
        self.game.tick()
        self.assertEqual(self.game.grid.color_at(ROWS - 1, 1), 2)
        self.assertNotEqual(self.game.current_piece, piece)
        self.assertEqual(self.game.current_piece.row, 0)
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.game.interval, 1.0)

    def test_given_piece_completing_rows_when_finalized_then_lines_cleared_and_scored(self):
        self._fill({(r, c) for r in (ROWS - 2, ROWS - 1) for c in range(2, COLS)}, 5)
        self._fill({(ROWS - 3, 9)}, 6)
        self._place_active(Piece(SHAPES[6], 2, row=ROWS - 3, col=-1))
        self.game.tick()
        self.assertEqual(self.game.score, 2)
        self.assertEqual(self.renderer.scores[-1], 2)
        self.assertEqual(self.game.grid.color_at(ROWS - 1, 9), 6)
        self.assertEqual(self.game.interval, 1.0)
        # only the dropped block and the freshly spawned piece remain
        expected = {(ROWS - 1, 9)} | set(self.game.current_piece.absolute_cells())
        self.assertEqual(set(grid_picture(self.game.grid)), expected)
        self.assertEqual(self.renderer.board, grid_picture(self.game.grid))

    def test_given_score_reaching_multiple_of_five_when_lines_clear_then_interval_shrinks(self):
        self.game.score = 3
        self._fill({(r, c) for r in (ROWS - 2, ROWS - 1) for c in range(2, COLS)}, 5)
        self._place_active(Piece(SHAPES[6], 2, row=ROWS - 3, col=-1))
        timer = self.game._timer
        self.game.tick()
        self.assertEqual(self.game.score, 5)
        self.assertAlmostEqual(self.game.interval, 0.98)
        self.assertNotEqual(self.game._timer, timer)
        self.assertEqual(self.scheduler.active, 1)
        self.assertAlmostEqual(self.scheduler.interval_of(self.game._timer), 0.98)

    def test_given_score_not_multiple_of_five_when_lines_clear_then_interval_kept(self):
        self.game.score = 4
        self._fill({(r, c) for r in (ROWS - 2, ROWS - 1) for c in range(2, COLS)}, 5)
        self._place_active(Piece(SHAPES[6], 2, row=ROWS - 3, col=-1))
        self.game.tick()
        self.assertEqual(self.game.score, 6)
        self.assertEqual(self.game.interval, 1.0)

    def test_given_zero_score_when_piece_lands_without_clear_then_no_speed_up(self):
        self._place_active(Piece(SHAPES[6], 2, row=ROWS - 3, col=0))
        timer = self.game._timer
        self.game.tick()
        self.assertEqual(self.game.interval, 1.0)
        self.assertEqual(self.game._timer, timer)

    def test_given_random_play_when_checking_renderer_then_mirror_matches_grid(self):
        actions = [Action.LEFT, Action.RIGHT, Action.ROTATE, Action.DOWN]
        for step in range(400):
            if self.game.game_over:
                break
            self.keys.emit(actions[(step * 7) % 4])
            self.scheduler.advance(self.game.interval)
            picture = grid_picture(self.game.grid)
            self.assertEqual(self.renderer.board, picture)
            if self.game.current_piece is not None:
                self.assertTrue(set(self.game.current_piece.absolute_cells()) <= set(picture))


class TestState(GameTestCase):
    def test_given_settled_and_falling_cells_when_get_state_then_marked_one_and_two(self):
        self.game.start_new_game()
        self._fill({(ROWS - 1, 0)})
        self._place_active(Piece(SHAPES[6], 2, row=5, col=3))
        state = self.game.get_state()
        self.assertEqual(state.shape, (ROWS, COLS))
        self.assertEqual(state[ROWS - 1, 0], 1)
        for row, col in self.game.current_piece.absolute_cells():
            self.assertEqual(state[row, col], 2)
        self.assertEqual(int(np.count_nonzero(state)), 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
