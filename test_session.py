import tempfile
import unittest
import numpy as np
from pathlib import Path
from unittest.mock import MagicMock

from merge2048.game import Board, GameState, TileIdGenerator
from merge2048.session import Game2048
from merge2048.storage import GameStore


class TestGame2048(unittest.TestCase):

    def setUp(self):
        self.game = Game2048(seed=1)

    def load(self, values, **kwargs):
        self.game.state = GameState(board=Board.from_values(values, TileIdGenerator(1)), **kwargs)
        self.game.ids = TileIdGenerator(100)

    def test_initial_board(self):
        self.assertEqual(np.count_nonzero(self.game.get_state()), 2)
        self.assertEqual(self.game.get_score(), 0)
        self.assertEqual(self.game.get_move_count(), 0)

    def test_move_left(self):
        self.load([[2, 2, 0, 0], [4, 0, 4, 0], [0, 0, 0, 0], [2, 2, 2, 2]])
        self.assertTrue(self.game.move('left'))
        board = self.game.get_state()
        np.testing.assert_array_equal(board[0, :1], [4])
        np.testing.assert_array_equal(board[1, :1], [8])
        np.testing.assert_array_equal(board[3, :2], [4, 4])
        self.assertEqual(self.game.get_score(), 20)
        self.assertEqual(self.game.get_move_count(), 1)
        self.assertEqual(np.count_nonzero(board), 5)

    def test_noop_move_not_counted(self):
        self.load([[2, 0, 0, 0]] + [[0, 0, 0, 0]] * 3)
        self.assertFalse(self.game.move('left'))
        self.assertEqual(self.game.get_move_count(), 0)

    def test_game_over_rejects_moves(self):
        self.load([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]], over=True)
        self.assertTrue(self.game.is_game_over())
        self.assertEqual(self.game.get_valid_moves(), [])
        self.assertFalse(self.game.move('left'))

    def test_not_game_over(self):
        self.load([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 0]])
        self.assertFalse(self.game.is_game_over())
        self.assertIn('right', self.game.get_valid_moves())

    def test_new_game_keeps_best_score(self):
        self.load([[8, 8, 0, 0]] + [[0, 0, 0, 0]] * 3, score=200, best_score=150,
                  achieved_milestones=(256,))
        self.game.move('left')
        self.assertEqual(self.game.best_score, 216)
        self.game.new_game()
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.game.best_score, 216)
        self.assertEqual(self.game.state.achieved_milestones, ())
        self.assertEqual(self.game.get_move_count(), 0)

    def test_continue_game(self):
        self.load([[1024, 1024, 0, 0]] + [[0, 0, 0, 0]] * 3)
        with self.assertLogs('merge2048.session', level='INFO') as logs:
            self.game.move('left')
        self.assertTrue(self.game.won)
        self.assertTrue(any('2048' in line for line in logs.output))
        self.game.continue_game()
        self.assertFalse(self.game.won)
        self.assertTrue(self.game.state.win_acknowledged)


class TestSessionPersistence(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = GameStore(Path(self.tmp.name) / 'state.json')

    def tearDown(self):
        self.tmp.cleanup()

    def test_best_score_loaded_at_startup(self):
        self.store.save_best_score(4096)
        game = Game2048(store=self.store, seed=3)
        self.assertEqual(game.best_score, 4096)

    def test_progress_is_saved_and_resumed(self):
        game = Game2048(store=self.store, seed=3)
        for direction in ('left', 'up', 'right', 'down', 'left', 'up'):
            game.move(direction)
        resumed = Game2048(store=self.store, seed=4)
        self.assertEqual(resumed.board, game.board)
        self.assertEqual(resumed.score, game.score)
        # fresh ids continue past the loaded ones
        self.assertGreater(resumed.ids(), game.board.max_id())

    def test_no_resume_starts_fresh(self):
        game = Game2048(store=self.store, seed=3)
        game.move('left')
        game.move('up')
        fresh = Game2048(store=self.store, seed=5, resume=False)
        self.assertEqual(fresh.score, 0)
        self.assertEqual(len(fresh.board.tiles()), 2)

    def test_finished_game_is_cleared(self):
        store = MagicMock(spec=GameStore)
        store.load_game.return_value = None
        store.load_best_score.return_value = 0
        game = Game2048(store=store, seed=1)
        blocked = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [8, 16, 32, 0]]
        game.state = GameState(board=Board.from_values(blocked, TileIdGenerator(1)))
        game.ids = TileIdGenerator(100)
        game.spawner = MagicMock()
        game.spawner.choose.side_effect = lambda empty: (empty[0], 4)

        self.assertTrue(game.move('right'))
        self.assertTrue(game.over)
        store.clear_game.assert_called_once()
        store.save_game.assert_not_called()

    def test_blocked_saved_board_not_resumed(self):
        blocked = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]]
        state = GameState(board=Board.from_values(blocked, TileIdGenerator(1)), score=40)
        # stored with over=False although no move is possible
        self.store.save_game(state)
        game = Game2048(store=self.store, seed=2)
        self.assertFalse(game.over)
        self.assertEqual(game.score, 0)
        self.assertEqual(len(game.board.tiles()), 2)


if __name__ == "__main__":
    unittest.main()
