import logging
import random
import numpy as np
from typing import List, Optional

from merge2048.game import (
    Board,
    GameState,
    RandomSpawner,
    TileIdGenerator,
    continue_game,
    create_initial_state,
    get_valid_moves,
    move,
)
from merge2048.storage import GameStore

logger = logging.getLogger(__name__)

# A new best score is announced only when it beats the previous one by more than this
BEST_SCORE_NOTICE_MARGIN = 100


class Game2048:
    """
    Stateful driver around the pure move engine.
    Owns the single GameState, serialises moves and hands results to the store.
    """

    def __init__(self, store: Optional[GameStore] = None, seed: Optional[int] = None,
                 resume: bool = True, spawner: Optional[RandomSpawner] = None):
        self.store = store
        self.spawner = spawner or RandomSpawner(random.Random(seed))
        self.move_count = 0

        saved = self.store.load_game() if (store is not None and resume) else None
        if saved is not None and not saved.over:
            logger.info("Resuming saved game (score %d)", saved.score)
            self.ids = TileIdGenerator(saved.board.max_id() + 1)
            self.state = saved
        else:
            self.ids = TileIdGenerator()
            self.state = create_initial_state(self._stored_best(), self.spawner, self.ids)

    def _stored_best(self) -> int:
        return self.store.load_best_score() if self.store is not None else 0

    def move(self, direction: str) -> bool:
        """
        Perform a move in the given direction.
        Returns True if the move changed the board, False otherwise.
        """
        if self.state.over:
            return False

        previous_best = self.state.best_score
        previous_tier = self.state.win_tier
        self.state = move(self.state, direction, self.spawner, self.ids)
        if not self.state.moved:
            return False
        self.move_count += 1

        for value in self.state.new_milestones:
            logger.info("Milestone reached: %d tile", value)
        if self.state.best_score > previous_best + BEST_SCORE_NOTICE_MARGIN:
            logger.info("New best score: %d points", self.state.best_score)
        if self.state.won and self.state.win_tier != previous_tier:
            logger.info("Win: reached %d", self.state.win_tier)
        if self.state.over:
            logger.info("Game over. Final score: %d", self.state.score)

        self._persist(best_changed=self.state.best_score > previous_best)
        return True

    def _persist(self, best_changed: bool = False):
        if self.store is None:
            return
        if best_changed:
            self.store.save_best_score(self.state.best_score)
        if self.state.over:
            self.store.clear_game()
        else:
            self.store.save_game(self.state)

    def new_game(self):
        """Start over, keeping the best score. Milestones reset."""
        best = max(self.state.best_score, self._stored_best())
        self.state = create_initial_state(best, self.spawner, self.ids)
        self.move_count = 0
        self._persist()

    reset = new_game

    def continue_game(self):
        """Dismiss a win and keep playing."""
        self.state = continue_game(self.state)
        self._persist()

    # ===== Accessors =====

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def best_score(self) -> int:
        return self.state.best_score

    @property
    def won(self) -> bool:
        return self.state.won

    @property
    def over(self) -> bool:
        return self.state.over

    def get_state(self) -> np.ndarray:
        """Current board values as a numpy array (0 = empty)."""
        return self.state.board.values()

    def get_score(self) -> int:
        return self.state.score

    def get_move_count(self) -> int:
        return self.move_count

    def get_valid_moves(self) -> List[str]:
        return get_valid_moves(self.state.board)

    def is_game_over(self) -> bool:
        return self.state.over
