"""
JSON persistence for best score and the in-progress game.

Nothing here is allowed to break a running game: read and write failures are
logged and reported as "nothing stored" to the caller.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from merge2048.game import SIZE, TILE_VALUES, Board, GameState, Position, Tile, is_game_over

logger = logging.getLogger(__name__)

STATE_FILENAME = 'state.json'
HOME_ENV_VAR = 'MERGE2048_HOME'


def default_storage_path() -> Path:
    home = os.environ.get(HOME_ENV_VAR)
    base = Path(home) if home else Path.home() / '.merge2048'
    return base / STATE_FILENAME


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialisable snapshot of a game. The per-move diff is not kept."""
    return {
        'board': [
            [{'id': t.id, 'value': t.value} if t is not None else None for t in row]
            for row in state.board.cells
        ],
        'score': state.score,
        'won': state.won,
        'over': state.over,
        'win_acknowledged': state.win_acknowledged,
        'achieved_4096': state.achieved_4096,
        'achieved_8192': state.achieved_8192,
        'achieved_milestones': list(state.achieved_milestones),
    }


def _check_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def state_from_dict(data: Dict[str, Any], best_score: int = 0) -> GameState:
    """Rebuild a game from `state_to_dict` output. Raises ValueError on malformed input."""
    rows = data['board']
    if not isinstance(rows, list) or len(rows) != SIZE:
        raise ValueError(f"board must have {SIZE} rows")
    tiles = []
    for y, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != SIZE:
            raise ValueError(f"board row {y} must have {SIZE} cells")
        for x, cell in enumerate(row):
            if cell is None:
                continue
            tile_id = _check_int('tile id', cell['id'])
            value = _check_int('tile value', cell['value'])
            if tile_id == 0:
                raise ValueError("tile id must be positive")
            if value not in TILE_VALUES:
                raise ValueError(f"invalid tile value {value!r} at ({x}, {y})")
            tiles.append(Tile(tile_id, value, Position(x, y)))

    score = _check_int('score', data['score'])
    milestones = tuple(_check_int('milestone', m) for m in data.get('achieved_milestones', []))
    board = Board.from_tiles(tiles)
    return GameState(
        board=board,
        score=score,
        best_score=max(best_score, score),
        won=bool(data.get('won', False)),
        over=is_game_over(board),
        win_acknowledged=bool(data.get('win_acknowledged', False)),
        achieved_4096=bool(data.get('achieved_4096', False)),
        achieved_8192=bool(data.get('achieved_8192', False)),
        achieved_milestones=milestones,
    )


class GameStore:
    """Single JSON document holding `best_score` and an optional saved `game`."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else default_storage_path()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error reading %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring %s: expected a JSON object", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + '.tmp')
            with tmp.open('w', encoding='utf-8') as fh:
                json.dump(data, fh)
            tmp.replace(self.path)
        except OSError as e:
            logger.error("Error writing %s: %s", self.path, e)
            return False
        return True

    @staticmethod
    def _best_from(data: Dict[str, Any]) -> int:
        try:
            return _check_int('best_score', data.get('best_score', 0))
        except ValueError as e:
            logger.error("Error loading best score: %s", e)
            return 0

    def load_best_score(self) -> int:
        return self._best_from(self._read())

    def save_best_score(self, score: int) -> bool:
        data = self._read()
        data['best_score'] = int(score)
        return self._write(data)

    def save_game(self, state: GameState) -> bool:
        data = self._read()
        data['game'] = state_to_dict(state)
        data['best_score'] = max(self._best_from(data), state.best_score)
        return self._write(data)

    def load_game(self) -> Optional[GameState]:
        """Saved game, or None if absent or failing validation."""
        data = self._read()
        saved = data.get('game')
        if saved is None:
            return None
        try:
            return state_from_dict(saved, best_score=self._best_from(data))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding saved game in %s: %s", self.path, e)
            return None

    def clear_game(self) -> bool:
        data = self._read()
        if 'game' not in data:
            return True
        del data['game']
        return self._write(data)
