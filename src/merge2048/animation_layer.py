from dataclasses import dataclass
from typing import List, Optional, Tuple

from merge2048.game import GameState
from merge2048.session import Game2048

# ===== Animation event structures =====

@dataclass(frozen=True)
class MoveEvent:
    id: int
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    merges_into: Optional[int] = None  # id of the merged tile this one disappears into, else None

    @property
    def distance(self) -> int:
        """Cells travelled, for scaling slide duration."""
        return abs(self.to_row - self.from_row) + abs(self.to_col - self.from_col)

@dataclass(frozen=True)
class MergeEvent:
    into_row: int
    into_col: int
    from_ids: Tuple[int, int]  # ordered by original (row, col) for deterministic visuals
    new_id: int
    new_value: int

@dataclass(frozen=True)
class SpawnEvent:
    row: int
    col: int
    value: int
    id: int


Events = Tuple[List[MoveEvent], List[MergeEvent], List[SpawnEvent]]


def plan_events(previous: GameState, current: GameState) -> Events:
    """
    Translate one transition into renderer events.
    Tiles keep their id while sliding; merge sources slide into the merged tile's cell.
    """
    if not current.moved:
        return [], [], []

    before = {t.id: t.position for t in previous.board.tiles()}
    move_events: List[MoveEvent] = []
    merge_events: List[MergeEvent] = []

    for tile in current.board.tiles():
        old = before.get(tile.id)
        if old is not None and old != tile.position:
            move_events.append(MoveEvent(
                id=tile.id,
                from_row=old.y, from_col=old.x,
                to_row=tile.position.y, to_col=tile.position.x,
            ))

    for merge in current.diff.merges:
        into = merge.tile.position
        origins = [before.get(src.id, src.position) for src in merge.sources]
        for src, origin in zip(merge.sources, origins):
            if origin != into:
                move_events.append(MoveEvent(
                    id=src.id,
                    from_row=origin.y, from_col=origin.x,
                    to_row=into.y, to_col=into.x,
                    merges_into=merge.tile.id,
                ))
        ordered = [src for _, src in sorted(zip(origins, merge.sources), key=lambda p: (p[0].y, p[0].x))]
        merge_events.append(MergeEvent(
            into_row=into.y,
            into_col=into.x,
            from_ids=(ordered[0].id, ordered[1].id),
            new_id=merge.tile.id,
            new_value=merge.tile.value,
        ))

    spawn_events = [SpawnEvent(t.position.y, t.position.x, t.value, t.id) for t in current.diff.spawned]
    return move_events, merge_events, spawn_events


class AnimatedGame2048:
    """
    Animation layer that wraps a Game2048 session.
    Provides animation events while keeping the core game logic pure.
    """

    def __init__(self, game: Optional[Game2048] = None):
        self.game = game or Game2048()

    def initial_events(self) -> List[SpawnEvent]:
        """Spawn events for the tiles currently on the board (first frame)."""
        return [SpawnEvent(t.position.y, t.position.x, t.value, t.id) for t in self.game.board.tiles()]

    def move(self, direction: str) -> Events:
        """
        Perform a move and return animation events.
        Raises ValueError on invalid/no-op move.
        """
        previous = self.game.state
        if not self.game.move(direction):
            raise ValueError("Invalid move: No tiles moved or combined.")
        return plan_events(previous, self.game.state)

    # ===== Delegate methods to the session =====

    def get_score(self) -> int:
        return self.game.get_score()

    def get_move_count(self) -> int:
        return self.game.get_move_count()

    def get_valid_moves(self) -> List[str]:
        return self.game.get_valid_moves()

    def is_game_over(self) -> bool:
        return self.game.is_game_over()

    def reset(self) -> List[SpawnEvent]:
        self.game.reset()
        return self.initial_events()

    @property
    def board(self):
        return self.game.board
