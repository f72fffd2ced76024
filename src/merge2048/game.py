import itertools
import random
import numpy as np
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

SIZE = 4
WIN_VALUE = 2048
ADVANCED_WIN_VALUES = (4096, 8192)
MILESTONE_VALUES = (256, 512, 1024, 2048, 4096, 8192)
TILE_VALUES = tuple(2 ** k for k in range(1, 17))  # 2 .. 65536

# Spawned tile values and their probabilities
SPAWN_VALUE_PROBS = {2: 0.9, 4: 0.1}

DIRECTIONS = ('up', 'right', 'down', 'left')


class Position(NamedTuple):
    x: int
    y: int


DIRECTION_VECTORS: Dict[str, Position] = {
    'up': Position(0, -1),
    'right': Position(1, 0),
    'down': Position(0, 1),
    'left': Position(-1, 0),
}

_FORWARD = tuple(range(SIZE))
_REVERSED = tuple(reversed(_FORWARD))


# ===== Tiles, board and per-move diff =====

@dataclass(frozen=True)
class Tile:
    id: int
    value: int
    position: Position


@dataclass(frozen=True)
class Merge:
    tile: Tile
    sources: Tuple[Tile, Tile]  # (moving tile, tile it merged into) as they stood on the grid at merge time


@dataclass(frozen=True)
class MoveDiff:
    """What a single transition added and consumed. Only valid for the move that produced it."""
    merges: Tuple[Merge, ...] = ()
    spawned: Tuple[Tile, ...] = ()
    new_milestones: Tuple[int, ...] = ()

    @property
    def tiles_to_add(self) -> Tuple[Tile, ...]:
        return tuple(m.tile for m in self.merges) + self.spawned

    @property
    def tiles_to_remove(self) -> Tuple[Tile, ...]:
        return tuple(src for m in self.merges for src in m.sources)

    @property
    def score_gain(self) -> int:
        return sum(m.tile.value for m in self.merges)

    def merged_from(self, tile_id: int) -> Optional[Tuple[Tile, Tile]]:
        for m in self.merges:
            if m.tile.id == tile_id:
                return m.sources
        return None

    def is_new(self, tile_id: int) -> bool:
        return any(t.id == tile_id for t in self.spawned)


Cells = Sequence[Sequence[Optional[Tile]]]


def within_bounds(position: Position) -> bool:
    return 0 <= position.x < SIZE and 0 <= position.y < SIZE


@dataclass(frozen=True)
class Board:
    """
    Immutable 4x4 grid indexed as cells[y][x].
    A tile's stored position always equals the cell holding it.
    """
    cells: Tuple[Tuple[Optional[Tile], ...], ...]

    @classmethod
    def empty(cls) -> 'Board':
        return cls(tuple((None,) * SIZE for _ in range(SIZE)))

    @classmethod
    def from_grid(cls, grid: Cells) -> 'Board':
        """Freeze a mutable working grid."""
        return cls(tuple(tuple(row) for row in grid))

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile]) -> 'Board':
        """Build a board from loose tiles, rejecting overlaps and out-of-range positions."""
        grid: List[List[Optional[Tile]]] = [[None] * SIZE for _ in range(SIZE)]
        seen_ids = set()
        for tile in tiles:
            if not within_bounds(tile.position):
                raise ValueError(f"Tile {tile.id} is off the board at {tuple(tile.position)}")
            if grid[tile.position.y][tile.position.x] is not None:
                raise ValueError(f"Two tiles share position {tuple(tile.position)}")
            if tile.id in seen_ids:
                raise ValueError(f"Duplicate tile id {tile.id}")
            seen_ids.add(tile.id)
            grid[tile.position.y][tile.position.x] = tile
        return cls.from_grid(grid)

    @classmethod
    def from_values(cls, values, ids: Optional['TileIdGenerator'] = None) -> 'Board':
        """Build a board from a 4x4 grid of ints (0 = empty), handing out fresh ids row by row."""
        ids = ids or _default_ids
        tiles = []
        for y, row in enumerate(values):
            for x, v in enumerate(row):
                if v:
                    tiles.append(Tile(ids(), int(v), Position(x, y)))
        return cls.from_tiles(tiles)

    def tile_at(self, position: Position) -> Optional[Tile]:
        return self.cells[position.y][position.x]

    def tiles(self) -> List[Tile]:
        return [t for row in self.cells for t in row if t is not None]

    def empty_cells(self) -> List[Position]:
        return find_empty_cells(self.cells)

    def values(self) -> np.ndarray:
        out = np.zeros((SIZE, SIZE), dtype=np.int64)
        for t in self.tiles():
            out[t.position.y, t.position.x] = t.value
        return out

    def rows(self) -> List[List[Optional[int]]]:
        return [[t.value if t is not None else None for t in row] for row in self.cells]

    def max_value(self) -> int:
        return int(self.values().max())

    def max_id(self) -> int:
        return max((t.id for t in self.tiles()), default=0)

    def thaw(self) -> List[List[Optional[Tile]]]:
        return [list(row) for row in self.cells]


@dataclass(frozen=True)
class GameState:
    board: Board
    score: int = 0
    best_score: int = 0
    won: bool = False
    over: bool = False
    moved: bool = False
    win_acknowledged: bool = False
    achieved_4096: bool = False
    achieved_8192: bool = False
    achieved_milestones: Tuple[int, ...] = ()
    diff: MoveDiff = field(default_factory=MoveDiff)

    @property
    def tiles_to_add(self) -> Tuple[Tile, ...]:
        return self.diff.tiles_to_add

    @property
    def tiles_to_remove(self) -> Tuple[Tile, ...]:
        return self.diff.tiles_to_remove

    @property
    def new_milestones(self) -> Tuple[int, ...]:
        return self.diff.new_milestones

    @property
    def win_tier(self) -> Optional[int]:
        """Highest win level reached while `won` is raised, else None."""
        if not self.won:
            return None
        if self.achieved_8192:
            return 8192
        if self.achieved_4096:
            return 4096
        return WIN_VALUE


# ===== Injectable randomness and ids =====

class TileIdGenerator:
    """Monotonic source of tile ids."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def __call__(self) -> int:
        return next(self._counter)


class RandomSpawner:
    """Chooses where a new tile lands (uniform over empty cells) and its value (2 or 4)."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose(self, empty: Sequence[Position]) -> Tuple[Position, int]:
        position = self.rng.choice(list(empty))
        value = 2 if self.rng.random() < SPAWN_VALUE_PROBS[2] else 4
        return position, value


_default_spawner = RandomSpawner()
_default_ids = TileIdGenerator()


# ===== Board queries =====

def find_empty_cells(cells: Cells) -> List[Position]:
    return [Position(x, y) for y in range(SIZE) for x in range(SIZE) if cells[y][x] is None]


def is_game_over(board: Board) -> bool:
    """No empty cell and no horizontally or vertically adjacent equal pair."""
    values = board.values()
    if not values.all():
        return False
    return not (np.any(values[:, :-1] == values[:, 1:]) or np.any(values[:-1, :] == values[1:, :]))


def has_won(board: Board) -> bool:
    return board.max_value() >= WIN_VALUE


def get_vector(direction: str) -> Position:
    try:
        return DIRECTION_VECTORS[direction]
    except KeyError:
        raise ValueError("Invalid move direction") from None


def build_traversal(direction: str) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """Return (xs, ys) so that tiles farthest along the direction come first."""
    vector = get_vector(direction)
    xs = _REVERSED if vector.x == 1 else _FORWARD
    ys = _REVERSED if vector.y == 1 else _FORWARD
    return xs, ys


def find_farthest_position(cells: Cells, position: Position,
                           vector: Position) -> Tuple[Position, Optional[Position]]:
    """
    Walk from `position` along `vector` over empty cells.
    Returns (farthest empty cell reached, first occupied cell beyond it or None at the border).
    """
    previous = position
    cell = Position(position.x + vector.x, position.y + vector.y)
    while within_bounds(cell) and cells[cell.y][cell.x] is None:
        previous = cell
        cell = Position(cell.x + vector.x, cell.y + vector.y)
    return previous, (cell if within_bounds(cell) else None)


def can_move(board: Board, direction: str) -> bool:
    """True if moving in `direction` would slide or merge at least one tile."""
    vector = get_vector(direction)
    for tile in board.tiles():
        farthest, nxt = find_farthest_position(board.cells, tile.position, vector)
        if farthest != tile.position:
            return True
        if nxt is not None and board.tile_at(nxt).value == tile.value:
            return True
    return False


def get_valid_moves(board: Board) -> List[str]:
    return [d for d in DIRECTIONS if can_move(board, d)]


# ===== Transitions =====

def add_random_tile(cells: List[List[Optional[Tile]]],
                    spawner: Optional[RandomSpawner] = None,
                    ids: Optional[TileIdGenerator] = None) -> Optional[Tile]:
    """Place one new tile in a random empty cell of a mutable grid; None if the grid is full."""
    empty = find_empty_cells(cells)
    if not empty:
        return None
    position, value = (spawner or _default_spawner).choose(empty)
    tile = Tile((ids or _default_ids)(), value, position)
    cells[position.y][position.x] = tile
    return tile


def create_initial_state(best_score: int = 0,
                         spawner: Optional[RandomSpawner] = None,
                         ids: Optional[TileIdGenerator] = None) -> GameState:
    """Fresh game: empty board plus two spawned tiles."""
    grid = Board.empty().thaw()
    spawned = []
    for _ in range(2):
        spawned.append(add_random_tile(grid, spawner, ids))
    return GameState(board=Board.from_grid(grid), best_score=best_score,
                     diff=MoveDiff(spawned=tuple(spawned)))


def continue_game(state: GameState) -> GameState:
    """Player acknowledged the win dialog and keeps playing. Without a pending win nothing changes."""
    if not state.won:
        return state
    return replace(state, won=False, win_acknowledged=True)


def move(state: GameState, direction: str,
         spawner: Optional[RandomSpawner] = None,
         ids: Optional[TileIdGenerator] = None) -> GameState:
    """
    Apply one swipe and return the resulting state.

    Tiles are processed farthest-first along the direction. Each tile slides to the
    farthest empty cell; if the next occupied cell holds an equal value that was not
    itself produced by a merge during this move, the two combine. A move that changes
    nothing returns the same board and score with `moved=False` and spawns nothing.
    """
    ids = ids or _default_ids
    vector = get_vector(direction)
    xs, ys = build_traversal(direction)

    grid = state.board.thaw()
    merges: List[Merge] = []
    merged_ids = set()
    moved = False

    for y in ys:
        for x in xs:
            tile = grid[y][x]
            if tile is None:
                continue
            farthest, nxt = find_farthest_position(grid, tile.position, vector)
            target = grid[nxt.y][nxt.x] if nxt is not None else None

            if target is not None and target.value == tile.value and target.id not in merged_ids:
                merged = Tile(ids(), tile.value * 2, nxt)
                grid[y][x] = None
                grid[nxt.y][nxt.x] = merged
                merged_ids.add(merged.id)
                merges.append(Merge(merged, (tile, target)))
                moved = True
            elif farthest != tile.position:
                grid[y][x] = None
                grid[farthest.y][farthest.x] = replace(tile, position=farthest)
                moved = True

    if not moved:
        return replace(state, moved=False, diff=MoveDiff())

    spawned = add_random_tile(grid, spawner, ids)
    board = Board.from_grid(grid)
    top = board.max_value()

    won = state.won
    if not state.won and not state.win_acknowledged:
        won = has_won(board)
    achieved_4096 = state.achieved_4096 or top >= ADVANCED_WIN_VALUES[0]
    achieved_8192 = state.achieved_8192 or top >= ADVANCED_WIN_VALUES[1]
    if (achieved_4096 and not state.achieved_4096) or (achieved_8192 and not state.achieved_8192):
        won = True

    diff = MoveDiff(merges=tuple(merges), spawned=(spawned,) if spawned else ())
    score = state.score + diff.score_gain
    milestones = list(state.achieved_milestones)
    fresh = []
    for t in diff.tiles_to_add:
        if t.value in MILESTONE_VALUES and t.value not in milestones:
            milestones.append(t.value)
            fresh.append(t.value)

    return GameState(
        board=board,
        score=score,
        best_score=max(state.best_score, score),
        won=won,
        over=is_game_over(board),
        moved=True,
        win_acknowledged=state.win_acknowledged,
        achieved_4096=achieved_4096,
        achieved_8192=achieved_8192,
        achieved_milestones=tuple(milestones),
        diff=replace(diff, new_milestones=tuple(fresh)),
    )
