from merge2048.game import (
    DIRECTIONS,
    Board,
    GameState,
    Merge,
    MoveDiff,
    Position,
    RandomSpawner,
    Tile,
    TileIdGenerator,
    continue_game,
    create_initial_state,
    move,
)
from merge2048.session import Game2048

__all__ = [
    "DIRECTIONS",
    "Board",
    "GameState",
    "Merge",
    "MoveDiff",
    "Position",
    "RandomSpawner",
    "Tile",
    "TileIdGenerator",
    "continue_game",
    "create_initial_state",
    "move",
    "Game2048",
]
