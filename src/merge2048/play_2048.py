#!/usr/bin/env python3
"""
2048 Game - Command Line Interface
Play 2048 using arrow keys or WASD
"""

import argparse
import logging
import os
import sys
import termios
import time
import tty
from typing import Optional

from merge2048.controls import direction_for_key
from merge2048.game import SIZE
from merge2048.session import Game2048
from merge2048.storage import GameStore

# High-contrast ANSI colors
COLORS = {
    2: '\033[97m',    # white
    4: '\033[90m',    # bright black
    8: '\033[36m',    # cyan
    16: '\033[31m',   # red
    32: '\033[32m',   # green
    64: '\033[33m',   # yellow
    128: '\033[35m',  # magenta
    256: '\033[34m',  # blue
    512: '\033[91m',  # bright red
    1024: '\033[92m', # bright green
    2048: '\033[95m', # bright magenta
    4096: '\033[93m', # bright yellow
}
RESET = '\033[0m'
BOLD = '\033[1m'
RED = '\033[91m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
BLUE = '\033[94m'

CELL_WIDTH = 6


def clear_screen():
    sys.stdout.write('\033[2J\033[H')


def format_time(seconds: float) -> str:
    """MM:SS, minutes keep growing past 59."""
    seconds = int(seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_tile(value: Optional[int]) -> str:
    if not value:
        return " " * CELL_WIDTH
    color = COLORS.get(value, YELLOW)
    num_str = str(value)
    padding = " " * (CELL_WIDTH - len(num_str))
    return f"{padding}{color}{BOLD}{num_str}{RESET}"


def draw_board(game: Game2048, elapsed: float, message: str = ""):
    clear_screen()
    bar = "─" * CELL_WIDTH

    sys.stdout.write(f"{BOLD}2048 Game{RESET}\n")
    sys.stdout.write(
        f"Score: {GREEN}{game.score}{RESET} | Best: {YELLOW}{game.best_score}{RESET} | "
        f"Moves: {BLUE}{game.get_move_count()}{RESET} | Time: {format_time(elapsed)}\n"
    )
    sys.stdout.write("Arrow keys or WASD to move, 'n' new game, 'q' quit\n\n")

    sys.stdout.write("┌" + "┬".join([bar] * SIZE) + "┐\n")
    for i, row in enumerate(game.board.rows()):
        sys.stdout.write("│" + "│".join(format_tile(v) for v in row) + "│\n")
        if i < SIZE - 1:
            sys.stdout.write("├" + "┼".join([bar] * SIZE) + "┤\n")
    sys.stdout.write("└" + "┴".join([bar] * SIZE) + "┘\n\n")

    milestones = game.state.achieved_milestones
    if milestones:
        sys.stdout.write("Milestones: " + ", ".join(str(m) for m in milestones) + "\n")
    if message:
        sys.stdout.write(message + "\n")
    sys.stdout.flush()


def get_key() -> str:
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        if ch == '\x1b':
            ch += sys.stdin.read(2)
        return ch
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def win_message(game: Game2048) -> str:
    tier = game.state.win_tier
    return f"{GREEN}{BOLD}You reached {tier}!{RESET} Press 'c' to keep playing or 'n' for a new game."


def play(game: Game2048):
    started: Optional[float] = None
    message = ""

    while True:
        elapsed = time.monotonic() - started if started is not None else 0.0
        if game.won:
            message = win_message(game)
        draw_board(game, elapsed, message)
        message = ""

        key = get_key()
        if key.lower() == 'q' or key == '\x03':
            sys.stdout.write(f"\n{YELLOW}Game ended. Final score: {game.score}{RESET}\n")
            break
        if key.lower() == 'n':
            game.new_game()
            started = None
            continue
        if game.won:
            if key.lower() == 'c':
                game.continue_game()
            continue
        if game.over:
            continue

        direction = direction_for_key(key)
        if direction is None:
            continue
        if game.move(direction):
            if started is None:
                started = time.monotonic()
        else:
            message = f"{RED}{direction.upper()}: INVALID MOVE{RESET}"
        if game.over:
            elapsed = time.monotonic() - started
            message = (f"{RED}{BOLD}GAME OVER!{RESET} Final score: {GREEN}{game.score}{RESET} | "
                       f"Time: {format_time(elapsed)} | Highest tile: {game.board.max_value()}\n"
                       "Press 'n' for a new game or 'q' to quit.")
    sys.stdout.flush()


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Play 2048 in the terminal")
    ap.add_argument('--storage', type=str, default=None,
                    help="state file (default: $MERGE2048_HOME/state.json or ~/.merge2048/state.json)")
    ap.add_argument('--seed', type=int, default=None, help="seed for tile spawning")
    ap.add_argument('--no-resume', action='store_true', help="ignore any saved game")
    ap.add_argument('--log-level', type=str, default='WARNING')
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        filename=os.environ.get('MERGE2048_LOG'))
    game = Game2048(store=GameStore(args.storage), seed=args.seed, resume=not args.no_resume)
    try:
        play(game)
    except KeyboardInterrupt:
        sys.stdout.write(f"\n\n{YELLOW}Game interrupted. Thanks for playing!{RESET}\n")
        sys.stdout.flush()


if __name__ == "__main__":
    main()
