"""Minesweeper board engine: mine placement, flood reveal, flagging and termination."""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .utils import get_neighborhoods, in_bounds

logger = logging.getLogger(__name__)


class MinesweeperError(Exception):
    """Base class for errors raised by the engine and solver."""


class InvalidConfiguration(MinesweeperError, ValueError):
    """Raised when a board or solver is configured with unusable parameters."""


class CoordinateError(MinesweeperError, IndexError):
    """Raised when a caller addresses a cell outside the board."""


class CellState(str, Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


class GameStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    PAUSED = "paused"


@dataclass
class Cell:
    row: int
    col: int
    is_mine: bool = False
    neighbor_mines: int = 0
    state: CellState = CellState.HIDDEN

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col


Board = List[List[Cell]]


@dataclass
class GameState:
    """Aggregate game state. Only BoardEngine mutates it."""

    board: Board
    mine_count: int
    game_status: GameStatus = GameStatus.PLAYING
    flag_count: int = 0
    cells_revealed: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def rows(self) -> int:
        return len(self.board)

    @property
    def cols(self) -> int:
        return len(self.board[0]) if self.board else 0


# Per-game fields reset() may override; board and mine_count are fixed by construction.
_RESETTABLE_FIELDS = frozenset(
    ("game_status", "flag_count", "cells_revealed", "start_time", "end_time")
)


class BoardEngine:
    """Authoritative Minesweeper game: the only component that mutates cells."""

    def __init__(
        self,
        rows: int,
        cols: int,
        mine_count: int,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
        mines: Optional[Iterable[Tuple[int, int]]] = None,
    ) -> None:
        """
        Create an engine and initialize its first board.

        Args:
            rows: Number of rows, must be > 0.
            cols: Number of columns, must be > 0.
            mine_count: Number of mines, must be >= 0. Values above
                rows * cols are clamped; a board left without safe cells
                stays PLAYING until its first reveal loses.
            rng: Random source used for mine placement. Pass a seeded
                random.Random to pin the layout.
            clock: Zero-argument timestamp function (defaults to time.time).
            mines: Fixed mine coordinates. When given, they replace random
                placement (mine_count must match) and are kept across reset().

        Raises:
            InvalidConfiguration: If dimensions or mine count are invalid, or
                a fixed mine lies outside the board.
        """
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.clock: Callable[[], float] = clock if clock is not None else time.time
        self._layout: Optional[Set[Tuple[int, int]]] = None

        if mines is not None:
            layout = set(mines)
            for r, c in layout:
                if not in_bounds(r, c, rows, cols):
                    raise InvalidConfiguration(f"Mine ({r}, {c}) is outside the board.")
            if len(layout) != mine_count:
                raise InvalidConfiguration(
                    f"mine_count is {mine_count} but {len(layout)} mines were given."
                )
            self._layout = layout

        self.state: GameState = self.initialize(rows, cols, mine_count)

    @classmethod
    def from_layout(
        cls,
        rows: int,
        cols: int,
        mines: Iterable[Tuple[int, int]],
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "BoardEngine":
        """
        Build an engine whose mines sit exactly at the given coordinates.

        The layout is kept across reset(), which makes the board reproducible.

        Raises:
            InvalidConfiguration: If dimensions are invalid or a mine lies
                outside the board.
        """
        layout = set(mines)
        return cls(rows, cols, len(layout), rng=rng, clock=clock, mines=layout)

    # -------------------------------------------------------------------------
    # Board construction
    # -------------------------------------------------------------------------

    def initialize(self, rows: int, cols: int, mine_count: int) -> GameState:
        """
        Build a fresh board and return a PLAYING game state for it.

        Mines are placed by shuffling every position with the engine's random
        source and taking the first mine_count of them, so each subset of that
        size is equally likely.

        Raises:
            InvalidConfiguration: If rows <= 0, cols <= 0 or mine_count < 0.
        """
        if rows <= 0 or cols <= 0:
            raise InvalidConfiguration("rows and cols must be positive.")
        if mine_count < 0:
            raise InvalidConfiguration("mine_count must be non-negative.")

        self.rows: int = rows
        self.cols: int = cols
        self.mine_count: int = min(mine_count, rows * cols)
        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(rows, cols)

        board: Board = [[Cell(r, c) for c in range(cols)] for r in range(rows)]
        self.place_mines(board)
        self.compute_neighbor_counts(board)

        logger.info(
            "Initialized %dx%d board with %d mines", rows, cols, self.mine_count
        )
        return GameState(
            board=board,
            mine_count=self.mine_count,
            start_time=self.clock(),
        )

    def place_mines(self, board: Board) -> None:
        """Mark mine cells on a blank board, from the fixed layout if one is set."""
        if self._layout is not None:
            for r, c in self._layout:
                board[r][c].is_mine = True
            return

        positions: List[Tuple[int, int]] = [
            (r, c) for r in range(self.rows) for c in range(self.cols)
        ]
        self.rng.shuffle(positions)
        for r, c in positions[: self.mine_count]:
            board[r][c].is_mine = True

    def compute_neighbor_counts(self, board: Board) -> None:
        """Populate every non-mine cell with its adjacent mine count."""
        for row in board:
            for cell in row:
                if cell.is_mine:
                    continue
                cell.neighbor_mines = sum(
                    1 for nr, nc in self.neighbors(cell.row, cell.col)
                    if board[nr][nc].is_mine
                )

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def game_status(self) -> GameStatus:
        return self.state.game_status

    @property
    def safe_cells(self) -> int:
        return self.rows * self.cols - self.mine_count

    @property
    def remaining_mines(self) -> int:
        """Mines not yet accounted for by flags (may go negative on over-flagging)."""
        return self.mine_count - self.state.flag_count

    @property
    def progress(self) -> int:
        """Percentage of safe cells revealed so far."""
        if self.safe_cells == 0:
            return 100
        return round(self.state.cells_revealed / self.safe_cells * 100)

    def neighbors(self, row: int, col: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[(row, col)]

    def cell(self, row: int, col: int) -> Cell:
        self._check_coords(row, col)
        return self.state.board[row][col]

    def elapsed(self) -> float:
        """Seconds since the game started, frozen once it has ended."""
        start = self.state.start_time
        if start is None:
            return 0.0
        end = self.state.end_time if self.state.end_time is not None else self.clock()
        return end - start

    def _check_coords(self, row: int, col: int) -> None:
        if not in_bounds(row, col, self.rows, self.cols):
            raise CoordinateError(
                f"Cell ({row}, {col}) is outside the {self.rows}x{self.cols} board."
            )

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal a cell, flooding outward across zero-count regions.

        A board with no safe cells is never won: it stays PLAYING until a
        reveal hits a mine.

        Returns:
            True if at least one safe cell was revealed. False if the cell was
            not hidden, the game is not in progress, or a mine was hit; check
            game_status to tell the last case apart.

        Raises:
            CoordinateError: If (row, col) is outside the board.
        """
        self._check_coords(row, col)
        state = self.state
        if state.game_status is not GameStatus.PLAYING:
            return False

        board = state.board
        if board[row][col].state is not CellState.HIDDEN:
            return False

        stack: List[Tuple[int, int]] = [(row, col)]
        newly_revealed = 0

        while stack:
            r, c = stack.pop()
            current = board[r][c]
            if current.state is not CellState.HIDDEN:
                continue

            current.state = CellState.REVEALED

            if current.is_mine:
                self._finish(GameStatus.LOST)
                logger.info("Mine hit at (%d, %d)", r, c)
                return False

            newly_revealed += 1
            if current.neighbor_mines == 0:
                stack.extend(self.neighbors(r, c))

        state.cells_revealed += newly_revealed
        logger.debug(
            "Revealed %d cell(s) from (%d, %d); %d/%d safe cells open",
            newly_revealed, row, col, state.cells_revealed, self.safe_cells,
        )

        if state.cells_revealed == self.safe_cells:
            self._finish(GameStatus.WON)
            logger.info("All %d safe cells revealed", self.safe_cells)

        return True

    def flag(self, row: int, col: int) -> bool:
        """
        Toggle a flag on a hidden or flagged cell.

        Returns:
            False if the cell is already revealed, True otherwise.

        Raises:
            CoordinateError: If (row, col) is outside the board.
        """
        self._check_coords(row, col)
        cell = self.state.board[row][col]

        if cell.state is CellState.REVEALED:
            return False

        if cell.state is CellState.FLAGGED:
            cell.state = CellState.HIDDEN
            self.state.flag_count -= 1
        else:
            cell.state = CellState.FLAGGED
            self.state.flag_count += 1

        logger.debug("Flag toggled at (%d, %d): %s", row, col, cell.state.value)
        return True

    def _finish(self, status: GameStatus) -> None:
        self.state.game_status = status
        self.state.end_time = self.clock()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def pause(self) -> None:
        if self.state.game_status is GameStatus.PLAYING:
            self.state.game_status = GameStatus.PAUSED

    def resume(self) -> None:
        if self.state.game_status is GameStatus.PAUSED:
            self.state.game_status = GameStatus.PLAYING

    def toggle_pause(self) -> None:
        if self.state.game_status is GameStatus.PAUSED:
            self.resume()
        else:
            self.pause()

    def reset(self, **overrides: object) -> GameState:
        """
        Start a new game with the same dimensions and mine count.

        Args:
            **overrides: GameState fields to force after initialization, e.g.
                game_status=GameStatus.PAUSED for a manual-play board.

        Raises:
            InvalidConfiguration: If an override names a field other than
                game_status, flag_count, cells_revealed, start_time or end_time.
        """
        unknown = set(overrides) - _RESETTABLE_FIELDS
        if unknown:
            raise InvalidConfiguration(
                f"Cannot override game state field(s): {sorted(unknown)}"
            )

        state = self.initialize(self.rows, self.cols, self.mine_count)
        for name, value in overrides.items():
            setattr(state, name, value)

        self.state = state
        return state

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str, color: bool) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}" if color else s

    def _m(self, s: str, color: bool) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}" if color else s

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Hidden cells are '.', flags 'F', mines 'M' (shown once revealed, or
        everywhere with reveal_all).
        """
        def cell_str(cell: Cell) -> str:
            if cell.state is CellState.REVEALED or reveal_all:
                if cell.is_mine:
                    return self._m("M", color)
                return str(cell.neighbor_mines)
            if cell.state is CellState.FLAGGED:
                return "F"
            return "."

        # Header: column indices
        header_cells = " ".join(f"{c:2d}" for c in range(self.cols))
        out = [self._c("   ", color) + self._c(header_cells, color)]
        out.append(self._c("   " + "-" * (3 * self.cols - 1), color))

        for r, row in enumerate(self.state.board):
            row_cells = " ".join(f" {cell_str(cell)}" for cell in row)
            out.append(self._c(f"{r:2d} ", color) + self._c("|", color) + row_cells)

        return "\n".join(out)


def play_cli(engine: BoardEngine, input_fn: Callable[[str], str] = input) -> GameStatus:
    """
    Run a simple terminal loop for playing on an engine by hand.

    Commands: "r ROW COL" reveals, "f ROW COL" toggles a flag, "p" toggles
    pause, "q" quits. Coordinates are 0-based.

    Returns:
        The game status when the loop ends.
    """
    print("Minesweeper CLI (r ROW COL | f ROW COL | p | q).\n")
    print(engine.format_board())

    while engine.game_status not in (GameStatus.WON, GameStatus.LOST):
        s = input_fn("\nMove: ").strip().lower()
        if s in {"q", "quit", "exit"}:
            print("Quit.")
            return engine.game_status

        if s == "p":
            engine.toggle_pause()
            print(f"Game is {engine.game_status.value}.")
            continue

        parts = s.replace(",", " ").split()
        if len(parts) != 3 or parts[0] not in {"r", "f"}:
            print("Invalid input. Example: r 3 5")
            continue

        try:
            row = int(parts[1])
            col = int(parts[2])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue

        try:
            if parts[0] == "r":
                engine.reveal(row, col)
            else:
                engine.flag(row, col)
        except CoordinateError as exc:
            print(exc)
            continue

        print()
        print(engine.format_board())

    if engine.game_status is GameStatus.WON:
        print("\nYou revealed all safe cells. You won!")
    else:
        print("\nYou hit a mine. You lost.")
    print(engine.format_board(reveal_all=True))
    return engine.game_status
