"""Automatic Minesweeper player using local deduction and a heuristic risk guess."""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .engine import Board, BoardEngine, CellState, GameStatus
from .utils import get_neighborhoods

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 200
MIN_SPEED_MS = 100
MAX_SPEED_MS = 1000
MOVE_DISPLAY_SECONDS = 1.0


class MoveAction(str, Enum):
    REVEAL = "reveal"
    FLAG = "flag"


@dataclass(frozen=True)
class SolverMove:
    row: int
    col: int
    action: MoveAction
    confidence: float
    reasoning: str
    is_guess: bool = False


@dataclass
class SolverStats:
    total_moves: int = 0
    logical_moves: int = 0
    guesses: int = 0
    efficiency: int = 100

    def record(self, was_guess: bool) -> None:
        """Count one executed move and recompute efficiency."""
        self.total_moves += 1
        if was_guess:
            self.guesses += 1
        else:
            self.logical_moves += 1
        # Halves round up.
        self.efficiency = (200 * self.logical_moves + self.total_moves) // (
            2 * self.total_moves
        )


class AutoSolver:
    """
    Move-selection agent that plays a board through reveal/flag callbacks.

    The solver never mutates cells itself. Each decision cycle reads the
    board, tries the two local rules, falls back to the lowest-risk hidden
    cell, and executes the chosen move through the engine's operations:

    1. Rule A: a numbered cell whose flags match its count makes every other
       hidden neighbor safe.
    2. Rule B: a numbered cell whose hidden neighbors exactly cover its
       remaining mines makes every hidden neighbor a mine.
    3. Guess: lowest heuristic risk across all hidden cells.

    Rules are applied one numbered cell at a time; constraints from
    overlapping cells are never combined.
    """

    def __init__(
        self,
        get_board: Callable[[], Board],
        get_status: Callable[[], GameStatus],
        reveal: Callable[[int, int], bool],
        flag: Callable[[int, int], bool],
        rows: int,
        cols: int,
        speed: int = DEFAULT_SPEED_MS,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Initialize a solver bound to a board through accessor callbacks.

        Args:
            get_board: Returns the current board (read-only use).
            get_status: Returns the current game status.
            reveal: Engine reveal operation.
            flag: Engine flag toggle operation.
            rows: Board row count.
            cols: Board column count.
            speed: Milliseconds between automatic moves, clamped to
                [MIN_SPEED_MS, MAX_SPEED_MS].
            rng: Random source for the isolated-cell risk jitter.
            clock: Zero-argument timestamp function (defaults to time.monotonic).
        """
        self.get_board = get_board
        self.get_status = get_status
        self.reveal = reveal
        self.flag = flag
        self.rows = rows
        self.cols = cols
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.clock: Callable[[], float] = (
            clock if clock is not None else time.monotonic
        )

        # Cached 8-neighborhoods: (row, col) -> ((nr, nc), ...)
        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(rows, cols)

        self.speed: int = DEFAULT_SPEED_MS
        self.set_speed(speed)

        self.stats = SolverStats()
        self._active: bool = False
        self._current_move: Optional[SolverMove] = None
        self._current_move_at: float = 0.0
        self._subscribers: List[Callable[[SolverMove], None]] = []

    @classmethod
    def for_engine(cls, engine: BoardEngine, **kwargs) -> "AutoSolver":
        """Build a solver wired to a BoardEngine's state and operations."""
        return cls(
            get_board=lambda: engine.board,
            get_status=lambda: engine.game_status,
            reveal=engine.reveal,
            flag=engine.flag,
            rows=engine.rows,
            cols=engine.cols,
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Board inspection
    # -------------------------------------------------------------------------

    def neighbors(self, row: int, col: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[(row, col)]

    def _hidden_and_flagged(
        self, board: Board, row: int, col: int
    ) -> Tuple[List[Tuple[int, int]], int]:
        """Return (hidden neighbor coordinates, flagged neighbor count) for a cell."""
        hidden: List[Tuple[int, int]] = []
        flagged = 0
        for nr, nc in self.neighbors(row, col):
            state = board[nr][nc].state
            if state is CellState.HIDDEN:
                hidden.append((nr, nc))
            elif state is CellState.FLAGGED:
                flagged += 1
        return hidden, flagged

    def _numbered_neighbors(
        self, board: Board, row: int, col: int
    ) -> List[Tuple[int, int]]:
        return [
            (nr, nc)
            for nr, nc in self.neighbors(row, col)
            if board[nr][nc].state is CellState.REVEALED
            and board[nr][nc].neighbor_mines > 0
        ]

    # -------------------------------------------------------------------------
    # Move selection
    # -------------------------------------------------------------------------

    def find_logical_move(self) -> Optional[SolverMove]:
        """
        Return a certain move derived from a single numbered cell, if any.

        Numbered cells are scanned in row-major order and only the first hidden
        neighbor of the first eligible cell is returned.
        """
        board = self.get_board()

        for row in board:
            for cell in row:
                if cell.state is not CellState.REVEALED or cell.neighbor_mines == 0:
                    continue

                hidden, flagged = self._hidden_and_flagged(board, cell.row, cell.col)
                if not hidden:
                    continue

                tr, tc = hidden[0]
                if flagged == cell.neighbor_mines:
                    return SolverMove(
                        tr, tc, MoveAction.REVEAL, 100,
                        f"All mines around {cell.row},{cell.col} are flagged",
                    )

                remaining = cell.neighbor_mines - flagged
                if len(hidden) == remaining:
                    return SolverMove(
                        tr, tc, MoveAction.FLAG, 100,
                        f"Must be a mine ({len(hidden)} hidden = "
                        f"{remaining} remaining mines)",
                    )

        return None

    def find_guess_move(self) -> Optional[SolverMove]:
        """
        Return a reveal on the hidden cell with the lowest estimated risk.

        Cells next to revealed numbers get risk
        100 * (sum of numbers - sum of their flags) / (sum of their hidden
        neighbors), or 50 when the denominator is 0. Isolated cells get a
        random risk in [0, 50). The first cell with the lowest risk wins.
        """
        board = self.get_board()
        best: Optional[SolverMove] = None
        lowest_risk = float("inf")

        for row in board:
            for cell in row:
                if cell.state is not CellState.HIDDEN:
                    continue

                numbered = self._numbered_neighbors(board, cell.row, cell.col)

                if not numbered:
                    risk = self.rng.random() * 50
                    if risk < lowest_risk:
                        lowest_risk = risk
                        best = SolverMove(
                            cell.row, cell.col, MoveAction.REVEAL,
                            max(20.0, 100 - risk),
                            "Educated guess - isolated area",
                            is_guess=True,
                        )
                    continue

                total_mines = 0
                total_flags = 0
                total_hidden = 0
                for nr, nc in numbered:
                    hidden, flagged = self._hidden_and_flagged(board, nr, nc)
                    total_mines += board[nr][nc].neighbor_mines
                    total_flags += flagged
                    total_hidden += len(hidden)

                if total_hidden > 0:
                    risk = (total_mines - total_flags) / total_hidden * 100
                else:
                    risk = 50.0

                if risk < lowest_risk:
                    lowest_risk = risk
                    best = SolverMove(
                        cell.row, cell.col, MoveAction.REVEAL,
                        max(10.0, 100 - risk),
                        f"Calculated risk: {risk:.1f}%",
                        is_guess=True,
                    )

        return best

    # -------------------------------------------------------------------------
    # Move execution
    # -------------------------------------------------------------------------

    def make_move(self) -> bool:
        """
        Choose one move and execute it through the engine callbacks.

        Returns:
            The reveal/flag callback's result, or False if the game is not in
            progress or no move exists.
        """
        if self.get_status() is not GameStatus.PLAYING:
            return False

        move = self.find_logical_move()
        if move is None:
            move = self.find_guess_move()
        if move is None:
            return False

        self._publish(move)

        if move.action is MoveAction.REVEAL:
            success = self.reveal(move.row, move.col)
        else:
            success = self.flag(move.row, move.col)

        if success:
            self.stats.record(move.is_guess)

        logger.debug(
            "%s (%d, %d) %s [%s, confidence %.0f]: %s",
            move.action.value, move.row, move.col,
            "ok" if success else "failed",
            "guess" if move.is_guess else "logic",
            move.confidence, move.reasoning,
        )
        return success

    def _publish(self, move: SolverMove) -> None:
        self._current_move = move
        self._current_move_at = self.clock()
        for callback in self._subscribers:
            callback(move)

    def subscribe(self, callback: Callable[[SolverMove], None]) -> None:
        """Register a callback invoked with every move before it executes."""
        self._subscribers.append(callback)

    @property
    def current_move(self) -> Optional[SolverMove]:
        """The last chosen move, until MOVE_DISPLAY_SECONDS have passed."""
        if self._current_move is None:
            return None
        if self.clock() - self._current_move_at >= MOVE_DISPLAY_SECONDS:
            return None
        return self._current_move

    def reset_stats(self) -> None:
        self.stats = SolverStats()
        self._current_move = None

    # -------------------------------------------------------------------------
    # Automatic loop
    # -------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    def set_speed(self, ms: int) -> None:
        """Set the delay between automatic moves, clamped to the allowed range."""
        self.speed = max(MIN_SPEED_MS, min(MAX_SPEED_MS, int(ms)))

    def start_solver(self) -> None:
        """
        Arm the automatic move loop.

        On an untouched board the corner (0, 0) is revealed first and counted
        as a logical move.
        """
        if self.get_status() is not GameStatus.PLAYING:
            return

        self._active = True
        logger.info("Solver started (interval %d ms)", self.speed)

        board = self.get_board()
        if not any(cell.state is CellState.REVEALED for row in board for cell in row):
            self.reveal(0, 0)
            self.stats.record(was_guess=False)

    def stop_solver(self) -> None:
        if self._active:
            logger.info("Solver stopped after %d moves", self.stats.total_moves)
        self._active = False

    def tick(self) -> bool:
        """
        Run one cycle of the automatic loop.

        Performs exactly one make_move() while armed and disarms the loop once
        a move fails or the game leaves the playing state.
        """
        if not self._active:
            return False

        if self.get_status() is not GameStatus.PLAYING:
            self._disarm()
            return False

        success = self.make_move()
        if not success or self.get_status() is not GameStatus.PLAYING:
            self._disarm()
        return success

    def _disarm(self) -> None:
        self._active = False
        logger.info(
            "Solver loop finished: status=%s moves=%d efficiency=%d%%",
            self.get_status().value, self.stats.total_moves, self.stats.efficiency,
        )

    def run(
        self,
        max_ticks: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """
        Drive the loop until it disarms, waiting `speed` ms before each tick.

        Args:
            max_ticks: Stop after this many ticks even if still armed.
            sleep: Delay function taking seconds; pass a no-op to run flat out.

        Returns:
            The number of ticks performed.
        """
        ticks = 0
        while self._active and (max_ticks is None or ticks < max_ticks):
            sleep(self.speed / 1000)
            if not self._active:
                break
            self.tick()
            ticks += 1
        return ticks
