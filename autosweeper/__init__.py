"""
Minesweeper Auto Solver

A Minesweeper board engine paired with an automatic player:
- Rule A: reveal hidden neighbors of a numbered cell whose mines are all flagged
- Rule B: flag hidden neighbors that exactly cover a numbered cell's remaining mines
- Guessing: heuristic risk ranking when neither rule applies
"""

from .engine import (
    BoardEngine,
    Cell,
    CellState,
    CoordinateError,
    GameState,
    GameStatus,
    InvalidConfiguration,
    MinesweeperError,
    play_cli,
)
from .solver import AutoSolver, MoveAction, SolverMove, SolverStats
from .analysis import (
    LEVELS,
    format_solver_view,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_level_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "BoardEngine",
    "Cell",
    "CellState",
    "GameState",
    "GameStatus",
    "AutoSolver",
    "MoveAction",
    "SolverMove",
    "SolverStats",
    # Errors
    "MinesweeperError",
    "InvalidConfiguration",
    "CoordinateError",
    # CLI
    "play_cli",
    # Analysis functions
    "LEVELS",
    "format_solver_view",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
]
