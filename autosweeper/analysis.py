"""Analysis and benchmarking tools for the automatic solver."""

import random
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .engine import BoardEngine, CellState, GameStatus
from .solver import AutoSolver

# Standard difficulty levels: (rows, cols, mines)
LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (16, 30, 99),
}


def format_solver_view(engine: BoardEngine, *, show_coords: bool = True) -> str:
    """
    Format the board as the solver sees it: numbers, flags and unknowns.

    Args:
        engine: Engine whose board will be displayed.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where hidden cells are '.', flags 'F', and revealed
        cells their neighbor count ('*' for a detonated mine).
    """
    def cell_char(r: int, c: int) -> str:
        cell = engine.board[r][c]
        if cell.state is CellState.FLAGGED:
            return "F"
        if cell.state is CellState.HIDDEN:
            return "."
        return "*" if cell.is_mine else str(cell.neighbor_mines)

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{c:2d}" for c in range(engine.cols))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * engine.cols - 1))

    for r in range(engine.rows):
        row = " ".join(f" {cell_char(r, c)}" for c in range(engine.cols))
        lines.append(f"{r:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def _no_sleep(_: float) -> None:
    return None


def run_solver_single_test(
    rows: int,
    cols: int,
    mine_count: int,
    *,
    show_boards: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, object]:
    """
    Play one game to completion with AutoSolver on a fresh board.

    The automatic loop runs without delays until it disarms itself.

    Args:
        rows: Board rows.
        cols: Board columns.
        mine_count: Total number of mines on the board.
        show_boards: If True, print the underlying board and the solver's
            final view.
        rng: Random source shared by mine placement and the solver.

    Returns:
        Dict with "status" (final GameStatus value), the SolverStats fields,
        "cells_revealed", "flag_count" and "correct_flags".
    """
    rng = rng if rng is not None else random.Random()
    engine = BoardEngine(rows, cols, mine_count, rng=rng)
    solver = AutoSolver.for_engine(engine, rng=rng)

    solver.start_solver()
    solver.run(sleep=_no_sleep)

    if show_boards:
        print("Underlying board (mines visible):")
        print(engine.format_board(reveal_all=True))
        print()
        print("Solver view (unknowns shown as '.'):")
        print(format_solver_view(engine))
        print()
        print(f"Finished with status {engine.game_status.value}.")

    correct_flags = sum(
        1
        for row in engine.board
        for cell in row
        if cell.state is CellState.FLAGGED and cell.is_mine
    )

    return {
        "status": engine.game_status.value,
        "total_moves": solver.stats.total_moves,
        "logical_moves": solver.stats.logical_moves,
        "guesses": solver.stats.guesses,
        "efficiency": solver.stats.efficiency,
        "cells_revealed": engine.state.cells_revealed,
        "flag_count": engine.state.flag_count,
        "correct_flags": correct_flags,
    }


def run_solver_many_tests(
    rows: int,
    cols: int,
    mine_count: int,
    runs: int,
    *,
    rng: Optional[random.Random] = None,
) -> Dict[str, float]:
    """
    Run many independent solver games and return averaged metrics plus outcome rates.

    Args:
        rows: Board rows.
        cols: Board columns.
        mine_count: Total number of mines on the board.
        runs: Number of independent games to run, must be > 0.
        rng: Random source shared across all runs.

    Returns:
        Averages of the numeric single-test metrics (prefixed with "avg_"),
        plus win_rate, loss_rate and stalled_rate (games that ended with the
        loop disarmed while still playing).

    Raises:
        ValueError: If runs is not positive.
        RuntimeError: If a game ends paused.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    rng = rng if rng is not None else random.Random()
    metric_keys = (
        "total_moves",
        "logical_moves",
        "guesses",
        "efficiency",
        "cells_revealed",
        "flag_count",
        "correct_flags",
    )

    samples = np.zeros((runs, len(metric_keys)), dtype=float)
    outcomes = {status.value: 0 for status in GameStatus}

    for i in range(runs):
        result = run_solver_single_test(rows, cols, mine_count, rng=rng)
        status = str(result["status"])
        if status == GameStatus.PAUSED.value:
            raise RuntimeError(f"Unexpected solver status: {status}")
        outcomes[status] += 1
        samples[i] = [float(result[k]) for k in metric_keys]  # type: ignore[arg-type]

    means = samples.mean(axis=0)
    out: Dict[str, float] = {
        f"avg_{k}": float(v) for k, v in zip(metric_keys, means)
    }
    out["win_rate"] = outcomes[GameStatus.WON.value] / runs
    out["loss_rate"] = outcomes[GameStatus.LOST.value] / runs
    out["stalled_rate"] = outcomes[GameStatus.PLAYING.value] / runs
    return out


def run_solver_level_analysis(
    runs: int,
    *,
    levels: Optional[Dict[str, Tuple[int, int, int]]] = None,
    show_plots: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests on each difficulty level and plot summaries.

    Args:
        runs: Number of independent games to run per level.
        levels: Mapping level name -> (rows, cols, mines); defaults to LEVELS.
        show_plots: If True, draw win rate and move-mix bar charts.
        rng: Random source shared across all games.

    Returns:
        Mapping from level name to statistics dict returned by run_solver_many_tests().
    """
    levels = levels if levels is not None else LEVELS

    results: Dict[str, Dict[str, float]] = {}
    for level, (r, c, m) in levels.items():
        results[level] = run_solver_many_tests(r, c, m, runs, rng=rng)

    if not show_plots:
        return results

    level_names = list(levels.keys())
    x = np.arange(len(level_names))

    # 1) Logical moves vs. guesses
    logical = [results[n]["avg_logical_moves"] for n in level_names]
    guesses = [results[n]["avg_guesses"] for n in level_names]

    bar_w = 0.35
    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, logical, width=bar_w, label="logical")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, guesses, width=bar_w, label="guesses")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average moves per game")  # type: ignore[misc]
    plt.title("Logical moves vs. guesses (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()  # type: ignore[misc]
    plt.show()  # type: ignore[misc]

    # 2) Outcome rates by level
    win_rates = [results[n]["win_rate"] for n in level_names]
    loss_rates = [results[n]["loss_rate"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, win_rates, width=bar_w, label="won")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, loss_rates, width=bar_w, label="lost")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Outcome rate by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()  # type: ignore[misc]
    plt.show()  # type: ignore[misc]

    return results
