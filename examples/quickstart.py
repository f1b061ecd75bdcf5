"""
Quickstart example for the Minesweeper Auto Solver.

This script demonstrates basic usage of the engine and solver.
"""

import logging

from autosweeper import (
    AutoSolver,
    BoardEngine,
    run_solver_many_tests,
)


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("Minesweeper Auto Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game on the standard expert board
    print("\n1. Solving a single Expert game (16x30, 99 mines)...")
    print("-" * 60)

    engine = BoardEngine(rows=16, cols=30, mine_count=99)
    solver = AutoSolver.for_engine(engine, speed=100)

    solver.start_solver()
    solver.run(sleep=lambda _: None)

    stats = solver.stats
    print(f"Result: {engine.game_status.value.upper()}")
    print(f"Total moves: {stats.total_moves}")
    print(f"Logical moves: {stats.logical_moves}")
    print(f"Guesses: {stats.guesses}")
    print(f"Efficiency: {stats.efficiency}%")
    print(f"Progress: {engine.progress}% of safe cells revealed")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(engine.format_board(reveal_all=True))

    # Example 3: Run multiple games for statistics
    print("\n3. Running 50 Beginner games for win rate statistics...")
    print("-" * 60)

    logging.getLogger("autosweeper").setLevel(logging.WARNING)
    results = run_solver_many_tests(rows=9, cols=9, mine_count=10, runs=50)

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average moves per game: {results['avg_total_moves']:.1f}")
    print(f"Average guesses per game: {results['avg_guesses']:.1f}")
    print(f"Average efficiency: {results['avg_efficiency']:.1f}%")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
