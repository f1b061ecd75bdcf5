import random

import pytest

from autosweeper import (
    BoardEngine,
    CellState,
    CoordinateError,
    GameStatus,
    InvalidConfiguration,
    play_cli,
)


def mine_positions(engine: BoardEngine):
    return {
        (cell.row, cell.col)
        for row in engine.board
        for cell in row
        if cell.is_mine
    }


def flagged_count(engine: BoardEngine) -> int:
    return sum(1 for row in engine.board for cell in row if cell.state is CellState.FLAGGED)


def test_initialize_places_exact_mine_count():
    engine = BoardEngine(9, 9, 10, rng=random.Random(42))
    assert len(mine_positions(engine)) == 10
    assert engine.state.mine_count == 10


def test_mine_count_is_clamped_to_board_size():
    engine = BoardEngine(2, 2, 10, rng=random.Random(0))
    assert len(mine_positions(engine)) == 4
    assert engine.mine_count == 4
    assert engine.safe_cells == 0


def test_board_without_safe_cells_can_only_be_lost():
    engine = BoardEngine(2, 2, 10, rng=random.Random(0))
    assert engine.game_status is GameStatus.PLAYING
    assert engine.reveal(0, 0) is False
    assert engine.game_status is GameStatus.LOST


def test_seeded_rng_pins_layout():
    a = BoardEngine(8, 8, 12, rng=random.Random(7))
    b = BoardEngine(8, 8, 12, rng=random.Random(7))
    assert mine_positions(a) == mine_positions(b)


def test_neighbor_counts_match_adjacent_mines():
    engine = BoardEngine(10, 12, 30, rng=random.Random(3))
    mines = mine_positions(engine)
    for row in engine.board:
        for cell in row:
            if cell.is_mine:
                continue
            expected = sum(
                1
                for dr in (-1, 0, 1)
                for dc in (-1, 0, 1)
                if (dr or dc) and (cell.row + dr, cell.col + dc) in mines
            )
            assert cell.neighbor_mines == expected


def test_initial_state(clock):
    engine = BoardEngine(4, 6, 5, rng=random.Random(1), clock=clock)
    s = engine.state
    assert s.game_status is GameStatus.PLAYING
    assert s.flag_count == 0 and s.cells_revealed == 0
    assert s.start_time == clock.now
    assert s.end_time is None
    assert s.rows == 4 and s.cols == 6
    assert all(cell.state is CellState.HIDDEN for row in s.board for cell in row)
    assert engine.board[2][3].position == (2, 3)


@pytest.mark.parametrize(
    "rows,cols,mines",
    [(0, 5, 1), (5, 0, 1), (-1, 3, 0), (3, 3, -1)],
)
def test_invalid_configuration(rows, cols, mines):
    with pytest.raises(InvalidConfiguration):
        BoardEngine(rows, cols, mines)


def test_invalid_configuration_is_value_error():
    with pytest.raises(ValueError):
        BoardEngine(0, 0, 0)


def test_from_layout_rejects_mines_off_board():
    with pytest.raises(InvalidConfiguration):
        BoardEngine.from_layout(3, 3, [(3, 0)])


def test_init_with_fixed_mines_matches_from_layout():
    rng = random.Random(1)
    engine = BoardEngine.from_layout(3, 3, [(0, 0)], rng=rng)
    assert engine.rng is rng
    assert mine_positions(engine) == {(0, 0)}
    assert mine_positions(BoardEngine(3, 3, 1, mines=[(0, 0)])) == {(0, 0)}


def test_fixed_mines_must_match_mine_count():
    with pytest.raises(InvalidConfiguration):
        BoardEngine(3, 3, 2, mines=[(0, 0)])


def test_no_mines_any_reveal_wins(empty_engine, clock):
    clock.advance(12.5)
    assert empty_engine.reveal(2, 2) is True
    s = empty_engine.state
    assert s.cells_revealed == 25
    assert s.game_status is GameStatus.WON
    assert s.end_time == clock.now
    assert empty_engine.elapsed() == 12.5


def test_single_corner_mine_floods_all_safe_cells(corner_mine_engine):
    assert corner_mine_engine.reveal(2, 2) is True
    s = corner_mine_engine.state
    assert s.cells_revealed == 8
    assert s.game_status is GameStatus.WON
    assert corner_mine_engine.board[0][0].state is CellState.HIDDEN


def test_flood_stops_at_numbered_border():
    # A wall of mines down column 2 splits the board in two.
    engine = BoardEngine.from_layout(3, 5, [(0, 2), (1, 2), (2, 2)])
    assert engine.reveal(1, 0) is True

    revealed = {
        (cell.row, cell.col)
        for row in engine.board
        for cell in row
        if cell.state is CellState.REVEALED
    }
    assert revealed == {(r, c) for r in range(3) for c in (0, 1)}
    assert engine.state.cells_revealed == 6
    assert engine.game_status is GameStatus.PLAYING


def test_numbered_cell_reveals_only_itself(corner_mine_engine):
    assert corner_mine_engine.reveal(1, 1) is True
    assert corner_mine_engine.state.cells_revealed == 1
    assert corner_mine_engine.board[1][2].state is CellState.HIDDEN


def test_win_only_when_last_safe_cell_opens():
    engine = BoardEngine.from_layout(1, 4, [(0, 0)])
    assert engine.reveal(0, 1) is True
    assert engine.state.cells_revealed == 1
    assert engine.game_status is GameStatus.PLAYING
    assert engine.state.end_time is None

    assert engine.reveal(0, 3) is True
    assert engine.state.cells_revealed == 3
    assert engine.game_status is GameStatus.WON


def test_reveal_mine_loses(corner_mine_engine, clock):
    clock.advance(3)
    assert corner_mine_engine.reveal(0, 0) is False
    s = corner_mine_engine.state
    assert s.game_status is GameStatus.LOST
    assert s.cells_revealed == 0
    assert s.end_time == clock.now
    assert corner_mine_engine.board[0][0].state is CellState.REVEALED

    # Terminal: nothing else can be revealed.
    assert corner_mine_engine.reveal(2, 2) is False
    assert corner_mine_engine.board[2][2].state is CellState.HIDDEN


def test_repeated_reveal_is_noop(corner_mine_engine):
    assert corner_mine_engine.reveal(1, 1) is True
    assert corner_mine_engine.reveal(1, 1) is False
    assert corner_mine_engine.state.cells_revealed == 1


def test_reveal_skips_flagged_cells(corner_mine_engine):
    corner_mine_engine.flag(1, 2)
    assert corner_mine_engine.reveal(1, 2) is False

    # Flood fill neither opens the flagged cell nor expands through it.
    assert corner_mine_engine.reveal(2, 2) is True
    assert corner_mine_engine.board[1][2].state is CellState.FLAGGED
    assert corner_mine_engine.board[0][2].state is CellState.HIDDEN
    assert corner_mine_engine.state.cells_revealed == 5
    assert corner_mine_engine.game_status is GameStatus.PLAYING


@pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 3)])
def test_out_of_range_coordinates_fail_fast(corner_mine_engine, row, col):
    with pytest.raises(CoordinateError):
        corner_mine_engine.reveal(row, col)
    with pytest.raises(IndexError):
        corner_mine_engine.flag(row, col)


def test_flag_toggle_and_accounting(corner_mine_engine):
    assert corner_mine_engine.flag(0, 0) is True
    assert corner_mine_engine.flag(2, 2) is True
    assert corner_mine_engine.state.flag_count == 2 == flagged_count(corner_mine_engine)
    assert corner_mine_engine.remaining_mines == -1

    assert corner_mine_engine.flag(2, 2) is True
    assert corner_mine_engine.board[2][2].state is CellState.HIDDEN
    assert corner_mine_engine.state.flag_count == 1 == flagged_count(corner_mine_engine)


def test_no_flag_on_revealed(corner_mine_engine):
    corner_mine_engine.reveal(1, 1)
    assert corner_mine_engine.flag(1, 1) is False
    assert corner_mine_engine.state.flag_count == 0


def test_pause_and_resume(corner_mine_engine):
    corner_mine_engine.pause()
    assert corner_mine_engine.game_status is GameStatus.PAUSED
    assert corner_mine_engine.reveal(2, 2) is False

    corner_mine_engine.resume()
    assert corner_mine_engine.game_status is GameStatus.PLAYING

    corner_mine_engine.toggle_pause()
    assert corner_mine_engine.game_status is GameStatus.PAUSED
    corner_mine_engine.toggle_pause()
    assert corner_mine_engine.game_status is GameStatus.PLAYING


def test_pause_is_noop_after_game_ends(empty_engine):
    empty_engine.reveal(0, 0)
    empty_engine.pause()
    assert empty_engine.game_status is GameStatus.WON
    empty_engine.resume()
    assert empty_engine.game_status is GameStatus.WON


def test_reset_starts_fresh_game(corner_mine_engine):
    corner_mine_engine.flag(2, 2)
    corner_mine_engine.reveal(0, 0)
    state = corner_mine_engine.reset()

    assert state is corner_mine_engine.state
    assert state.game_status is GameStatus.PLAYING
    assert state.flag_count == 0 and state.cells_revealed == 0
    assert mine_positions(corner_mine_engine) == {(0, 0)}


def test_reset_applies_overrides():
    engine = BoardEngine(6, 6, 5, rng=random.Random(2))
    state = engine.reset(game_status=GameStatus.PAUSED)
    assert state.game_status is GameStatus.PAUSED
    assert len(mine_positions(engine)) == 5


def test_reset_rejects_unknown_override(corner_mine_engine):
    with pytest.raises(InvalidConfiguration):
        corner_mine_engine.reset(speed=10)


def test_reset_keeps_configured_mine_count():
    engine = BoardEngine.from_layout(1, 3, [(0, 0)])
    with pytest.raises(InvalidConfiguration):
        engine.reset(mine_count=2)
    with pytest.raises(InvalidConfiguration):
        engine.reset(board=[])
    assert engine.state.mine_count == 1
    assert engine.safe_cells == 2


def test_progress_and_elapsed(corner_mine_engine, clock):
    assert corner_mine_engine.progress == 0
    corner_mine_engine.reveal(1, 1)
    assert corner_mine_engine.progress == round(1 / 8 * 100)
    clock.advance(4)
    assert corner_mine_engine.elapsed() == 4


def test_format_board_plain(corner_mine_engine):
    corner_mine_engine.reveal(1, 1)
    corner_mine_engine.flag(0, 0)
    lines = corner_mine_engine.format_board(color=False).splitlines()
    assert lines[0] == "    0  1  2"
    assert lines[2] == " 0 | F  .  ."
    assert lines[3] == " 1 | .  1  ."

    full = corner_mine_engine.format_board(reveal_all=True, color=False).splitlines()
    assert full[2] == " 0 | M  1  0"


def test_cell_accessor_checks_bounds(corner_mine_engine):
    assert corner_mine_engine.cell(0, 0).is_mine
    with pytest.raises(CoordinateError):
        corner_mine_engine.cell(5, 5)


def test_play_cli_reveal_to_win(empty_engine, capsys):
    moves = iter(["x", "r a b", "r 9 9", "f 0 0", "f 0 0", "r 0 0"])
    status = play_cli(empty_engine, input_fn=lambda _: next(moves))
    assert status is GameStatus.WON
    out = capsys.readouterr().out
    assert "Invalid input" in out
    assert "outside the 5x5 board" in out
    assert "You won!" in out


def test_play_cli_pause_and_quit(corner_mine_engine):
    moves = iter(["p", "r 2 2", "q"])
    status = play_cli(corner_mine_engine, input_fn=lambda _: next(moves))
    assert status is GameStatus.PAUSED
    assert corner_mine_engine.state.cells_revealed == 0
