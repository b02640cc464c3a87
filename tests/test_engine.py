import random

import pytest

from sweeper.engine import (
    FlagEngine,
    GameController,
    GameState,
    GameStatus,
    MoveOutcome,
    RevealEngine,
)
from sweeper.exceptions import InvalidState, OutOfBounds

from .conftest import COLUMN_MINES, build_state


def revealed_cells(state):
    return {
        (r, c)
        for r, row in enumerate(state.grid)
        for c, cell in enumerate(row)
        if cell.revealed
    }


def clear_board(state, controller=None):
    """Reveal every safe cell; returns the outcome of the last reveal."""
    outcome = None
    for r in range(state.rows):
        for c in range(state.cols):
            cell = state.grid[r][c]
            if cell.is_mine or cell.revealed:
                continue
            if controller is not None:
                outcome = controller.reveal(state, r, c)
            else:
                outcome = RevealEngine.reveal(state, r, c)
    return outcome


def expected_flood(state, row, col):
    """Straightforward recursive flood fill used as a reference."""
    seen = set()

    def visit(r, c):
        if not state.in_bounds(r, c) or (r, c) in seen:
            return
        cell = state.grid[r][c]
        if cell.revealed or cell.flagged:
            return
        seen.add((r, c))
        if cell.adjacent_mine_count == 0:
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    visit(r + dr, c + dc)

    visit(row, col)
    return seen


# ============================================================================
# GameState
# ============================================================================

def test_new_state_defaults():
    state = GameState('MEDIUM')
    assert (state.rows, state.cols, state.mine_count) == (16, 16, 40)
    assert state.remaining_flags == 40
    assert state.lives == 3
    assert state.first_click_pending
    assert state.status == GameStatus.NOT_STARTED
    assert not any(cell.is_mine for cell in state.iter_cells())


def test_cell_out_of_bounds():
    state = GameState('EASY')
    with pytest.raises(OutOfBounds):
        state.cell(8, 0)
    with pytest.raises(OutOfBounds):
        state.cell(0, -1)


def test_state_survives_dict_round_trip(column_state):
    FlagEngine.toggle_flag(column_state, 0, 7)
    RevealEngine.reveal(column_state, 0, 4)

    restored = GameState.from_dict(column_state.to_dict())

    assert restored.to_dict() == column_state.to_dict()
    assert restored.lives == 2
    assert restored.grid[0][4].exploded


def test_from_dict_rejects_malformed_data():
    with pytest.raises(InvalidState):
        GameState.from_dict({'difficulty': 'EASY'})
    with pytest.raises(InvalidState):
        GameState.from_dict({'difficulty': 'NOPE'})


def test_from_dict_rejects_wrong_dimensions():
    data = GameState('EASY').to_dict()
    data['grid'] = data['grid'][:4]
    with pytest.raises(InvalidState):
        GameState.from_dict(data)


def test_from_dict_rejects_flag_budget_overflow():
    data = GameState('EASY').to_dict()
    data['remaining_flags'] = 11
    with pytest.raises(InvalidState):
        GameState.from_dict(data)


def test_from_dict_rejects_negative_lives():
    data = GameState('EASY').to_dict()
    data['lives'] = -4
    with pytest.raises(InvalidState):
        GameState.from_dict(data)


@pytest.mark.parametrize("cell", [
    {'is_mine': False, 'revealed': True, 'flagged': True, 'exploded': False},
    {'is_mine': False, 'revealed': True, 'flagged': False, 'exploded': True},
    {'is_mine': True, 'revealed': False, 'flagged': False, 'exploded': True},
])
def test_from_dict_rejects_inconsistent_cells(cell):
    data = GameState('EASY').to_dict()
    data['grid'][2][3].update(cell)
    with pytest.raises(InvalidState):
        GameState.from_dict(data)


def test_from_dict_accepts_lost_game(column_state):
    for r in range(3):
        RevealEngine.reveal(column_state, r, 4)
    assert column_state.status == GameStatus.LOST

    restored = GameState.from_dict(column_state.to_dict())

    assert restored.status == GameStatus.LOST
    assert restored.grid[0][4].exploded


# ============================================================================
# First click
# ============================================================================

def test_first_reveal_places_mines_around_safe_cell():
    state = GameState('EASY', rng=random.Random(3))
    outcome = RevealEngine.reveal(state, 0, 0)

    assert outcome.changed
    assert not state.first_click_pending
    assert state.started
    assert not state.grid[0][0].is_mine
    assert state.grid[0][0].revealed
    assert sum(cell.is_mine for cell in state.iter_cells()) == 10


def test_first_reveal_discards_earlier_flags():
    state = GameState('EASY', rng=random.Random(8))
    FlagEngine.toggle_flag(state, 5, 5)
    FlagEngine.toggle_flag(state, 6, 6)
    assert state.remaining_flags == 8

    RevealEngine.reveal(state, 0, 0)

    assert state.remaining_flags == 10
    assert not any(cell.flagged for cell in state.iter_cells())


def test_first_reveal_on_flagged_cell_does_nothing():
    state = GameState('EASY')
    FlagEngine.toggle_flag(state, 2, 2)

    outcome = RevealEngine.reveal(state, 2, 2)

    assert not outcome.changed
    assert state.first_click_pending


# ============================================================================
# Flood reveal
# ============================================================================

def test_flood_reveal_stops_at_numbered_fringe(column_state):
    outcome = RevealEngine.reveal(column_state, 0, 0)

    assert outcome.cells_revealed == 32
    assert revealed_cells(column_state) == {(r, c) for r in range(8) for c in range(4)}
    assert not column_state.won


def test_flood_reveal_skips_flagged_cells(column_state):
    FlagEngine.toggle_flag(column_state, 3, 1)

    outcome = RevealEngine.reveal(column_state, 0, 0)

    assert outcome.cells_revealed == 31
    assert column_state.grid[3][1].flagged
    assert not column_state.grid[3][1].revealed


def test_numbered_cell_reveals_only_itself(column_state):
    outcome = RevealEngine.reveal(column_state, 0, 3)

    assert outcome.cells_revealed == 1
    assert revealed_cells(column_state) == {(0, 3)}
    assert column_state.grid[0][3].adjacent_mine_count == 2


@pytest.mark.parametrize("seed", range(10))
def test_flood_reveal_matches_reference_region(seed):
    state = GameState('MEDIUM', rng=random.Random(seed))
    state.place_mines(8, 8)
    expected = expected_flood(state, 8, 8)

    RevealEngine.reveal(state, 8, 8)

    if not state.won:
        assert revealed_cells(state) == expected


def test_revealing_revealed_cell_is_a_no_op(column_state):
    RevealEngine.reveal(column_state, 0, 0)
    outcome = RevealEngine.reveal(column_state, 0, 0)
    assert outcome == MoveOutcome()


# ============================================================================
# Mines and lives
# ============================================================================

def test_mine_hit_costs_one_life(column_state):
    outcome = RevealEngine.reveal(column_state, 2, 4)

    assert outcome.life_lost
    assert outcome.bombs_exploded == 1
    assert outcome.transition is None
    assert column_state.lives == 2
    assert not column_state.over
    exploded = [(r, c) for r, c in COLUMN_MINES if column_state.grid[r][c].exploded]
    assert exploded == [(2, 4)]
    assert revealed_cells(column_state) == {(2, 4)}


def test_third_hit_ends_the_game(column_state):
    RevealEngine.reveal(column_state, 0, 4)
    RevealEngine.reveal(column_state, 1, 4)
    outcome = RevealEngine.reveal(column_state, 2, 4)

    assert outcome.transition == GameStatus.LOST
    assert column_state.over
    assert not column_state.won
    assert column_state.lives == 0
    assert column_state.status == GameStatus.LOST
    assert all(cell.revealed for cell in column_state.iter_cells())
    exploded = {(r, c) for r, c in COLUMN_MINES if column_state.grid[r][c].exploded}
    assert exploded == {(0, 4), (1, 4), (2, 4)}


def test_last_life_lost_with_one_life():
    state = build_state(COLUMN_MINES, lives=1)
    RevealEngine.reveal(state, 7, 7)
    assert state.over
    assert state.lives == 0


def test_no_moves_after_loss(column_state):
    column_state.lives = 1
    RevealEngine.reveal(column_state, 0, 4)

    assert RevealEngine.reveal(column_state, 5, 5) == MoveOutcome()
    assert FlagEngine.toggle_flag(column_state, 5, 5) == MoveOutcome()
    assert column_state.lives == 0


def test_loss_audits_flags(column_state):
    FlagEngine.toggle_flag(column_state, 5, 4)
    FlagEngine.toggle_flag(column_state, 0, 0)
    column_state.lives = 1

    outcome = RevealEngine.reveal(column_state, 0, 4)

    assert outcome.correct_flags == 1
    assert not any(cell.flagged for cell in column_state.iter_cells())


# ============================================================================
# Winning
# ============================================================================

def test_clearing_every_safe_cell_wins(column_state):
    outcome = clear_board(column_state)

    assert outcome.transition == GameStatus.WON
    assert outcome.games_won == 1
    assert column_state.won
    assert not column_state.over
    assert column_state.status == GameStatus.WON
    assert all(cell.revealed for cell in column_state.iter_cells())
    assert not any(cell.exploded for cell in column_state.iter_cells())


def test_win_counts_flag_on_mine(column_state):
    FlagEngine.toggle_flag(column_state, 0, 7)
    outcome = clear_board(column_state)

    assert column_state.won
    assert outcome.correct_flags == 1


def test_win_after_losing_a_life(column_state):
    RevealEngine.reveal(column_state, 3, 4)
    clear_board(column_state)

    assert column_state.won
    assert column_state.lives == 2
    assert column_state.grid[3][4].exploded


# ============================================================================
# Flags
# ============================================================================

def test_flag_toggle_restores_budget():
    state = GameState('EASY')
    FlagEngine.toggle_flag(state, 1, 1)
    assert state.grid[1][1].flagged
    assert state.remaining_flags == 9

    FlagEngine.toggle_flag(state, 1, 1)
    assert not state.grid[1][1].flagged
    assert state.remaining_flags == 10


def test_flag_budget_cannot_go_negative(column_state):
    for c in range(8):
        FlagEngine.toggle_flag(column_state, 0, c)
    FlagEngine.toggle_flag(column_state, 1, 0)
    FlagEngine.toggle_flag(column_state, 1, 1)
    assert column_state.remaining_flags == 0

    outcome = FlagEngine.toggle_flag(column_state, 2, 0)

    assert not outcome.changed
    assert not column_state.grid[2][0].flagged
    assert column_state.remaining_flags == 0

    FlagEngine.toggle_flag(column_state, 1, 1)
    assert column_state.remaining_flags == 1


def test_cannot_flag_revealed_cell(column_state):
    RevealEngine.reveal(column_state, 0, 3)
    outcome = FlagEngine.toggle_flag(column_state, 0, 3)
    assert not outcome.changed
    assert not column_state.grid[0][3].flagged
    assert column_state.remaining_flags == 10


def test_flag_out_of_bounds_raises(column_state):
    with pytest.raises(OutOfBounds):
        FlagEngine.toggle_flag(column_state, 0, 8)


def test_reveal_out_of_bounds_raises(column_state):
    with pytest.raises(OutOfBounds):
        RevealEngine.reveal(column_state, -1, 0)


def test_flagged_cell_cannot_be_revealed(column_state):
    FlagEngine.toggle_flag(column_state, 0, 4)
    outcome = RevealEngine.reveal(column_state, 0, 4)
    assert not outcome.changed
    assert column_state.lives == 3


# ============================================================================
# GameController
# ============================================================================

def test_start_from_nothing_does_not_count(recording_store):
    controller = GameController(recording_store)
    state = controller.start_new_game(None)

    assert state.started
    assert state.difficulty == 'EASY'
    assert state.status == GameStatus.IN_PROGRESS
    assert recording_store.totals == {}


def test_start_over_unfinished_game_does_not_count(recording_store, column_state):
    controller = GameController(recording_store)
    controller.start_new_game(column_state)
    assert recording_store.totals == {}


def test_start_after_finished_game_counts(recording_store, column_state):
    controller = GameController(recording_store)
    column_state.lives = 1
    controller.reveal(column_state, 0, 4)

    fresh = controller.start_new_game(column_state)

    assert recording_store.totals['games_played'] == 1
    assert fresh is not column_state
    assert fresh.first_click_pending
    assert fresh.lives == 3


def test_start_after_win_counts(recording_store, column_state):
    controller = GameController(recording_store)
    clear_board(column_state, controller)
    controller.start_new_game(column_state, 'HARD')
    assert recording_store.totals['games_played'] == 1
    assert recording_store.totals['games_won'] == 1


def test_start_keeps_difficulty_unless_given(recording_store):
    controller = GameController(recording_store)
    hard = controller.change_difficulty('HARD')

    assert controller.start_new_game(hard).difficulty == 'HARD'
    assert controller.start_new_game(hard, 'MEDIUM').difficulty == 'MEDIUM'


def test_change_difficulty_builds_fresh_game(recording_store):
    controller = GameController(recording_store, starting_lives=5)
    state = controller.change_difficulty('HARD')

    assert (state.rows, state.cols) == (16, 30)
    assert state.remaining_flags == 99
    assert state.lives == 5
    assert state.status == GameStatus.NOT_STARTED
    assert recording_store.totals == {}


def test_change_difficulty_rejects_unknown_level(recording_store):
    with pytest.raises(ValueError):
        GameController(recording_store).change_difficulty('EXTREME')


def test_controller_relays_stats(recording_store, column_state):
    controller = GameController(recording_store)
    controller.flag(column_state, 7, 7)
    controller.reveal(column_state, 0, 4)
    controller.reveal(column_state, 1, 4)
    controller.reveal(column_state, 2, 4)

    assert recording_store.totals == {'bombs_exploded': 3, 'correct_flags': 1}


def test_stat_deltas_skip_zero_counters():
    assert MoveOutcome(bombs_exploded=1).stat_deltas() == {'bombs_exploded': 1}
    assert MoveOutcome(changed=True, cells_revealed=4).stat_deltas() == {}
