import math
import numpy as np
import pytest
import constants as C
from advective_dispersal import AdvectiveDispersal
from cohorts import Cohort
from diffusive_dispersal import DiffusiveDispersal
from dispersal import Dispersal
from dispersal_common import DispersalProbability
from functional_groups import default_cohort_definitions
from grid import ModelGrid
from responsive_dispersal import ResponsiveDispersal
from utilities import ConfigurationError


def _make_grid(num_lat=3, num_lon=3, marine=False):
    grid = ModelGrid(0.0, float(num_lat), 0.0, float(num_lon), 1.0, 1.0, 9, 3)
    if marine:
        grid.set_environment_layer("Realm", np.full((num_lat, num_lon), C.REALM_MARINE))
    return grid


def _make_cohort(fg=0, body_mass=1000.0, adult_mass=1000.0, abundance=10.0, mature=False):
    return Cohort(fg, adult_mass / 10, adult_mass, body_mass, abundance, math.log(0.1),
                  maturity_time_step=0 if mature else None)


def _add(grid, cell, cohort):
    return cell, cohort.functional_group_index, grid.add_cohort(cell[0], cell[1], cohort)


def _set_currents(grid, u, v):
    shape = (grid.num_lat_cells, grid.num_lon_cells)
    grid.set_environment_layer("uVel", np.full(shape, u))
    grid.set_environment_layer("vVel", np.full(shape, v))


# --- Shared decision steps ---

def test_probability_is_the_displaced_area_outside_the_cell():
    grid = _make_grid()
    dispersal = DiffusiveDispersal()
    height = grid.cell_heights_km[1]
    width = grid.cell_widths_km[1]

    result = dispersal.dispersal_probability(grid, 1, 1, width / 4, height / 4)

    assert result.probability == pytest.approx(7 / 16)
    assert result.u_fraction == pytest.approx(3 / 16)
    assert result.v_fraction == pytest.approx(3 / 16)
    assert result.both_fraction == pytest.approx(1 / 16)


def test_probability_just_below_one_is_left_alone():
    grid = _make_grid()
    width = grid.cell_widths_km[1]
    height = grid.cell_heights_km[1]

    diffusive = DiffusiveDispersal().dispersal_probability(grid, 1, 1, 0.99 * width, 0.99 * height)
    responsive = ResponsiveDispersal().dispersal_probability(grid, 1, 1, 0.99 * width, 0.99 * height, clamp=True)

    assert diffusive.probability == pytest.approx(1 - 0.01 * 0.01)
    assert responsive.probability == diffusive.probability


@pytest.mark.parametrize("u_cells, v_cells", [(3, 3), (-3, 0), (0, -5), (10, -2)])
def test_long_displacements_leave_with_certainty(u_cells, v_cells):
    grid = _make_grid()
    width = grid.cell_widths_km[1]
    height = grid.cell_heights_km[1]

    responsive = ResponsiveDispersal().dispersal_probability(
        grid, 1, 1, u_cells * width, v_cells * height, clamp=True)
    diffusive = DiffusiveDispersal().dispersal_probability(grid, 1, 1, u_cells * width, v_cells * height)

    assert responsive.probability == 1.0
    assert diffusive.probability == pytest.approx(1.0)
    assert diffusive.u_distance == pytest.approx(math.copysign(width, u_cells) if u_cells else 0.0)
    assert diffusive.v_distance == pytest.approx(math.copysign(height, v_cells) if v_cells else 0.0)
    shares = diffusive.u_fraction + diffusive.v_fraction + diffusive.both_fraction
    assert shares == pytest.approx(diffusive.probability)
    assert min(diffusive.u_fraction, diffusive.v_fraction, diffusive.both_fraction) >= 0.0


def test_fast_responsive_cohort_is_staged_to_a_neighbour():
    grid = _make_grid()
    area = grid.cell_area_km2(1, 1)
    # Starving, and heavy enough to cover several cells in one step.
    cohort = _make_cohort(body_mass=4.0e8, adult_mass=1.0e9, abundance=area, mature=True)
    cell, fg, index = _add(grid, (1, 1), cohort)

    moved = ResponsiveDispersal(draw_randomly=False).run_dispersal(cell, grid, cohort, fg, index, 0)

    records = grid.staged_dispersals(1, 1)
    assert moved is True
    assert len(records) == 1
    row, col = records[0].destination
    assert max(abs(row - 1), abs(col - 1)) == 1


@pytest.mark.parametrize("u, v, random_value, direction, destination", [
    (1.0, 0.0, 0.05, C.DIRECTION_EAST, (1, 2)),
    (-1.0, 0.0, 0.05, C.DIRECTION_WEST, (1, 0)),
    (0.0, 1.0, 0.05, C.DIRECTION_NORTH, (2, 1)),
    (0.0, -1.0, 0.05, C.DIRECTION_SOUTH, (0, 1)),
    (1.0, 1.0, 0.99, C.DIRECTION_NORTH_EAST, (2, 2)),
    (1.0, -1.0, 0.99, C.DIRECTION_SOUTH_EAST, (0, 2)),
    (-1.0, -1.0, 0.99, C.DIRECTION_SOUTH_WEST, (0, 0)),
    (-1.0, 1.0, 0.99, C.DIRECTION_NORTH_WEST, (2, 0)),
])
def test_direction_follows_where_the_draw_falls(u, v, random_value, direction, destination):
    grid = _make_grid()
    dispersal = DiffusiveDispersal()
    # Shares chosen so 0.05 lands in the u-only or v-only share, 0.99 in the diagonal share.
    fractions = (0.1, 0.0, 0.9) if v == 0.0 else ((0.0, 0.1, 0.9) if u == 0.0 else (0.1, 0.1, 0.8))
    probability = DispersalProbability(1.0, fractions[0], fractions[1], fractions[2], u, v)

    found, exit_direction, entry_direction = dispersal.cell_to_disperse_to(grid, 1, 1, probability, random_value, None)

    assert found == destination
    assert exit_direction == direction
    assert entry_direction == (direction + 4) % 8


def test_no_destination_leaves_exit_direction_unset():
    grid = _make_grid()
    probability = DispersalProbability(1.0, 1.0, 0.0, 0.0, 1.0, 0.0)

    found, exit_direction, _ = DiffusiveDispersal().cell_to_disperse_to(grid, 1, 2, probability, 0.5, None)

    assert found is None
    assert exit_direction is None


def test_first_exit_direction_is_kept():
    grid = _make_grid()
    probability = DispersalProbability(1.0, 1.0, 0.0, 0.0, 1.0, 0.0)

    _, exit_direction, entry_direction = DiffusiveDispersal().cell_to_disperse_to(
        grid, 1, 1, probability, 0.5, C.DIRECTION_NORTH)

    assert exit_direction == C.DIRECTION_NORTH
    assert entry_direction == C.DIRECTION_WEST


def test_check_for_dispersal_returns_the_draw_or_none():
    dispersal = DiffusiveDispersal()

    assert dispersal.check_for_dispersal(0.0) is None
    draw = dispersal.check_for_dispersal(1.0)
    assert 0.0 < draw < 1.0


# --- No valid destination ---

def test_diffusive_cohort_with_nowhere_to_go_stays_put():
    grid = _make_grid(1, 1)
    cell, fg, index = _add(grid, (0, 0), _make_cohort(body_mass=1.0e12, adult_mass=1.0e12))

    moved = DiffusiveDispersal().run_dispersal(cell, grid, grid.get_cell_cohorts(0, 0)[fg, index], fg, index, 0)

    assert moved is False
    assert grid.staged_dispersals(0, 0) == []


def test_advective_cohort_with_nowhere_to_go_stays_put():
    grid = _make_grid(1, 1, marine=True)
    _set_currents(grid, 5.0, 5.0)
    cell, fg, index = _add(grid, (0, 0), _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01))

    moved = AdvectiveDispersal().run_dispersal(cell, grid, grid.get_cell_cohorts(0, 0)[fg, index], fg, index, 0)

    assert moved is False
    assert grid.staged_dispersals(0, 0) == []


def test_cohorts_do_not_cross_onto_land():
    grid = _make_grid(1, 2, marine=True)
    realm = np.array([[C.REALM_MARINE, C.REALM_TERRESTRIAL]])
    grid.set_environment_layer("Realm", realm)
    _set_currents(grid, 1.0, 0.0)
    cell, fg, index = _add(grid, (0, 0), _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01))

    AdvectiveDispersal().run_dispersal(cell, grid, grid.get_cell_cohorts(0, 0)[fg, index], fg, index, 0)

    assert grid.staged_dispersals(0, 0) == []


# --- Advective ---

def test_advective_unit_conversions_for_monthly_steps():
    advective = AdvectiveDispersal()

    assert advective.delta_t == pytest.approx(1.0)
    assert advective.advection_time_steps_per_model_time_step == pytest.approx(40.0)
    assert advective.velocity_unit_conversion == pytest.approx(2592.0)
    assert advective.rescale_dispersal_speed(1.0) == pytest.approx(64.8)
    assert advective.horizontal_diffusivity_km_sq_per_ad_time_step == pytest.approx(6.48)


def test_plankton_drift_downstream_and_stage_one_record():
    grid = _make_grid(1, 3, marine=True)
    _set_currents(grid, 0.5, 0.0)
    cell, fg, index = _add(grid, (0, 0), _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01))

    moved = AdvectiveDispersal().run_dispersal(cell, grid, grid.get_cell_cohorts(0, 0)[fg, index], fg, index, 0)

    records = grid.staged_dispersals(0, 0)
    assert moved is True
    assert len(records) == 1
    assert records[0].destination[1] > 0
    assert records[0].exit_direction == C.DIRECTION_EAST
    assert records[0].entry_direction == C.DIRECTION_WEST


# --- Responsive ---

def test_starving_cohort_always_tries_to_leave():
    grid = _make_grid()
    cohort = _make_cohort(body_mass=500.0, adult_mass=1000.0, mature=True)
    cell, fg, index = _add(grid, (1, 1), cohort)
    responsive = ResponsiveDispersal()

    assert responsive.check_starvation_dispersal(grid, cell, cohort, fg, index) is True


def test_cohort_at_adult_mass_is_not_starving():
    grid = _make_grid()
    cohort = _make_cohort(body_mass=1000.0, adult_mass=1000.0, mature=True)
    cell, fg, index = _add(grid, (1, 1), cohort)

    assert ResponsiveDispersal().check_starvation_dispersal(grid, cell, cohort, fg, index) is False


def test_starvation_takes_precedence_over_crowding(monkeypatch):
    grid = _make_grid()
    area = grid.cell_area_km2(1, 1)
    cohort = _make_cohort(body_mass=500.0, adult_mass=1000.0, abundance=1000.0 * area, mature=True)
    cell, fg, index = _add(grid, (1, 1), cohort)
    responsive = ResponsiveDispersal()

    def fail(*args):
        raise AssertionError("density dispersal should not be checked")

    monkeypatch.setattr(responsive, "check_density_dispersal", fail)

    assert responsive.run_dispersal(cell, grid, cohort, fg, index, 0) is True


def test_crowded_cohort_tries_to_leave():
    grid = _make_grid()
    area = grid.cell_area_km2(1, 1)
    threshold_density = C.RESPONSIVE_DENSITY_THRESHOLD_SCALING / 1000.0
    crowded = _make_cohort(abundance=2 * threshold_density * area, mature=True)
    sparse = _make_cohort(abundance=0.5 * threshold_density * area, mature=True)
    _, _, crowded_index = _add(grid, (1, 1), crowded)
    _, _, sparse_index = _add(grid, (1, 1), sparse)
    responsive = ResponsiveDispersal()

    assert responsive.check_density_dispersal(grid, (1, 1), crowded, 0, crowded_index) is True
    assert responsive.check_density_dispersal(grid, (1, 1), sparse, 0, sparse_index) is False


# --- Determinism ---

def _staged_after_diffusing(seed_runs=20):
    grid = _make_grid()
    dispersal = DiffusiveDispersal(draw_randomly=False)
    cohort = _make_cohort(body_mass=1.0e9, adult_mass=1.0e9)
    cell, fg, index = _add(grid, (1, 1), cohort)
    for _ in range(seed_runs):
        dispersal.run_dispersal(cell, grid, cohort, fg, index, 0)
    return grid.staged_dispersals(1, 1)


def test_fixed_seed_runs_stage_identical_moves():
    first = _staged_after_diffusing()
    second = _staged_after_diffusing()

    assert len(first) > 0
    assert first == second


def _staged_after_drifting(seed_runs=10):
    grid = _make_grid(marine=True)
    _set_currents(grid, 0.5, -0.2)
    dispersal = AdvectiveDispersal(draw_randomly=False)
    cohort = _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01)
    cell, fg, index = _add(grid, (1, 1), cohort)
    for _ in range(seed_runs):
        dispersal.run_dispersal(cell, grid, cohort, fg, index, 0)
    return grid.staged_dispersals(1, 1), dispersal.random.uniform()


def test_fixed_seed_advective_runs_stage_identical_moves():
    first, first_next_draw = _staged_after_drifting()
    second, second_next_draw = _staged_after_drifting()

    assert len(first) > 0
    assert first == second
    assert first_next_draw == second_next_draw


# --- Dispatcher ---

def test_dispatcher_picks_the_implementation_by_realm_mobility_and_maturity():
    definitions = default_cohort_definitions()
    dispatcher = Dispersal()
    land = _make_grid()
    sea = _make_grid(marine=True)

    plankton = _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01)
    small_fish = _make_cohort(fg=6, body_mass=0.005, adult_mass=10.0)
    adult_fish = _make_cohort(fg=6, body_mass=10.0, adult_mass=10.0, mature=True)
    adult_deer = _make_cohort(fg=0, mature=True)
    young_deer = _make_cohort(fg=0, body_mass=100.0)

    assert dispatcher.select_implementation(sea, (1, 1), plankton, definitions) is dispatcher.advective
    assert dispatcher.select_implementation(sea, (1, 1), small_fish, definitions) is dispatcher.advective
    assert dispatcher.select_implementation(sea, (1, 1), adult_fish, definitions) is dispatcher.responsive
    assert dispatcher.select_implementation(land, (1, 1), adult_deer, definitions) is dispatcher.responsive
    assert dispatcher.select_implementation(land, (1, 1), young_deer, definitions) is dispatcher.diffusive


def test_run_cell_stages_moves_for_the_cell():
    definitions = default_cohort_definitions()
    grid = _make_grid()
    area = grid.cell_area_km2(1, 1)
    for _ in range(5):
        # Starving and fast enough to always leave the cell.
        grid.add_cohort(1, 1, _make_cohort(body_mass=4.0e8, adult_mass=1.0e9, abundance=area, mature=True))

    staged = Dispersal().run_cell((1, 1), grid, definitions, 0)

    assert staged == 5
    assert len(grid.staged_dispersals(1, 1)) == 5
    for record in grid.staged_dispersals(1, 1):
        assert record.destination != (1, 1)
        assert record.exit_direction is not None


def test_advective_dispersal_needs_current_layers():
    grid = _make_grid(marine=True)
    cell, fg, index = _add(grid, (1, 1), _make_cohort(fg=5, body_mass=0.001, adult_mass=0.01))

    with pytest.raises(ConfigurationError):
        AdvectiveDispersal().run_dispersal(cell, grid, grid.get_cell_cohorts(1, 1)[fg, index], fg, index, 0)
