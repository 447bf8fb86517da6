# dispersal_common.py

import math
from collections import namedtuple
import constants as C
from random_source import RandomSource, seed_mode_from_flag
from utilities import convert_time_units
import logger as log

# Probability of leaving the cell in one step, split into the parts of the displaced
# cell area lying outside the cell in the u direction only, the v direction only and
# both, plus the u and v distances travelled (km).
DispersalProbability = namedtuple(
    "DispersalProbability",
    ["probability", "u_fraction", "v_fraction", "both_fraction", "u_distance", "v_distance"])

# (exit direction from the origin, entry direction into the destination)
_EXIT_ENTRY = {
    C.DIRECTION_NORTH: (C.DIRECTION_NORTH, C.DIRECTION_SOUTH),
    C.DIRECTION_NORTH_EAST: (C.DIRECTION_NORTH_EAST, C.DIRECTION_SOUTH_WEST),
    C.DIRECTION_EAST: (C.DIRECTION_EAST, C.DIRECTION_WEST),
    C.DIRECTION_SOUTH_EAST: (C.DIRECTION_SOUTH_EAST, C.DIRECTION_NORTH_WEST),
    C.DIRECTION_SOUTH: (C.DIRECTION_SOUTH, C.DIRECTION_NORTH),
    C.DIRECTION_SOUTH_WEST: (C.DIRECTION_SOUTH_WEST, C.DIRECTION_NORTH_EAST),
    C.DIRECTION_WEST: (C.DIRECTION_WEST, C.DIRECTION_EAST),
    C.DIRECTION_NORTH_WEST: (C.DIRECTION_NORTH_WEST, C.DIRECTION_SOUTH_EAST),
}


class CommonDispersalMethods:
    """Shared decision and bookkeeping steps of the dispersal implementations."""
    name = "dispersal"

    def __init__(self, time_unit_implementation, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT,
                 draw_randomly=C.DRAW_RANDOMLY):
        self.time_unit_implementation = time_unit_implementation
        self.delta_t = convert_time_units(global_time_step_unit, time_unit_implementation)
        self.random = RandomSource(seed_mode_from_flag(draw_randomly))

    def check_for_dispersal(self, dispersal_probability):
        """
        Draws once. Returns the draw if the cohort disperses (draw <= probability), else
        None. The draw is reused to pick the direction of travel.
        """
        random_value = self.random.uniform()
        if dispersal_probability >= random_value and random_value > 0:
            return random_value
        return None

    def dispersal_probability(self, grid, lat_index, lon_index, u_distance, v_distance, clamp=False):
        """
        Treats the cell as a rectangle displaced by (u_distance, v_distance); the share of
        its area that ends up outside the original cell is the probability of leaving.
        """
        lat_cell_length = grid.cell_heights_km[lat_index]
        lon_cell_length = grid.cell_widths_km[lat_index]
        # A displaced cell can at most lie wholly outside the original one.
        u_distance = math.copysign(min(abs(u_distance), lon_cell_length), u_distance)
        v_distance = math.copysign(min(abs(v_distance), lat_cell_length), v_distance)
        area_outside_both = abs(u_distance * v_distance)
        area_outside_u = abs(u_distance * lat_cell_length) - area_outside_both
        area_outside_v = abs(v_distance * lon_cell_length) - area_outside_both
        cell_area = grid.cell_area_km2(lat_index, lon_index)
        probability = (area_outside_u + area_outside_v + area_outside_both) / cell_area
        if clamp and probability > 1:
            probability = 1.0
        elif not clamp and probability >= 1:
            log.log(f"WARNING: {self.name} probability {probability:.3f} >= 1 in cell ({lat_index}, {lon_index}); "
                    f"the cohort moves at least one cell width.")
        return DispersalProbability(probability, area_outside_u / cell_area, area_outside_v / cell_area,
                                    area_outside_both / cell_area, u_distance, v_distance)

    def cell_to_disperse_to(self, grid, lat_index, lon_index, dispersal, random_value, exit_direction):
        """
        Picks the direction of travel from where the draw falls among the u-only, v-only
        and diagonal shares, then looks up the neighbouring cell.

        Returns (destination, exit_direction, entry_direction). destination is None when
        there is no valid cell that way. exit_direction is only set by the first
        successful move of a step (pass None before any move); entry_direction belongs
        to the move just attempted.
        """
        u_distance = dispersal.u_distance
        v_distance = dispersal.v_distance
        if random_value <= dispersal.u_fraction:
            direction = C.DIRECTION_EAST if u_distance > 0 else C.DIRECTION_WEST
        elif random_value <= dispersal.u_fraction + dispersal.v_fraction:
            direction = C.DIRECTION_NORTH if v_distance > 0 else C.DIRECTION_SOUTH
        elif u_distance > 0:
            direction = C.DIRECTION_NORTH_EAST if v_distance > 0 else C.DIRECTION_SOUTH_EAST
        else:
            direction = C.DIRECTION_NORTH_WEST if v_distance > 0 else C.DIRECTION_SOUTH_WEST

        exit_code, entry_code = _EXIT_ENTRY[direction]
        destination = grid.check_dispersal(lat_index, lon_index, direction)
        if destination is not None and exit_direction is None:
            exit_direction = exit_code
        return destination, exit_direction, entry_code

    def stage_dispersal(self, grid, cell_index, functional_group, cohort_index, destination,
                        exit_direction, entry_direction):
        grid.append_dispersal_delta(cell_index[0], cell_index[1], functional_group, cohort_index,
                                    destination, exit_direction, entry_direction)

    def disperse_once(self, grid, cell_index, functional_group, cohort_index, dispersal):
        """One dispersal attempt from a probability; stages a record if the cohort moves."""
        random_value = self.check_for_dispersal(dispersal.probability)
        if random_value is None:
            return False
        destination, exit_direction, entry_direction = self.cell_to_disperse_to(
            grid, cell_index[0], cell_index[1], dispersal, random_value, None)
        if destination is None:
            return False
        self.stage_dispersal(grid, cell_index, functional_group, cohort_index, destination,
                             exit_direction, entry_direction)
        return True

    def run_dispersal(self, cell_index, grid, cohort, functional_group, cohort_index, current_month):
        raise NotImplementedError
