# dispersal.py

import constants as C
from advective_dispersal import AdvectiveDispersal
from diffusive_dispersal import DiffusiveDispersal
from responsive_dispersal import ResponsiveDispersal
import logger as log


class Dispersal:
    """
    Chooses how each cohort of a cell moves: plankton and very small marine cohorts
    drift with the currents, adults move in response to starvation or crowding, and
    everything else diffuses.
    """
    def __init__(self, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT, draw_randomly=C.DRAW_RANDOMLY):
        self.advective = AdvectiveDispersal(global_time_step_unit, draw_randomly)
        self.diffusive = DiffusiveDispersal(global_time_step_unit, draw_randomly)
        self.responsive = ResponsiveDispersal(global_time_step_unit, draw_randomly)
        for implementation in (self.advective, self.diffusive, self.responsive):
            log.log(f"{implementation.name.capitalize()} parameters: {implementation.parameter_values()}")

    def select_implementation(self, grid, cell_index, cohort, cohort_definitions):
        if grid.is_marine(cell_index[0], cell_index[1]):
            mobility = cohort_definitions.get_trait_value("Mobility", cohort.functional_group_index)
            if mobility == "planktonic" or cohort.individual_body_mass <= C.PLANKTON_DISPERSAL_THRESHOLD:
                return self.advective
        if cohort.is_mature:
            return self.responsive
        return self.diffusive

    def run_cell(self, cell_index, grid, cohort_definitions, current_month):
        """
        Runs dispersal for every cohort in the cell and stages the moves on the grid.
        Returns the number of cohorts staged to move.
        """
        cohorts = grid.get_cell_cohorts(cell_index[0], cell_index[1])
        staged_before = len(grid.delta_functional_group[cell_index[0]][cell_index[1]])
        for fg, i, cohort in cohorts.items():
            implementation = self.select_implementation(grid, cell_index, cohort, cohort_definitions)
            implementation.run_dispersal(cell_index, grid, cohort, fg, i, current_month)
        return len(grid.delta_functional_group[cell_index[0]][cell_index[1]]) - staged_before
