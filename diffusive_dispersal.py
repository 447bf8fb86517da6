# diffusive_dispersal.py

import math
import constants as C
from dispersal_common import CommonDispersalMethods


class DiffusiveDispersal(CommonDispersalMethods):
    """Random walk at an allometric speed, in a uniformly random direction."""
    name = "diffusive dispersal"

    def __init__(self, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT, draw_randomly=C.DRAW_RANDOMLY):
        super().__init__(C.DIFFUSIVE_TIME_UNIT, global_time_step_unit, draw_randomly)
        self.dispersal_speed_body_mass_scalar = C.DIFFUSIVE_DISPERSAL_SPEED_BODY_MASS_SCALAR
        self.dispersal_speed_body_mass_exponent = C.DIFFUSIVE_DISPERSAL_SPEED_BODY_MASS_EXPONENT

    def parameter_values(self):
        return {
            "TimeUnitImplementation": self.time_unit_implementation,
            "DispersalSpeedBodyMassScalar": self.dispersal_speed_body_mass_scalar,
            "DispersalSpeedBodyMassExponent": self.dispersal_speed_body_mass_exponent,
        }

    def calculate_dispersal_speed(self, body_mass):
        """Distance covered (km) in one dispersal time unit."""
        return self.dispersal_speed_body_mass_scalar * body_mass ** self.dispersal_speed_body_mass_exponent

    def run_dispersal(self, cell_index, grid, cohort, functional_group, cohort_index, current_month):
        distance = self.calculate_dispersal_speed(cohort.individual_body_mass) * self.delta_t
        direction = self.random.uniform() * 2 * math.pi
        dispersal = self.dispersal_probability(grid, cell_index[0], cell_index[1],
                                               distance * math.cos(direction), distance * math.sin(direction))
        return self.disperse_once(grid, cell_index, functional_group, cohort_index, dispersal)
