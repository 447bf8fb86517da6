# responsive_dispersal.py

import math
import constants as C
from dispersal_common import CommonDispersalMethods


class ResponsiveDispersal(CommonDispersalMethods):
    """
    Dispersal of adults in response to their surroundings. A cohort that has lost body
    mass may leave to look for food; otherwise one that is too crowded may leave. Both
    moves are at the speed of an adult of the group.
    """
    name = "responsive dispersal"

    def __init__(self, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT, draw_randomly=C.DRAW_RANDOMLY):
        super().__init__(C.RESPONSIVE_TIME_UNIT, global_time_step_unit, draw_randomly)
        self.dispersal_speed_body_mass_scalar = C.RESPONSIVE_DISPERSAL_SPEED_BODY_MASS_SCALAR
        self.dispersal_speed_body_mass_exponent = C.RESPONSIVE_DISPERSAL_SPEED_BODY_MASS_EXPONENT
        self.density_threshold_scaling = C.RESPONSIVE_DENSITY_THRESHOLD_SCALING
        self.starvation_dispersal_body_mass_threshold = C.RESPONSIVE_STARVATION_DISPERSAL_BODY_MASS_THRESHOLD

    def parameter_values(self):
        return {
            "TimeUnitImplementation": self.time_unit_implementation,
            "DensityThresholdScaling": self.density_threshold_scaling,
            "StarvationDispersalBodyMassThreshold": self.starvation_dispersal_body_mass_threshold,
            "DispersalSpeedBodyMassScalar": self.dispersal_speed_body_mass_scalar,
            "DispersalSpeedBodyMassExponent": self.dispersal_speed_body_mass_exponent,
        }

    def calculate_dispersal_speed(self, adult_mass):
        return self.dispersal_speed_body_mass_scalar * adult_mass ** self.dispersal_speed_body_mass_exponent

    def _attempt(self, grid, cell_index, cohort, functional_group, cohort_index):
        distance = self.calculate_dispersal_speed(cohort.adult_mass) * self.delta_t
        direction = self.random.uniform() * 2 * math.pi
        dispersal = self.dispersal_probability(grid, cell_index[0], cell_index[1],
                                               distance * math.cos(direction), distance * math.sin(direction),
                                               clamp=True)
        self.disperse_once(grid, cell_index, functional_group, cohort_index, dispersal)

    def check_starvation_dispersal(self, grid, cell_index, cohort, functional_group, cohort_index):
        """
        Returns True if the cohort tried to leave because it is under weight, whether or
        not it found somewhere to go.
        """
        if cohort.individual_body_mass >= cohort.adult_mass:
            return False
        body_mass_ratio = cohort.individual_body_mass / cohort.adult_mass
        threshold = self.starvation_dispersal_body_mass_threshold
        if body_mass_ratio < threshold:
            disperse = True
        else:
            # Linear from certain at the threshold to never at full adult mass.
            disperse = (1 - body_mass_ratio) / (1 - threshold) > self.random.uniform()
        if disperse:
            self._attempt(grid, cell_index, cohort, functional_group, cohort_index)
        return disperse

    def check_density_dispersal(self, grid, cell_index, cohort, functional_group, cohort_index):
        density = cohort.cohort_abundance / grid.cell_area_km2(cell_index[0], cell_index[1])
        if density > self.density_threshold_scaling / cohort.adult_mass:
            self._attempt(grid, cell_index, cohort, functional_group, cohort_index)
            return True
        return False

    def run_dispersal(self, cell_index, grid, cohort, functional_group, cohort_index, current_month):
        dispersed = self.check_starvation_dispersal(grid, cell_index, cohort, functional_group, cohort_index)
        if not dispersed:
            dispersed = self.check_density_dispersal(grid, cell_index, cohort, functional_group, cohort_index)
        return dispersed
