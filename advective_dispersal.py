# advective_dispersal.py

import math
import constants as C
from dispersal_common import CommonDispersalMethods
from utilities import convert_time_units, ConfigurationError


class AdvectiveDispersal(CommonDispersalMethods):
    """
    Drift with ocean currents plus random horizontal diffusion. The model time step is
    split into short advective sub-steps; the cohort can cross one cell boundary per
    sub-step and picks up the currents of each cell it reaches.
    """
    name = "advective dispersal"

    def __init__(self, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT, draw_randomly=C.DRAW_RANDOMLY):
        super().__init__(C.ADVECTIVE_TIME_UNIT, global_time_step_unit, draw_randomly)
        self.horizontal_diffusivity = C.ADVECTIVE_HORIZONTAL_DIFFUSIVITY  # m^2/s
        self.advective_model_time_step_length_hours = C.ADVECTIVE_MODEL_TIME_STEP_LENGTH_HOURS
        # Diffusivity over one advective sub-step, in km^2.
        self.horizontal_diffusivity_km_sq_per_ad_time_step = (
            self.horizontal_diffusivity / (C.METRES_PER_KM * C.METRES_PER_KM)
            * C.SECONDS_IN_HOUR * self.advective_model_time_step_length_hours)

        days_per_model_step = convert_time_units(global_time_step_unit, "day")
        self.advection_time_steps_per_model_time_step = (
            days_per_model_step * C.HOURS_IN_DAY / self.advective_model_time_step_length_hours)
        # m/s -> km per model time step.
        self.velocity_unit_conversion = C.SECONDS_IN_DAY * days_per_model_step * self.delta_t / C.METRES_PER_KM

    def parameter_values(self):
        return {
            "TimeUnitImplementation": self.time_unit_implementation,
            "HorizontalDiffusivity": self.horizontal_diffusivity,
            "AdvectiveDispersalTemporalScaling": self.advection_time_steps_per_model_time_step,
            "VelocityUnitConversion": self.velocity_unit_conversion,
        }

    def rescale_dispersal_speed(self, dispersal_speed):
        """Current speed (m/s) to distance travelled in one advective sub-step (km)."""
        return dispersal_speed * self.velocity_unit_conversion / self.advection_time_steps_per_model_time_step

    def calculate_diffusion(self):
        """Random u and v displacements (km) from horizontal diffusion over one sub-step."""
        scale = math.sqrt(2.0 * self.horizontal_diffusivity_km_sq_per_ad_time_step)
        return self.random.normal() * scale, self.random.normal() * scale

    def _velocities(self, grid, location, current_month):
        u_speed, u_exists = grid.get_environment_layer("uVel", current_month, location[0], location[1])
        v_speed, v_exists = grid.get_environment_layer("vVel", current_month, location[0], location[1])
        if not (u_exists and v_exists):
            raise ConfigurationError("Advective dispersal needs 'uVel' and 'vVel' environment layers")
        if u_speed == C.MISSING_VALUE:
            u_speed = 0.0
        if v_speed == C.MISSING_VALUE:
            v_speed = 0.0
        return self.rescale_dispersal_speed(u_speed), self.rescale_dispersal_speed(v_speed)

    def run_dispersal(self, cell_index, grid, cohort, functional_group, cohort_index, current_month):
        exit_direction = None
        entry_direction = None
        present_location = (cell_index[0], cell_index[1])
        u_speed, v_speed = self._velocities(grid, present_location, current_month)

        for _ in range(math.ceil(self.advection_time_steps_per_model_time_step)):
            u_diffusion, v_diffusion = self.calculate_diffusion()
            dispersal = self.dispersal_probability(grid, present_location[0], present_location[1],
                                                   u_speed + u_diffusion, v_speed + v_diffusion)
            random_value = self.check_for_dispersal(dispersal.probability)
            if random_value is None:
                continue
            destination, exit_direction, attempted_entry = self.cell_to_disperse_to(
                grid, present_location[0], present_location[1], dispersal, random_value, exit_direction)
            if destination is not None:
                present_location = destination
                entry_direction = attempted_entry
                u_speed, v_speed = self._velocities(grid, present_location, current_month)

        if present_location != (cell_index[0], cell_index[1]):
            self.stage_dispersal(grid, cell_index, functional_group, cohort_index, present_location,
                                 exit_direction, entry_direction)
            return True
        return False
