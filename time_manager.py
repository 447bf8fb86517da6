#time_manager.py

import constants as C
from utilities import convert_time_units

class TimeManager:
    def __init__(self, time_step_unit=C.GLOBAL_TIME_STEP_UNIT):
        self.time_step_unit = time_step_unit
        self.current_time_step = 0
        self.has_started = False
        # How many model time steps make up one month; monthly environment layers are
        # indexed by the month a time step falls in.
        self.time_steps_per_month = convert_time_units("month", time_step_unit)

    @property
    def current_month(self):
        """The month (0-11) the current time step falls in."""
        month = int(self.current_time_step / self.time_steps_per_month)
        return month % int(C.MONTHS_IN_YEAR)

    def advance(self):
        self.has_started = True
        self.current_time_step += 1

    def get_display_string(self):
        years = int(self.current_time_step / (self.time_steps_per_month * C.MONTHS_IN_YEAR))
        return f"Time step: {self.current_time_step} ({self.time_step_unit}), Year: {years}, Month: {self.current_month}"
