#world.py

import math
import constants as C
from cohorts import Cohort, Stock
from dispersal import Dispersal
from eating import Eating, new_eating_deltas
from environment import Environment
from functional_groups import default_cohort_definitions, default_stock_definitions
from grid import ModelGrid
from random_source import RandomSource, seed_mode_from_flag
from time_manager import TimeManager
from utilities import convert_time_units, enforce_non_negative
import logger as log

class World:
    def __init__(self, cohort_definitions=None, stock_definitions=None, tracker=None,
                 draw_randomly=C.DRAW_RANDOMLY, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT):
        log.log("Creating a new World...")
        self.cohort_definitions = cohort_definitions or default_cohort_definitions()
        self.stock_definitions = stock_definitions or default_stock_definitions()
        self.tracker = tracker
        self.draw_randomly = draw_randomly
        self.global_time_step_unit = global_time_step_unit
        self.time_manager = TimeManager(global_time_step_unit)
        self.random = RandomSource(seed_mode_from_flag(draw_randomly))

        self.grid = ModelGrid(C.DEMO_BOTTOM_LATITUDE, C.DEMO_TOP_LATITUDE,
                              C.DEMO_LEFT_LONGITUDE, C.DEMO_RIGHT_LONGITUDE,
                              C.DEMO_CELL_SIZE_DEGREES, C.DEMO_CELL_SIZE_DEGREES,
                              self.cohort_definitions.number_of_groups,
                              self.stock_definitions.number_of_groups)
        self.environment = Environment()
        self.environment.build_layers(self.grid)

        self.dispersal = Dispersal(global_time_step_unit, draw_randomly)
        # Cell area only depends on latitude, so one eating model serves a whole row.
        self._eating_by_row = {}
        # Fraction of a month covered by one model time step, for monthly NPP.
        self.months_per_time_step = 1.0 / convert_time_units("month", global_time_step_unit)

        self.cohorts_dispersed_this_period = 0
        self.cohorts_extinct_this_period = 0
        log.log("World created. Cells are empty.")

    def eating_for_row(self, lat_index):
        if lat_index not in self._eating_by_row:
            self._eating_by_row[lat_index] = Eating(self.grid.cell_area_km2(lat_index, 0),
                                                    self.global_time_step_unit, self.draw_randomly)
        return self._eating_by_row[lat_index]

    # --- Population ---

    def _realm_name(self, lat_index, lon_index):
        return "marine" if self.grid.is_marine(lat_index, lon_index) else "terrestrial"

    def _new_cohort(self, fg):
        """A cohort with a log-uniform adult mass inside the group's mass range."""
        min_mass = self.cohort_definitions.get_biological_property("Minimum mass", fg)
        max_mass = self.cohort_definitions.get_biological_property("Maximum mass", fg)
        log_min, log_max = math.log(min_mass), math.log(max_mass)
        adult_mass = math.exp(log_min + self.random.uniform() * (log_max - log_min))
        juvenile_mass = max(min_mass, adult_mass / 10.0)
        mature = self.random.uniform() < 0.5
        log_optimal_ratio = math.log(max(0.01, self.random.normal(0.1, 0.02)))
        return Cohort(fg, juvenile_mass, adult_mass,
                      individual_body_mass=adult_mass if mature else juvenile_mass,
                      cohort_abundance=0.0,
                      log_optimal_prey_body_size_ratio=log_optimal_ratio,
                      birth_time_step=self.time_manager.current_time_step,
                      proportion_time_active=self.cohort_definitions.get_biological_property(
                          "Proportion suitable time active", fg),
                      maturity_time_step=self.time_manager.current_time_step if mature else None)

    def populate_world(self):
        log.log("Populating the grid with initial stocks and cohorts...")
        for ii, jj in self.grid.all_cells():
            realm = self._realm_name(ii, jj)
            area = self.grid.cell_area_km2(ii, jj)
            for fg in self.stock_definitions.get_functional_group_indices("Realm", realm):
                self.grid.add_stock(ii, jj, Stock(fg, C.DEMO_INITIAL_STOCK_BIOMASS_G_PER_KM2 * area))
            for fg in self.cohort_definitions.get_functional_group_indices("Realm", realm):
                for _ in range(C.DEMO_COHORTS_PER_GROUP):
                    cohort = self._new_cohort(fg)
                    cohort.cohort_abundance = C.DEMO_INITIAL_DENSITY_PER_KM2 * area / C.DEMO_COHORTS_PER_GROUP
                    self.grid.add_cohort(ii, jj, cohort)
        log.log(f"Population complete: {self.grid.total_cohort_count()} cohorts.")

    # --- Time step ---

    def _eat_in_cell(self, lat_index, lon_index, month):
        cohorts = self.grid.get_cell_cohorts(lat_index, lon_index)
        stocks = self.grid.get_cell_stocks(lat_index, lon_index)
        eating = self.eating_for_row(lat_index)
        context = eating.initialize_per_time_step(cohorts, stocks, self.cohort_definitions, self.stock_definitions)
        cell_environment = self.grid.cell_environment(lat_index, lon_index, month)

        # Cohorts are visited in the order they stood at the start of the step.
        acting_cohorts = [(fg, i) for fg, i, _ in cohorts.items()]
        for acting_cohort in acting_cohorts:
            cohort = cohorts[acting_cohort]
            if cohort.is_extinct:
                continue
            deltas = new_eating_deltas()
            eating.run(context, cohorts, stocks, acting_cohort, cell_environment, deltas,
                       self.cohort_definitions, self.tracker, self.time_manager.current_time_step)
            cohort.individual_body_mass = enforce_non_negative(
                cohort.individual_body_mass + sum(deltas["biomass"].values()),
                f"body mass of cohort {acting_cohort}")
            cohort.maximum_achieved_body_mass = max(cohort.maximum_achieved_body_mass, cohort.individual_body_mass)
            if cohort.maturity_time_step is None and cohort.individual_body_mass >= cohort.adult_mass:
                cohort.maturity_time_step = self.time_manager.current_time_step
            self.grid.organic_pool[lat_index, lon_index] += sum(deltas["organicpool"].values())

    def _grow_stocks(self):
        for ii, jj in self.grid.all_cells():
            npp, exists = self.grid.get_environment_layer("NPP", self.time_manager.current_month, ii, jj)
            if not exists:
                continue
            growth = npp * self.grid.cell_area_km2(ii, jj) * self.months_per_time_step
            for _, _, stock in self.grid.get_cell_stocks(ii, jj).items():
                stock.total_biomass += growth

    def _remove_extinct_cohorts(self):
        removed = 0
        for ii, jj in self.grid.all_cells():
            removed += self.grid.get_cell_cohorts(ii, jj).remove_where(lambda cohort: cohort.is_extinct)
        return removed

    def run_time_step(self):
        month = self.time_manager.current_month
        for ii, jj in self.grid.all_cells():
            self._eat_in_cell(ii, jj, month)
            self.dispersal.run_cell((ii, jj), self.grid, self.cohort_definitions, month)

        moved, _, _ = self.grid.commit_dispersal()
        self.cohorts_dispersed_this_period += moved
        self._grow_stocks()
        self.cohorts_extinct_this_period += self._remove_extinct_cohorts()
        self.time_manager.advance()
        self._print_population_statistics()

    def run(self, number_of_time_steps=C.DEMO_TIME_STEPS):
        log.log(f"Running {number_of_time_steps} time steps...")
        for _ in range(number_of_time_steps):
            self.run_time_step()
        log.log(f"Run complete. {self.time_manager.get_display_string()}")

    def _print_population_statistics(self):
        total_biomass = sum(cohort.individual_body_mass * cohort.cohort_abundance
                            for ii, jj in self.grid.all_cells()
                            for _, _, cohort in self.grid.get_cell_cohorts(ii, jj).items())
        log.log(f"Cohorts: {self.grid.total_cohort_count()} | Heterotroph biomass: {total_biomass:.3e} g | "
                f"Organic pool: {self.grid.organic_pool.sum():.3e} g | "
                f"Dispersed: {self.cohorts_dispersed_this_period} | Extinct: {self.cohorts_extinct_this_period}")
        self.cohorts_dispersed_this_period = 0
        self.cohorts_extinct_this_period = 0
