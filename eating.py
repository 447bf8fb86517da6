# eating.py

import math
import constants as C
from herbivory import RevisedHerbivory
from predation import RevisedPredation
from utilities import ConfigurationError
import logger as log


def new_eating_deltas():
    """The per-cohort delta accumulator the eating engines add to."""
    return {
        "biomass": {"herbivory": 0.0, "predation": 0.0},
        "organicpool": {"herbivory": 0.0, "predation": 0.0},
    }


class EatingContext:
    """Both engines' working state for one cell and one time step."""
    def __init__(self, herbivory, predation):
        self.herbivory = herbivory
        self.predation = predation


class Eating:
    """
    Runs the eating engines for one acting cohort, choosing them from the cohort's
    nutrition source, and updates the cohort's trophic index from what it ate.
    """
    def __init__(self, cell_area_km2, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT,
                 draw_randomly=C.DRAW_RANDOMLY, clamp_negative=C.CLAMP_NEGATIVE_STATE):
        self.herbivory = RevisedHerbivory(cell_area_km2, global_time_step_unit, clamp_negative=clamp_negative)
        self.predation = RevisedPredation(cell_area_km2, global_time_step_unit, draw_randomly=draw_randomly,
                                          clamp_negative=clamp_negative)
        log.log(f"Eating set up for a cell of {cell_area_km2:.1f} km^2. "
                f"Herbivory: {self.herbivory.parameter_values()} Predation: {self.predation.parameter_values()}")

    def initialize_per_time_step(self, cohorts, stocks, cohort_definitions, stock_definitions):
        return EatingContext(
            self.herbivory.initialize_per_time_step(cohorts, stocks, cohort_definitions, stock_definitions),
            self.predation.initialize_per_time_step(cohorts, stocks, cohort_definitions, stock_definitions))

    def _potential(self, engine, engine_context, cohorts, stocks, acting_cohort, cell_environment):
        if cell_environment["Realm"] == C.REALM_MARINE:
            engine.get_eating_potential_marine(engine_context, cohorts, stocks, acting_cohort, cell_environment)
        else:
            engine.get_eating_potential_terrestrial(engine_context, cohorts, stocks, acting_cohort, cell_environment)

    def run(self, context, cohorts, stocks, acting_cohort, cell_environment, deltas, cohort_definitions,
            tracker=None, current_time_step=0):
        cohort = cohorts[acting_cohort]
        previous_trophic_index = cohort.trophic_index
        # The trophic index is rebuilt from this step's meals.
        cohort.trophic_index = 0.0

        nutrition_source = cohort_definitions.get_trait_value("Nutrition source", cohort.functional_group_index)
        if nutrition_source == "herbivore":
            self._potential(self.herbivory, context.herbivory, cohorts, stocks, acting_cohort, cell_environment)
            self.herbivory.run_eating(context.herbivory, cohorts, stocks, acting_cohort, cell_environment, deltas,
                                      tracker, current_time_step)
        elif nutrition_source == "carnivore":
            self._potential(self.predation, context.predation, cohorts, stocks, acting_cohort, cell_environment)
            self.predation.run_eating(context.predation, cohorts, stocks, acting_cohort, cell_environment, deltas,
                                      tracker, current_time_step)
        elif nutrition_source == "omnivore":
            self._potential(self.herbivory, context.herbivory, cohorts, stocks, acting_cohort, cell_environment)
            self._potential(self.predation, context.predation, cohorts, stocks, acting_cohort, cell_environment)
            # An omnivore has one time budget for plants and prey together.
            total_time_to_eat = (context.herbivory.time_units_to_handle_potential_food_items
                                 + context.predation.time_units_to_handle_potential_food_items)
            context.herbivory.time_units_to_handle_potential_food_items = total_time_to_eat
            context.predation.time_units_to_handle_potential_food_items = total_time_to_eat
            self.predation.run_eating(context.predation, cohorts, stocks, acting_cohort, cell_environment, deltas,
                                      tracker, current_time_step)
            self.herbivory.run_eating(context.herbivory, cohorts, stocks, acting_cohort, cell_environment, deltas,
                                      tracker, current_time_step)
        else:
            cohort.trophic_index = previous_trophic_index
            raise ConfigurationError(f"No eating model for nutrition source '{nutrition_source}'")

        if math.isnan(deltas["biomass"]["predation"]) or math.isnan(deltas["biomass"]["herbivory"]):
            raise ArithmeticError(f"Eating produced a NaN biomass delta for cohort {acting_cohort}")

        fg = cohort.functional_group_index
        carnivory_ae = cohort_definitions.get_biological_property("carnivory assimilation", fg)
        herbivory_ae = cohort_definitions.get_biological_property("herbivory assimilation", fg)
        biomass_eaten = 0.0
        if carnivory_ae > 0:
            biomass_eaten += deltas["biomass"]["predation"] / carnivory_ae
        if herbivory_ae > 0:
            biomass_eaten += deltas["biomass"]["herbivory"] / herbivory_ae

        if biomass_eaten > 0.0:
            cohort.trophic_index = 1 + cohort.trophic_index / (biomass_eaten * cohort.cohort_abundance)
        else:
            cohort.trophic_index = previous_trophic_index
