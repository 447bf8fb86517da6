# herbivory.py

import math
import numpy as np
import constants as C
from diagnostics import safe_record
from utilities import convert_time_units, km2_to_hectares, enforce_non_negative
import logger as log


class HerbivoryContext:
    """
    Working state for one grid cell and one time step. Only RevisedHerbivory creates
    these, so holding one means initialize_per_time_step has run for the cell.
    """
    def __init__(self, functional_groups_to_eat, stock_counts, cohort_definitions):
        self.functional_groups_to_eat = functional_groups_to_eat
        # Stock counts at the start of the step; the working arrays keep this shape.
        self.stock_counts = stock_counts
        self.cohort_definitions = cohort_definitions
        self.potential_biomass_eaten = [np.zeros(n) for n in stock_counts]
        self.biomass_eaten = [np.zeros(n) for n in stock_counts]
        self.time_units_to_handle_potential_food_items = 0.0
        self.total_biomass_eaten_by_cohort = 0.0
        self.body_mass_herbivore = 0.0
        self.assimilation_efficiency = 0.0
        self.proportion_time_eating = 0.0
        self.potential_ready = False


class RevisedHerbivory:
    """
    Herbivory of one cohort on the autotroph stocks of its cell. The potential pass
    computes how much each stock could supply to an individual herbivore, the eating
    pass shares the herbivore's time between all stocks through the total handling time.
    """
    def __init__(self, cell_area_km2, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT,
                 clamp_negative=C.CLAMP_NEGATIVE_STATE):
        self.time_unit_implementation = C.HERBIVORY_TIME_UNIT
        self.handling_time_scalar_terrestrial = C.HERBIVORY_HANDLING_TIME_SCALAR_TERRESTRIAL
        self.handling_time_scalar_marine = C.HERBIVORY_HANDLING_TIME_SCALAR_MARINE
        self.handling_time_exponent_terrestrial = C.HERBIVORY_HANDLING_TIME_EXPONENT_TERRESTRIAL
        self.handling_time_exponent_marine = C.HERBIVORY_HANDLING_TIME_EXPONENT_MARINE
        self.reference_mass = C.HERBIVORY_HANDLING_TIME_REFERENCE_MASS
        self.herbivory_rate_constant = C.HERBIVORY_RATE_CONSTANT
        self.herbivory_rate_mass_exponent = C.HERBIVORY_RATE_MASS_EXPONENT
        self.attack_rate_exponent_terrestrial = C.HERBIVORY_ATTACK_RATE_EXPONENT_TERRESTRIAL
        self.attack_rate_exponent_marine = C.HERBIVORY_ATTACK_RATE_EXPONENT_MARINE
        self.clamp_negative = clamp_negative

        # Number of herbivory time units in one model time step.
        self.delta_t = convert_time_units(global_time_step_unit, self.time_unit_implementation)
        self.cell_area = cell_area_km2
        self.cell_area_hectares = km2_to_hectares(cell_area_km2)

    def parameter_values(self):
        return {
            "TimeUnitImplementation": self.time_unit_implementation,
            "ReferenceMass_g": self.reference_mass,
            "HandlingTimeScalarTerrestrial": self.handling_time_scalar_terrestrial,
            "HandlingTimeScalarMarine": self.handling_time_scalar_marine,
            "HandlingTimeExponentTerrestrial": self.handling_time_exponent_terrestrial,
            "HandlingTimeExponentMarine": self.handling_time_exponent_marine,
            "HerbivoryRateConstant": self.herbivory_rate_constant,
            "HerbivoryRateMassExponent": self.herbivory_rate_mass_exponent,
            "AttackRateExponentTerrestrial": self.attack_rate_exponent_terrestrial,
            "AttackRateExponentMarine": self.attack_rate_exponent_marine,
        }

    # --- Allometric rates ---

    def individual_herbivory_rate_per_hectare(self, herbivore_individual_mass):
        return self.herbivory_rate_constant * herbivore_individual_mass ** self.herbivory_rate_mass_exponent

    def potential_biomass_eaten_terrestrial(self, autotroph_biomass, herbivore_individual_mass):
        density = autotroph_biomass / self.cell_area_hectares
        return (self.individual_herbivory_rate_per_hectare(herbivore_individual_mass)
                * density ** self.attack_rate_exponent_terrestrial)

    def potential_biomass_eaten_marine(self, autotroph_biomass, herbivore_individual_mass):
        density = autotroph_biomass / self.cell_area_hectares
        return (self.individual_herbivory_rate_per_hectare(herbivore_individual_mass)
                * density ** self.attack_rate_exponent_marine)

    def handling_time_terrestrial(self, herbivore_individual_mass):
        return (self.handling_time_scalar_terrestrial
                * (self.reference_mass / herbivore_individual_mass) ** self.handling_time_exponent_terrestrial)

    def handling_time_marine(self, herbivore_individual_mass):
        return (self.handling_time_scalar_marine
                * (self.reference_mass / herbivore_individual_mass) ** self.handling_time_exponent_marine)

    def biomass_eaten(self, context, potential_biomass_eaten, total_handling_time, herbivore_abundance, autotroph_biomass):
        """
        Realised intake from one stock. The instantaneous eating rate is shared through
        the total handling time and integrated over the time spent eating, so no more
        than the available edible biomass can be removed.
        """
        if autotroph_biomass <= 0.0:
            return 0.0
        instant_fraction_eaten = herbivore_abundance * ((potential_biomass_eaten / (1 + total_handling_time)) / autotroph_biomass)
        return autotroph_biomass * (1 - math.exp(-instant_fraction_eaten * self.delta_t * context.proportion_time_eating))

    # --- Process ---

    def initialize_per_time_step(self, cohorts, stocks, cohort_definitions, stock_definitions):
        """Caches the edible stock groups and freezes the working array shapes for this step."""
        functional_groups_to_eat = stock_definitions.get_functional_group_indices("Heterotroph/Autotroph", "autotroph")
        return HerbivoryContext(functional_groups_to_eat, stocks.counts(), cohort_definitions)

    def _begin_potential(self, context, cohorts, acting_cohort):
        herbivore = cohorts[acting_cohort]
        context.total_biomass_eaten_by_cohort = 0.0
        context.time_units_to_handle_potential_food_items = 0.0
        context.body_mass_herbivore = herbivore.individual_body_mass
        context.proportion_time_eating = herbivore.proportion_time_active
        context.assimilation_efficiency = context.cohort_definitions.get_biological_property(
            "herbivory assimilation", herbivore.functional_group_index)
        for fg in range(len(context.stock_counts)):
            context.potential_biomass_eaten[fg].fill(0.0)
            context.biomass_eaten[fg].fill(0.0)

    def get_eating_potential_terrestrial(self, context, cohorts, stocks, acting_cohort, cell_environment):
        self._begin_potential(context, cohorts, acting_cohort)
        handling_time = self.handling_time_terrestrial(context.body_mass_herbivore)
        for fg in context.functional_groups_to_eat:
            for i in range(context.stock_counts[fg]):
                edible_mass = stocks[fg, i].total_biomass * C.TERRESTRIAL_EDIBLE_FRACTION
                potential = self.potential_biomass_eaten_terrestrial(edible_mass, context.body_mass_herbivore)
                context.potential_biomass_eaten[fg][i] = potential
                context.time_units_to_handle_potential_food_items += potential * handling_time
        context.potential_ready = True

    def get_eating_potential_marine(self, context, cohorts, stocks, acting_cohort, cell_environment):
        self._begin_potential(context, cohorts, acting_cohort)
        handling_time = self.handling_time_marine(context.body_mass_herbivore)
        for fg in context.functional_groups_to_eat:
            for i in range(context.stock_counts[fg]):
                edible_mass = stocks[fg, i].total_biomass * C.MARINE_EDIBLE_FRACTION
                potential = self.potential_biomass_eaten_marine(edible_mass, context.body_mass_herbivore)
                context.potential_biomass_eaten[fg][i] = potential
                context.time_units_to_handle_potential_food_items += potential * handling_time
        context.potential_ready = True

    def run_eating(self, context, cohorts, stocks, acting_cohort, cell_environment, deltas,
                   tracker=None, current_time_step=0):
        if not context.potential_ready:
            raise RuntimeError("Herbivory potential must be calculated before eating is run")
        context.potential_ready = False

        herbivore = cohorts[acting_cohort]
        abundance = herbivore.cohort_abundance
        realm = cell_environment["Realm"]
        edible_scaling = C.MARINE_EDIBLE_FRACTION if realm == C.REALM_MARINE else C.TERRESTRIAL_EDIBLE_FRACTION
        tracking = tracker is not None and tracker.track_processes and tracker.specific_locations
        ae = context.assimilation_efficiency

        for fg in context.functional_groups_to_eat:
            for i in range(context.stock_counts[fg]):
                stock = stocks[fg, i]
                edible_mass = stock.total_biomass * edible_scaling
                eaten = self.biomass_eaten(context, context.potential_biomass_eaten[fg][i],
                                           context.time_units_to_handle_potential_food_items, abundance, edible_mass)
                context.biomass_eaten[fg][i] = eaten

                # Autotrophs have a trophic index of one, so the eaten mass is the weight.
                herbivore.trophic_index += eaten
                stock.total_biomass = enforce_non_negative(
                    stock.total_biomass - eaten, f"stock biomass (fg {fg}, index {i})", self.clamp_negative)

                if tracking:
                    safe_record(tracker, "record_herbivory_mass_flow", current_time_step,
                                context.body_mass_herbivore, eaten)
                    if tracker.output_detail == "high":
                        safe_record(tracker, "track_herbivory_trophic_flow",
                                    cell_environment["LatIndex"], cell_environment["LonIndex"],
                                    herbivore.functional_group_index, eaten, context.body_mass_herbivore,
                                    realm == C.REALM_MARINE)

                if abundance > 0:
                    deltas["biomass"]["herbivory"] += eaten * ae / abundance
                deltas["organicpool"]["herbivory"] += eaten * (1 - ae)

        context.total_biomass_eaten_by_cohort = deltas["biomass"]["herbivory"] * abundance
        if context.total_biomass_eaten_by_cohort < 0:
            log.log(f"WARNING: herbivory gave a negative biomass delta for cohort {acting_cohort}.")
