# predation.py

import math
import numpy as np
import constants as C
from diagnostics import safe_record
from random_source import RandomSource, seed_mode_from_flag
from utilities import convert_time_units, km2_to_hectares, enforce_non_negative, ConfigurationError


class PredationContext:
    """
    Working state for one grid cell and one time step, created by
    RevisedPredation.initialize_per_time_step.
    """
    def __init__(self, functional_groups_to_eat, cohort_counts, cohort_definitions,
                 planktonic, number_of_bins):
        self.functional_groups_to_eat = functional_groups_to_eat
        # Cohort counts at the start of the step. Cohorts created later in the step are
        # neither eaten nor given a slot in the working arrays.
        self.cohort_counts = cohort_counts
        self.cohort_definitions = cohort_definitions
        self.plankton_functional_groups = planktonic
        self.potential_abundance_eaten = [np.zeros(n) for n in cohort_counts]
        self.abundances_eaten = [np.zeros(n) for n in cohort_counts]
        # Prey density (individuals per hectare) by functional group and mass bin.
        self.binned_prey_densities = np.zeros((len(cohort_counts), number_of_bins))
        self.time_units_to_handle_potential_food_items = 0.0
        self.total_biomass_eaten_by_cohort = 0.0

        # Acting predator values, refreshed by each potential pass.
        self.body_mass_predator = 0.0
        self.abundance_predator = 0.0
        self.assimilation_efficiency = 0.0
        self.proportion_time_eating = 0.0
        self.specific_predator_kill_rate_constant = 0.0
        self.specific_predator_handling_time_scaling = 0.0
        self.predator_abundance_multiplied_by_time_eating = 0.0
        self.predator_log_optimal_prey_body_size_ratio = 0.0
        self.log_predator_mass_plus_log_optimal_ratio = 0.0
        self.diet_is_all_special = False
        self.potential_ready = False


class RevisedPredation:
    """
    Predation by one cohort on the heterotroph cohorts of its cell.

    Prey are placed in log-mass bins around the predator's optimal prey size; only prey
    in the open bin range (0, number_of_bins) can be eaten. The expected number of prey
    killed scales with a Gaussian preference on the log mass ratio and with the density
    of prey in the same bin and functional group. The eating pass shares the predator's
    time across all prey through the total handling time.
    """
    def __init__(self, cell_area_km2, global_time_step_unit=C.GLOBAL_TIME_STEP_UNIT,
                 draw_randomly=C.DRAW_RANDOMLY, clamp_negative=C.CLAMP_NEGATIVE_STATE,
                 mortality_tracking_sample_rate=C.MORTALITY_TRACKING_SAMPLE_RATE,
                 number_of_bins=C.PREDATION_NUMBER_OF_MASS_BINS,
                 feeding_preference_standard_deviation=C.PREDATION_FEEDING_PREFERENCE_STANDARD_DEVIATION):
        if number_of_bins <= 0 or number_of_bins % 2 != 0:
            raise ConfigurationError(f"The number of prey mass bins must be a positive even number, got {number_of_bins}")
        self.time_unit_implementation = C.PREDATION_TIME_UNIT
        self.handling_time_scalar_terrestrial = C.PREDATION_HANDLING_TIME_SCALAR_TERRESTRIAL
        self.handling_time_exponent_terrestrial = C.PREDATION_HANDLING_TIME_EXPONENT_TERRESTRIAL
        self.handling_time_scalar_marine = C.PREDATION_HANDLING_TIME_SCALAR_MARINE
        self.handling_time_exponent_marine = C.PREDATION_HANDLING_TIME_EXPONENT_MARINE
        self.reference_mass = C.PREDATION_HANDLING_TIME_REFERENCE_MASS
        self.kill_rate_constant = C.PREDATION_KILL_RATE_CONSTANT
        self.kill_rate_constant_mass_exponent = C.PREDATION_KILL_RATE_CONSTANT_MASS_EXPONENT
        self.feeding_preference_standard_deviation = feeding_preference_standard_deviation
        self.feeding_preference_half_standard_deviation = feeding_preference_standard_deviation * 0.5
        self.number_of_bins = number_of_bins
        self.half_number_of_bins = number_of_bins // 2
        self.clamp_negative = clamp_negative
        self.mortality_tracking_sample_rate = mortality_tracking_sample_rate

        self.delta_t = convert_time_units(global_time_step_unit, self.time_unit_implementation)
        self.cell_area = cell_area_km2
        self.cell_area_hectares = km2_to_hectares(cell_area_km2)
        self.random = RandomSource(seed_mode_from_flag(draw_randomly))

    def parameter_values(self):
        return {
            "TimeUnitImplementation": self.time_unit_implementation,
            "ReferenceMass_g": self.reference_mass,
            "HandlingTimeScalarTerrestrial": self.handling_time_scalar_terrestrial,
            "HandlingTimeExponentTerrestrial": self.handling_time_exponent_terrestrial,
            "HandlingTimeScalarMarine": self.handling_time_scalar_marine,
            "HandlingTimeExponentMarine": self.handling_time_exponent_marine,
            "KillRateConstant": self.kill_rate_constant,
            "KillRateConstantMassExponent": self.kill_rate_constant_mass_exponent,
            "FeedingPreferenceStandardDeviation": self.feeding_preference_standard_deviation,
            "NumberOfMassAggregationBins": self.number_of_bins,
        }

    # --- Bins ---

    def bin_number_fractional(self, prey_mass, log_predator_mass_plus_log_optimal_ratio):
        return (math.log(prey_mass) - log_predator_mass_plus_log_optimal_ratio) / self.feeding_preference_half_standard_deviation

    def bin_number(self, prey_mass, log_predator_mass_plus_log_optimal_ratio):
        """
        The mass bin of a prey individual. Bins at or beyond either end (<= 0 or
        >= number_of_bins) fall outside the predator's feeding window.
        """
        if prey_mass <= 0:
            return -1
        return math.floor(self.bin_number_fractional(prey_mass, log_predator_mass_plus_log_optimal_ratio)) + self.half_number_of_bins

    def is_valid_bin(self, bin_number):
        return 0 < bin_number < self.number_of_bins

    def populate_binned_prey_densities(self, context, cohorts):
        context.binned_prey_densities.fill(0.0)
        reference = context.log_predator_mass_plus_log_optimal_ratio
        for fg in context.functional_groups_to_eat:
            for i in range(context.cohort_counts[fg]):
                prey = cohorts[fg, i]
                bin_number = self.bin_number(prey.individual_body_mass, reference)
                if self.is_valid_bin(bin_number):
                    context.binned_prey_densities[fg, bin_number] += prey.cohort_abundance / self.cell_area_hectares

    # --- Allometric rates ---

    def relative_feeding_preference(self, prey_individual_mass, predator_individual_mass, log_optimal_ratio):
        distance = (math.log(prey_individual_mass / predator_individual_mass) - log_optimal_ratio) / self.feeding_preference_standard_deviation
        return math.exp(-(distance ** 2))

    def individual_killing_rate_per_hectare(self, context, prey_individual_mass, prey_mass_bin, prey_functional_group):
        preference = self.relative_feeding_preference(prey_individual_mass, context.body_mass_predator,
                                                      context.predator_log_optimal_prey_body_size_ratio)
        return (context.specific_predator_kill_rate_constant * preference
                * context.binned_prey_densities[prey_functional_group, prey_mass_bin])

    def expected_number_killed(self, context, prey_abundance, prey_individual_mass, prey_mass_bin, prey_functional_group):
        """Potential kills of this prey cohort by one predator individual per unit time."""
        alpha = self.individual_killing_rate_per_hectare(context, prey_individual_mass, prey_mass_bin, prey_functional_group)
        return alpha * prey_abundance / self.cell_area_hectares

    def handling_time(self, context, prey_individual_mass):
        return context.specific_predator_handling_time_scaling * prey_individual_mass

    def abundance_eaten(self, potential_kills, predator_abundance_multiplied_by_time_eating,
                        total_handling_time_plus_one, prey_abundance):
        """Realised kills from one prey cohort, bounded by the prey cohort's abundance."""
        return prey_abundance * (1.0 - math.exp(
            -(predator_abundance_multiplied_by_time_eating * ((potential_kills / total_handling_time_plus_one) / prey_abundance))))

    # --- Process ---

    def initialize_per_time_step(self, cohorts, stocks, cohort_definitions, stock_definitions):
        functional_groups_to_eat = cohort_definitions.get_functional_group_indices("Heterotroph/Autotroph", "heterotroph")
        number_of_groups = len(cohorts)
        planktonic = np.zeros(number_of_groups, dtype=bool)
        for fg in functional_groups_to_eat:
            planktonic[fg] = cohort_definitions.get_trait_value("Mobility", fg) == "planktonic"
        return PredationContext(functional_groups_to_eat, cohorts.counts(), cohort_definitions,
                                planktonic, self.number_of_bins)

    def _begin_potential(self, context, cohorts, acting_cohort, handling_time_scalar, handling_time_exponent):
        predator = cohorts[acting_cohort]
        context.total_biomass_eaten_by_cohort = 0.0
        context.time_units_to_handle_potential_food_items = 0.0
        context.body_mass_predator = predator.individual_body_mass
        context.abundance_predator = predator.cohort_abundance
        context.proportion_time_eating = predator.proportion_time_active
        context.assimilation_efficiency = context.cohort_definitions.get_biological_property(
            "carnivory assimilation", predator.functional_group_index)

        # Per-predator constants used for every prey cohort in this call.
        context.specific_predator_kill_rate_constant = (
            self.kill_rate_constant * context.body_mass_predator ** self.kill_rate_constant_mass_exponent)
        context.specific_predator_handling_time_scaling = (
            handling_time_scalar * (self.reference_mass / context.body_mass_predator) ** handling_time_exponent)
        context.predator_abundance_multiplied_by_time_eating = (
            context.abundance_predator * self.delta_t * context.proportion_time_eating)

        context.predator_log_optimal_prey_body_size_ratio = predator.log_optimal_prey_body_size_ratio
        context.diet_is_all_special = context.cohort_definitions.get_trait_value(
            "Diet", predator.functional_group_index) == "allspecial"
        if context.diet_is_all_special:
            # Filter feeders store an optimal prey body size, not a ratio.
            context.predator_log_optimal_prey_body_size_ratio = math.log(
                math.exp(predator.log_optimal_prey_body_size_ratio) / predator.individual_body_mass)
        context.log_predator_mass_plus_log_optimal_ratio = (
            math.log(context.body_mass_predator) + context.predator_log_optimal_prey_body_size_ratio)

        for fg in range(len(context.cohort_counts)):
            context.potential_abundance_eaten[fg].fill(0.0)
            context.abundances_eaten[fg].fill(0.0)
        self.populate_binned_prey_densities(context, cohorts)

    def _fill_potential(self, context, cohorts, acting_cohort):
        reference = context.log_predator_mass_plus_log_optimal_ratio
        for fg in context.functional_groups_to_eat:
            # Filter feeders only eat planktonic groups.
            if context.diet_is_all_special and not context.plankton_functional_groups[fg]:
                continue
            for i in range(context.cohort_counts[fg]):
                prey = cohorts[fg, i]
                prey_mass = prey.individual_body_mass
                bin_number = self.bin_number(prey_mass, reference)
                if self.is_valid_bin(bin_number) and prey_mass > 0:
                    potential = self.expected_number_killed(context, prey.cohort_abundance, prey_mass, bin_number, fg)
                    context.potential_abundance_eaten[fg][i] = potential
                    context.time_units_to_handle_potential_food_items += potential * self.handling_time(context, prey_mass)

        # No cannibalism: remove the predator's own entry after the totals are built.
        own_fg, own_index = acting_cohort
        if own_index < context.cohort_counts[own_fg]:
            context.time_units_to_handle_potential_food_items -= (
                context.potential_abundance_eaten[own_fg][own_index] * self.handling_time(context, context.body_mass_predator))
            context.potential_abundance_eaten[own_fg][own_index] = 0.0
        context.potential_ready = True

    def get_eating_potential_terrestrial(self, context, cohorts, stocks, acting_cohort, cell_environment):
        self._begin_potential(context, cohorts, acting_cohort,
                              self.handling_time_scalar_terrestrial, self.handling_time_exponent_terrestrial)
        self._fill_potential(context, cohorts, acting_cohort)

    def get_eating_potential_marine(self, context, cohorts, stocks, acting_cohort, cell_environment):
        self._begin_potential(context, cohorts, acting_cohort,
                              self.handling_time_scalar_marine, self.handling_time_exponent_marine)
        self._fill_potential(context, cohorts, acting_cohort)

    def run_eating(self, context, cohorts, stocks, acting_cohort, cell_environment, deltas,
                   tracker=None, current_time_step=0):
        if not context.potential_ready:
            raise RuntimeError("Predation potential must be calculated before eating is run")
        context.potential_ready = False

        track = False
        if tracker is not None and tracker.track_processes:
            track = self.random.uniform() > 1.0 - self.mortality_tracking_sample_rate

        predator = cohorts[acting_cohort]
        marine_cell = cell_environment["Realm"] == C.REALM_MARINE
        total_handling_time_plus_one = context.time_units_to_handle_potential_food_items + 1
        mass_eaten_per_predator = 0.0

        for fg in context.functional_groups_to_eat:
            for i in range(context.cohort_counts[fg]):
                prey = cohorts[fg, i]
                prey_mass = prey.individual_body_mass
                if prey.cohort_abundance > 0:
                    eaten = self.abundance_eaten(context.potential_abundance_eaten[fg][i],
                                                 context.predator_abundance_multiplied_by_time_eating,
                                                 total_handling_time_plus_one, prey.cohort_abundance)
                else:
                    eaten = 0.0
                context.abundances_eaten[fg][i] = eaten

                prey.cohort_abundance = enforce_non_negative(
                    prey.cohort_abundance - eaten, f"prey abundance (fg {fg}, index {i})", self.clamp_negative)
                prey_total_mass = prey_mass + prey.individual_reproductive_potential_mass
                predator.trophic_index += prey_total_mass * eaten * prey.trophic_index

                if track and eaten > 0:
                    self._record(tracker, context, cell_environment, current_time_step, predator, prey,
                                 eaten, marine_cell)

                if context.abundance_predator > 0:
                    mass_eaten_per_predator += prey_total_mass * eaten / context.abundance_predator

        deltas["biomass"]["predation"] = mass_eaten_per_predator * context.assimilation_efficiency
        deltas["organicpool"]["predation"] = (
            mass_eaten_per_predator * (1 - context.assimilation_efficiency) * context.abundance_predator)
        context.total_biomass_eaten_by_cohort = deltas["biomass"]["predation"] * context.abundance_predator

    def _record(self, tracker, context, cell_environment, current_time_step, predator, prey, eaten, marine_cell):
        lat_index = cell_environment["LatIndex"]
        lon_index = cell_environment["LonIndex"]
        # Only cohorts that have never been merged carry a single identity worth tracking.
        if tracker.output_detail == "high" and len(prey.cohort_ids) == 1:
            safe_record(tracker, "record_mortality", lat_index, lon_index, prey.birth_time_step, current_time_step,
                        prey.individual_body_mass, prey.adult_mass, prey.functional_group_index,
                        prey.cohort_ids[0], eaten, "predation")
        if tracker.specific_locations:
            safe_record(tracker, "record_predation_mass_flow", current_time_step, prey.individual_body_mass,
                        context.body_mass_predator, prey.individual_body_mass * eaten)
            if tracker.output_detail == "high":
                prey_is_plankton = bool(context.plankton_functional_groups[prey.functional_group_index]) or (
                    marine_cell and prey.individual_body_mass <= C.PLANKTON_DISPERSAL_THRESHOLD)
                safe_record(tracker, "track_predation_trophic_flow", lat_index, lon_index,
                            prey.functional_group_index, predator.functional_group_index,
                            eaten * prey.individual_body_mass, context.body_mass_predator,
                            prey.individual_body_mass, marine_cell, prey_is_plankton)
