# diagnostics.py

import constants as C
from utilities import ConfigurationError
import logger as log


def safe_record(tracker, method_name, *args):
    """
    Calls a recording method on a tracker. Trackers are fire-and-forget: a failure is
    logged and dropped so it never reaches the eating or dispersal code.
    """
    if tracker is None:
        return
    try:
        getattr(tracker, method_name)(*args)
    except Exception as exc:
        log.log(f"WARNING: tracker call '{method_name}' failed and was dropped: {exc!r}")


class NullTracker:
    """A tracker that records nothing."""
    track_processes = False
    specific_locations = False
    output_detail = "low"

    def record_mortality(self, lat_index, lon_index, birth_time_step, time_step, current_mass,
                         adult_mass, functional_group, cohort_id, number_died, mortality_source):
        pass

    def record_predation_mass_flow(self, time_step, prey_body_mass, predator_body_mass, mass_flow):
        pass

    def record_herbivory_mass_flow(self, time_step, herbivore_body_mass, mass_flow):
        pass

    def track_predation_trophic_flow(self, lat_index, lon_index, from_functional_group, to_functional_group,
                                     mass_eaten, predator_body_mass, prey_body_mass, marine_cell, prey_is_plankton):
        pass

    def track_herbivory_trophic_flow(self, lat_index, lon_index, to_functional_group, mass_eaten,
                                     herbivore_body_mass, marine_cell):
        pass


class ProcessTracker(NullTracker):
    """Keeps eating records in memory so they can be inspected after a run."""
    def __init__(self, track_processes=True, specific_locations=C.SPECIFIC_LOCATIONS, output_detail=C.OUTPUT_DETAIL):
        if output_detail not in C.OUTPUT_DETAIL_LEVELS:
            raise ConfigurationError(f"Invalid output detail level '{output_detail}'; "
                                     f"expected one of {C.OUTPUT_DETAIL_LEVELS}")
        self.track_processes = track_processes
        self.specific_locations = specific_locations
        self.output_detail = output_detail
        self.mortality = []
        self.predation_mass_flows = []
        self.herbivory_mass_flows = []
        self.predation_trophic_flows = []
        self.herbivory_trophic_flows = []

    def record_mortality(self, lat_index, lon_index, birth_time_step, time_step, current_mass,
                         adult_mass, functional_group, cohort_id, number_died, mortality_source):
        self.mortality.append({
            "lat_index": lat_index, "lon_index": lon_index,
            "birth_time_step": birth_time_step, "time_step": time_step,
            "current_mass": current_mass, "adult_mass": adult_mass,
            "functional_group": functional_group, "cohort_id": cohort_id,
            "number_died": number_died, "source": mortality_source,
        })

    def record_predation_mass_flow(self, time_step, prey_body_mass, predator_body_mass, mass_flow):
        self.predation_mass_flows.append((time_step, prey_body_mass, predator_body_mass, mass_flow))

    def record_herbivory_mass_flow(self, time_step, herbivore_body_mass, mass_flow):
        self.herbivory_mass_flows.append((time_step, herbivore_body_mass, mass_flow))

    def track_predation_trophic_flow(self, lat_index, lon_index, from_functional_group, to_functional_group,
                                     mass_eaten, predator_body_mass, prey_body_mass, marine_cell, prey_is_plankton):
        self.predation_trophic_flows.append({
            "cell": (lat_index, lon_index), "from": from_functional_group, "to": to_functional_group,
            "mass_eaten": mass_eaten, "predator_mass": predator_body_mass, "prey_mass": prey_body_mass,
            "marine": marine_cell, "prey_is_plankton": prey_is_plankton,
        })

    def track_herbivory_trophic_flow(self, lat_index, lon_index, to_functional_group, mass_eaten,
                                     herbivore_body_mass, marine_cell):
        self.herbivory_trophic_flows.append({
            "cell": (lat_index, lon_index), "to": to_functional_group, "mass_eaten": mass_eaten,
            "herbivore_mass": herbivore_body_mass, "marine": marine_cell,
        })

    def summary(self):
        return (f"{len(self.mortality)} mortality records, "
                f"{len(self.predation_mass_flows)} predation flows, "
                f"{len(self.herbivory_mass_flows)} herbivory flows")
