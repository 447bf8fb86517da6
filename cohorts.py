# cohorts.py

import itertools

_next_cohort_id = itertools.count()


def next_cohort_id():
    return next(_next_cohort_id)


class Cohort:
    """A group of same-functional-group individuals sharing a body mass trajectory."""
    def __init__(self, functional_group_index, juvenile_mass, adult_mass, individual_body_mass,
                 cohort_abundance, log_optimal_prey_body_size_ratio, birth_time_step=0,
                 proportion_time_active=0.5, trophic_index=1.0, maturity_time_step=None,
                 individual_reproductive_potential_mass=0.0, cohort_id=None):
        self.functional_group_index = functional_group_index
        self.juvenile_mass = juvenile_mass  # grams (g)
        self.adult_mass = adult_mass  # grams (g)
        self.individual_body_mass = individual_body_mass  # grams (g)
        self.individual_reproductive_potential_mass = individual_reproductive_potential_mass  # grams (g)
        self.maximum_achieved_body_mass = individual_body_mass  # grams (g)
        self.cohort_abundance = cohort_abundance  # individuals
        self.birth_time_step = birth_time_step
        # None until the cohort first reaches adult mass.
        self.maturity_time_step = maturity_time_step
        # Centre of the predator's prey preference, stored as log(prey mass / predator mass).
        self.log_optimal_prey_body_size_ratio = log_optimal_prey_body_size_ratio
        self.trophic_index = trophic_index
        self.proportion_time_active = proportion_time_active
        # Cohorts that have been merged into this one keep all contributing IDs.
        self.cohort_ids = [next_cohort_id() if cohort_id is None else cohort_id]

    @property
    def is_mature(self):
        return self.maturity_time_step is not None

    @property
    def is_extinct(self):
        return self.cohort_abundance <= 0 or self.individual_body_mass <= 0

    def __repr__(self):
        return (f"Cohort(fg={self.functional_group_index}, mass={self.individual_body_mass:.4g}g, "
                f"abundance={self.cohort_abundance:.4g})")


class Stock:
    """An autotroph biomass pool of one functional group in one grid cell."""
    def __init__(self, functional_group_index, total_biomass, individual_body_mass=1.0):
        self.functional_group_index = functional_group_index
        self.individual_body_mass = individual_body_mass
        self.total_biomass = total_biomass  # grams (g) in the whole cell

    def __repr__(self):
        return f"Stock(fg={self.functional_group_index}, biomass={self.total_biomass:.4g}g)"


class GroupedCollection:
    """
    A fixed number of slots, one per functional group, each holding a growable list.
    Items are addressed as collection[fg] (the whole group) or collection[fg, i].
    """
    def __init__(self, number_of_groups):
        self._groups = [[] for _ in range(number_of_groups)]

    def __len__(self):
        return len(self._groups)

    def __getitem__(self, key):
        if isinstance(key, tuple):
            fg, i = key
            return self._groups[fg][i]
        return self._groups[key]

    def __iter__(self):
        return iter(self._groups)

    def add(self, functional_group, item):
        self._groups[functional_group].append(item)
        return len(self._groups[functional_group]) - 1

    def counts(self):
        """Number of items in each group, in group order."""
        return [len(group) for group in self._groups]

    def total_count(self):
        return sum(self.counts())

    def items(self):
        """Yields (fg, index, item) for every item, in group order."""
        for fg, group in enumerate(self._groups):
            for i, item in enumerate(group):
                yield fg, i, item

    def remove_indices(self, functional_group, indices):
        """Removes several items from one group without shifting the ones still to remove."""
        group = self._groups[functional_group]
        for i in sorted(set(indices), reverse=True):
            del group[i]

    def remove_where(self, predicate):
        removed = 0
        for fg, group in enumerate(self._groups):
            keep = [item for item in group if not predicate(item)]
            removed += len(group) - len(keep)
            self._groups[fg] = keep
        return removed
