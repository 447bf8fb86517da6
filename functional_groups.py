# functional_groups.py

from utilities import ConfigurationError


class FunctionalGroupDefinitions:
    """
    Lookup tables between functional group indices and their categorical traits
    (nutrition source, diet, mobility, realm, ...) and numeric properties
    (assimilation efficiencies, mass ranges, ...).

    `definitions` is a list with one dict per functional group, in index order. Keys
    mapping to strings are traits, keys mapping to numbers are biological properties.
    All names and trait values are stored lower-cased.
    """
    def __init__(self, definitions):
        self.number_of_groups = len(definitions)
        self._traits = {}        # trait name -> list of values, one per group
        self._properties = {}    # property name -> list of floats, one per group
        self._index_lookup = {}  # trait name -> {trait value -> [group indices]}

        for fg, definition in enumerate(definitions):
            for name, value in definition.items():
                key = name.lower()
                if isinstance(value, str):
                    self._traits.setdefault(key, [None] * self.number_of_groups)[fg] = value.lower()
                else:
                    self._properties.setdefault(key, [0.0] * self.number_of_groups)[fg] = float(value)

        for trait, values in self._traits.items():
            lookup = {}
            for fg, value in enumerate(values):
                if value is not None:
                    lookup.setdefault(value, []).append(fg)
            self._index_lookup[trait] = lookup

    def _trait_lookup(self, trait_name):
        lookup = self._index_lookup.get(trait_name.lower())
        if lookup is None:
            raise ConfigurationError(f"Trait '{trait_name}' not found in the functional group definitions")
        return lookup

    def get_functional_group_indices(self, trait_names, trait_values, intersection=False):
        """
        Returns the sorted indices of functional groups having the given trait value.

        Several trait/value pairs can be passed as parallel sequences, in which case the
        result is the intersection (intersection=True) or union of the matches. An
        unknown trait name is a configuration error; a trait value no group has gives an
        empty list.
        """
        if isinstance(trait_names, str):
            return list(self._trait_lookup(trait_names).get(trait_values.lower(), []))

        if len(trait_names) != len(trait_values):
            raise ConfigurationError("Unequal numbers of traits and trait values to search for")
        matches = [set(self._trait_lookup(name).get(value.lower(), []))
                   for name, value in zip(trait_names, trait_values)]
        if not matches:
            return []
        combined = set.intersection(*matches) if intersection else set.union(*matches)
        return sorted(combined)

    def get_trait_value(self, trait_name, functional_group):
        values = self._traits.get(trait_name.lower())
        if values is None:
            raise ConfigurationError(f"Trait '{trait_name}' not found in the functional group definitions")
        return values[functional_group]

    def get_biological_property(self, property_name, functional_group):
        values = self._properties.get(property_name.lower())
        if values is None:
            raise ConfigurationError(f"Property '{property_name}' not found in the functional group definitions")
        return values[functional_group]

    def get_unique_trait_values(self, trait_name):
        return sorted(self._trait_lookup(trait_name).keys())


def _cohort_group(realm, nutrition, thermy, mobility="mobile", diet="all",
                  herbivory_ae=0.0, carnivory_ae=0.0, min_mass=1.0, max_mass=1.0e5, time_active=0.5):
    return {
        "Heterotroph/Autotroph": "heterotroph",
        "Nutrition source": nutrition,
        "Diet": diet,
        "Realm": realm,
        "Mobility": mobility,
        "Endo/Ectotherm": thermy,
        "Reproductive strategy": "iteroparity",
        "Herbivory assimilation": herbivory_ae,
        "Carnivory assimilation": carnivory_ae,
        "Minimum mass": min_mass,
        "Maximum mass": max_mass,
        "Proportion suitable time active": time_active,
    }


def default_cohort_definitions():
    """A compact version of the standard heterotroph functional group set."""
    return FunctionalGroupDefinitions([
        _cohort_group("terrestrial", "herbivore", "endotherm", herbivory_ae=0.5, min_mass=1.5, max_mass=4.5e6),
        _cohort_group("terrestrial", "carnivore", "endotherm", carnivory_ae=0.8, min_mass=1.5, max_mass=7.0e5),
        _cohort_group("terrestrial", "omnivore", "endotherm", herbivory_ae=0.4, carnivory_ae=0.64,
                      min_mass=1.5, max_mass=3.0e5),
        _cohort_group("terrestrial", "herbivore", "ectotherm", herbivory_ae=0.5, min_mass=0.4, max_mass=5.0e5),
        _cohort_group("terrestrial", "carnivore", "ectotherm", carnivory_ae=0.8, min_mass=0.4, max_mass=1.0e6),
        _cohort_group("marine", "herbivore", "ectotherm", mobility="planktonic", herbivory_ae=0.7,
                      min_mass=1.0e-5, max_mass=0.01),
        _cohort_group("marine", "carnivore", "ectotherm", carnivory_ae=0.8, min_mass=0.01, max_mass=5.0e6),
        _cohort_group("marine", "omnivore", "ectotherm", herbivory_ae=0.4, carnivory_ae=0.64,
                      min_mass=0.01, max_mass=1.0e5),
        _cohort_group("marine", "carnivore", "endotherm", diet="allspecial", carnivory_ae=0.8,
                      min_mass=1.0e5, max_mass=1.5e8),
    ])


def default_stock_definitions():
    return FunctionalGroupDefinitions([
        {"Heterotroph/Autotroph": "autotroph", "Realm": "terrestrial", "Leaf strategy": "deciduous",
         "Individual mass": 1.0},
        {"Heterotroph/Autotroph": "autotroph", "Realm": "terrestrial", "Leaf strategy": "evergreen",
         "Individual mass": 1.0},
        {"Heterotroph/Autotroph": "autotroph", "Realm": "marine", "Leaf strategy": "na",
         "Individual mass": 1.0},
    ])
