import math
import pytest
import constants as C
from cohorts import Cohort, Stock, GroupedCollection
from eating import Eating, new_eating_deltas
from functional_groups import FunctionalGroupDefinitions
from utilities import ConfigurationError

TERRESTRIAL = {"Realm": C.REALM_TERRESTRIAL, "LatIndex": 0, "LonIndex": 0}


def _group(nutrition, herbivory_ae=0.0, carnivory_ae=0.0):
    return {"Heterotroph/Autotroph": "heterotroph", "Nutrition source": nutrition, "Diet": "all",
            "Mobility": "mobile", "Realm": "terrestrial",
            "Herbivory assimilation": herbivory_ae, "Carnivory assimilation": carnivory_ae}


def _make_definitions(acting_nutrition="herbivore"):
    cohort_definitions = FunctionalGroupDefinitions([
        _group(acting_nutrition, herbivory_ae=0.4, carnivory_ae=0.64),
        _group("herbivore", herbivory_ae=0.5),
    ])
    stock_definitions = FunctionalGroupDefinitions([{"Heterotroph/Autotroph": "autotroph", "Realm": "terrestrial"}])
    return cohort_definitions, stock_definitions


def _make_cell(stock_biomass=1.0e4, prey_trophic_index=2.0, prey_abundance=1000.0):
    cohorts = GroupedCollection(2)
    cohorts.add(0, Cohort(0, 100.0, 1000.0, 1000.0, 10.0, math.log(0.01), trophic_index=1.7))
    cohorts.add(1, Cohort(1, 1.0, 10.0, 10.0, prey_abundance, math.log(0.1), trophic_index=prey_trophic_index))
    stocks = GroupedCollection(1)
    if stock_biomass is not None:
        stocks.add(0, Stock(0, stock_biomass))
    return cohorts, stocks


def _run(nutrition, stock_biomass=1.0e4, prey_trophic_index=2.0, prey_abundance=1000.0):
    eating = Eating(cell_area_km2=0.01)
    cohort_definitions, stock_definitions = _make_definitions(nutrition)
    cohorts, stocks = _make_cell(stock_biomass, prey_trophic_index, prey_abundance)
    context = eating.initialize_per_time_step(cohorts, stocks, cohort_definitions, stock_definitions)
    deltas = new_eating_deltas()
    eating.run(context, cohorts, stocks, (0, 0), TERRESTRIAL, deltas, cohort_definitions)
    return context, cohorts, stocks, deltas


def test_herbivore_trophic_index_is_one_above_plants():
    _, cohorts, _, deltas = _run("herbivore")

    assert deltas["biomass"]["herbivory"] > 0
    assert deltas["biomass"]["predation"] == 0.0
    assert cohorts[0, 0].trophic_index == pytest.approx(2.0)


def test_carnivore_trophic_index_is_one_above_its_prey():
    _, cohorts, _, deltas = _run("carnivore", prey_trophic_index=2.5)

    assert deltas["biomass"]["predation"] > 0
    assert deltas["biomass"]["herbivory"] == 0.0
    assert cohorts[0, 0].trophic_index == pytest.approx(3.5)


def test_trophic_index_is_kept_when_nothing_is_eaten():
    _, cohorts, _, deltas = _run("herbivore", stock_biomass=None)

    assert deltas["biomass"]["herbivory"] == 0.0
    assert cohorts[0, 0].trophic_index == 1.7


def test_omnivores_share_one_handling_time_budget():
    context, cohorts, stocks, deltas = _run("omnivore")

    assert context.herbivory.time_units_to_handle_potential_food_items == pytest.approx(
        context.predation.time_units_to_handle_potential_food_items)
    assert deltas["biomass"]["herbivory"] > 0
    assert deltas["biomass"]["predation"] > 0
    assert stocks[0, 0].total_biomass < 1.0e4
    assert cohorts[1, 0].cohort_abundance < 1000.0


def test_omnivore_eats_less_of_each_food_than_a_specialist_would():
    omnivore_context, _, _, _ = _run("omnivore")
    herbivore_context, _, _, _ = _run("herbivore")

    assert omnivore_context.herbivory.biomass_eaten[0][0] < herbivore_context.herbivory.biomass_eaten[0][0]


def test_more_prey_means_an_omnivore_eats_fewer_plants():
    few_prey, _, _, _ = _run("omnivore", prey_abundance=1000.0)
    many_prey, _, _, _ = _run("omnivore", prey_abundance=1.0e5)

    assert (many_prey.predation.time_units_to_handle_potential_food_items
            > few_prey.predation.time_units_to_handle_potential_food_items)
    assert many_prey.herbivory.potential_biomass_eaten[0][0] == few_prey.herbivory.potential_biomass_eaten[0][0]
    assert 0 < many_prey.herbivory.biomass_eaten[0][0] < few_prey.herbivory.biomass_eaten[0][0]


def test_unknown_nutrition_source_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        _run("detritivore")


def test_marine_cells_use_marine_potentials(monkeypatch):
    eating = Eating(cell_area_km2=0.01)
    cohort_definitions, stock_definitions = _make_definitions("herbivore")
    cohorts, stocks = _make_cell()
    context = eating.initialize_per_time_step(cohorts, stocks, cohort_definitions, stock_definitions)
    calls = []
    original = eating.herbivory.get_eating_potential_marine

    def spy(*args):
        calls.append("marine")
        original(*args)

    monkeypatch.setattr(eating.herbivory, "get_eating_potential_marine", spy)
    eating.run(context, cohorts, stocks, (0, 0), {"Realm": C.REALM_MARINE, "LatIndex": 0, "LonIndex": 0},
               new_eating_deltas(), cohort_definitions)

    assert calls == ["marine"]
