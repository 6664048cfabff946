# tests/conftest.py

import pytest

from shared.datasets import InMemoryDatasetLibrary
from services.embodied_suffering.config import EmbodiedSufferingSettings
from services.embodied_suffering.models import Country, Material, MaterialImportSources
from services.embodied_suffering.reference import CountryRiskTable, ReferenceContext

ITUC_PATH = "EmbodiedSuffering/LabourExploitationRisk/2021ITUCGlobalRightsIndex"
GSI_PATH = "EmbodiedSuffering/LabourExploitationRisk/2018GlobalSlaveryIndex"
STEEL_BY_MASS_PATH = "EmbodiedSuffering/Material Imports/SteelByMass"
TIMBER_BY_MASS_PATH = "EmbodiedSuffering/Material Imports/TimberByMass"
STEEL_BY_COST_PATH = "EmbodiedSuffering/Material Imports/SteelByCost"


def _risk(country, **values):
    return {"_t": "LabourExploitationRisk", "Country": country, **values}


def _imports(material, import_country, countries, ratios):
    return {
        "_t": "MaterialImportSources",
        "Material": material,
        "ImportCountry": import_country,
        "ExportCountries": countries,
        "ImportRatios": ratios,
    }


ITUC_RECORDS = [
    _risk("Canada", FreedomOfAssociation=2),
    _risk("Brazil", FreedomOfAssociation=4),
    _risk("China", FreedomOfAssociation=5),
    _risk("Germany", FreedomOfAssociation=1),
    _risk("India", FreedomOfAssociation=5),
    _risk("UnitedKingdom", FreedomOfAssociation=4),
    # not rated
    _risk("Vietnam", FreedomOfAssociation=0),
]

GSI_RECORDS = [
    _risk("Brazil", VictimsOfModernSlavery=1.8),
    _risk("Canada", VictimsOfModernSlavery=0.5),
    _risk("China", VictimsOfModernSlavery=2.8),
    _risk("India", VictimsOfModernSlavery=6.1),
    _risk("NorthKorea", VictimsOfModernSlavery=104.6),
]

STEEL_BY_MASS = [
    _imports("Steel", "UnitedStatesOfAmerica", ["Canada", "Brazil", "Germany"], [0.5, 0.3, 0.2]),
    _imports("Steel", "UnitedKingdom", ["Germany", "China"], [0.6, 0.4]),
]

TIMBER_BY_MASS = [
    _imports("Timber", "UnitedStatesOfAmerica", ["Canada", "Vietnam"], [0.75, 0.25]),
]

STEEL_BY_COST = [
    _imports("Steel", "UnitedStatesOfAmerica", ["China"], [1.0]),
]


@pytest.fixture
def config():
    return EmbodiedSufferingSettings()


@pytest.fixture
def library():
    return InMemoryDatasetLibrary({
        ITUC_PATH: ITUC_RECORDS,
        GSI_PATH: GSI_RECORDS,
        STEEL_BY_MASS_PATH: STEEL_BY_MASS,
        TIMBER_BY_MASS_PATH: TIMBER_BY_MASS,
        STEEL_BY_COST_PATH: STEEL_BY_COST,
    })


@pytest.fixture
def context(library, config):
    return ReferenceContext(library, config)


@pytest.fixture
def ituc_table():
    return CountryRiskTable("freedom_of_association", {
        Country.CANADA: 2,
        Country.BRAZIL: 4,
        Country.CHINA: 5,
        Country.GERMANY: 1,
    })


@pytest.fixture
def make_breakdown():
    """Build a MaterialImportSources without going through a dataset"""
    def _make(countries, ratios, material=Material.STEEL, import_country=Country.UNITED_STATES_OF_AMERICA):
        return MaterialImportSources(
            material=material,
            import_country=import_country,
            export_countries=countries,
            import_ratios=ratios,
        )
    return _make
