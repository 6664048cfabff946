from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.models.diagnostics import DiagnosedResult, ScoringResult


class Country(str, Enum):
    """Countries as identified in the reference datasets"""
    UNDEFINED = "Undefined"
    AFGHANISTAN = "Afghanistan"
    ALBANIA = "Albania"
    ALGERIA = "Algeria"
    ANDORRA = "Andorra"
    ANGOLA = "Angola"
    ANTIGUA_AND_BARBUDA = "AntiguaAndBarbuda"
    ARGENTINA = "Argentina"
    ARMENIA = "Armenia"
    AUSTRALIA = "Australia"
    AUSTRIA = "Austria"
    AZERBAIJAN = "Azerbaijan"
    BAHAMAS = "Bahamas"
    BAHRAIN = "Bahrain"
    BANGLADESH = "Bangladesh"
    BARBADOS = "Barbados"
    BELARUS = "Belarus"
    BELGIUM = "Belgium"
    BELIZE = "Belize"
    BENIN = "Benin"
    BHUTAN = "Bhutan"
    BOLIVIA = "Bolivia"
    BOSNIA_AND_HERZEGOVINA = "BosniaAndHerzegovina"
    BOTSWANA = "Botswana"
    BRAZIL = "Brazil"
    BRUNEI = "Brunei"
    BULGARIA = "Bulgaria"
    BURKINA_FASO = "BurkinaFaso"
    BURUNDI = "Burundi"
    CABO_VERDE = "CaboVerde"
    CAMBODIA = "Cambodia"
    CAMEROON = "Cameroon"
    CANADA = "Canada"
    CENTRAL_AFRICAN_REPUBLIC = "CentralAfricanRepublic"
    CHAD = "Chad"
    CHILE = "Chile"
    CHINA = "China"
    COLOMBIA = "Colombia"
    COMOROS = "Comoros"
    CONGO = "Congo"
    COSTA_RICA = "CostaRica"
    COTE_D_IVOIRE = "CoteDIvoire"
    CROATIA = "Croatia"
    CUBA = "Cuba"
    CYPRUS = "Cyprus"
    CZECHIA = "Czechia"
    DEMOCRATIC_REPUBLIC_OF_THE_CONGO = "DemocraticRepublicOfTheCongo"
    DENMARK = "Denmark"
    DJIBOUTI = "Djibouti"
    DOMINICA = "Dominica"
    DOMINICAN_REPUBLIC = "DominicanRepublic"
    ECUADOR = "Ecuador"
    EGYPT = "Egypt"
    EL_SALVADOR = "ElSalvador"
    EQUATORIAL_GUINEA = "EquatorialGuinea"
    ERITREA = "Eritrea"
    ESTONIA = "Estonia"
    ESWATINI = "Eswatini"
    ETHIOPIA = "Ethiopia"
    FIJI = "Fiji"
    FINLAND = "Finland"
    FRANCE = "France"
    GABON = "Gabon"
    GAMBIA = "Gambia"
    GEORGIA = "Georgia"
    GERMANY = "Germany"
    GHANA = "Ghana"
    GREECE = "Greece"
    GRENADA = "Grenada"
    GUATEMALA = "Guatemala"
    GUINEA = "Guinea"
    GUINEA_BISSAU = "GuineaBissau"
    GUYANA = "Guyana"
    HAITI = "Haiti"
    HONDURAS = "Honduras"
    HONG_KONG = "HongKong"
    HUNGARY = "Hungary"
    ICELAND = "Iceland"
    INDIA = "India"
    INDONESIA = "Indonesia"
    IRAN = "Iran"
    IRAQ = "Iraq"
    IRELAND = "Ireland"
    ISRAEL = "Israel"
    ITALY = "Italy"
    JAMAICA = "Jamaica"
    JAPAN = "Japan"
    JORDAN = "Jordan"
    KAZAKHSTAN = "Kazakhstan"
    KENYA = "Kenya"
    KIRIBATI = "Kiribati"
    KOSOVO = "Kosovo"
    KUWAIT = "Kuwait"
    KYRGYZSTAN = "Kyrgyzstan"
    LAOS = "Laos"
    LATVIA = "Latvia"
    LEBANON = "Lebanon"
    LESOTHO = "Lesotho"
    LIBERIA = "Liberia"
    LIBYA = "Libya"
    LIECHTENSTEIN = "Liechtenstein"
    LITHUANIA = "Lithuania"
    LUXEMBOURG = "Luxembourg"
    MADAGASCAR = "Madagascar"
    MALAWI = "Malawi"
    MALAYSIA = "Malaysia"
    MALDIVES = "Maldives"
    MALI = "Mali"
    MALTA = "Malta"
    MARSHALL_ISLANDS = "MarshallIslands"
    MAURITANIA = "Mauritania"
    MAURITIUS = "Mauritius"
    MEXICO = "Mexico"
    MICRONESIA = "Micronesia"
    MOLDOVA = "Moldova"
    MONACO = "Monaco"
    MONGOLIA = "Mongolia"
    MONTENEGRO = "Montenegro"
    MOROCCO = "Morocco"
    MOZAMBIQUE = "Mozambique"
    MYANMAR = "Myanmar"
    NAMIBIA = "Namibia"
    NAURU = "Nauru"
    NEPAL = "Nepal"
    NETHERLANDS = "Netherlands"
    NEW_ZEALAND = "NewZealand"
    NICARAGUA = "Nicaragua"
    NIGER = "Niger"
    NIGERIA = "Nigeria"
    NORTH_KOREA = "NorthKorea"
    NORTH_MACEDONIA = "NorthMacedonia"
    NORWAY = "Norway"
    OMAN = "Oman"
    PAKISTAN = "Pakistan"
    PALAU = "Palau"
    PALESTINE = "Palestine"
    PANAMA = "Panama"
    PAPUA_NEW_GUINEA = "PapuaNewGuinea"
    PARAGUAY = "Paraguay"
    PERU = "Peru"
    PHILIPPINES = "Philippines"
    POLAND = "Poland"
    PORTUGAL = "Portugal"
    QATAR = "Qatar"
    ROMANIA = "Romania"
    RUSSIAN_FEDERATION = "RussianFederation"
    RWANDA = "Rwanda"
    SAINT_KITTS_AND_NEVIS = "SaintKittsAndNevis"
    SAINT_LUCIA = "SaintLucia"
    SAINT_VINCENT_AND_THE_GRENADINES = "SaintVincentAndTheGrenadines"
    SAMOA = "Samoa"
    SAN_MARINO = "SanMarino"
    SAO_TOME_AND_PRINCIPE = "SaoTomeAndPrincipe"
    SAUDI_ARABIA = "SaudiArabia"
    SENEGAL = "Senegal"
    SERBIA = "Serbia"
    SEYCHELLES = "Seychelles"
    SIERRA_LEONE = "SierraLeone"
    SINGAPORE = "Singapore"
    SLOVAKIA = "Slovakia"
    SLOVENIA = "Slovenia"
    SOLOMON_ISLANDS = "SolomonIslands"
    SOMALIA = "Somalia"
    SOUTH_AFRICA = "SouthAfrica"
    SOUTH_KOREA = "SouthKorea"
    SOUTH_SUDAN = "SouthSudan"
    SPAIN = "Spain"
    SRI_LANKA = "SriLanka"
    SUDAN = "Sudan"
    SURINAME = "Suriname"
    SWEDEN = "Sweden"
    SWITZERLAND = "Switzerland"
    SYRIA = "Syria"
    TAIWAN = "Taiwan"
    TAJIKISTAN = "Tajikistan"
    TANZANIA = "Tanzania"
    THAILAND = "Thailand"
    TIMOR_LESTE = "TimorLeste"
    TOGO = "Togo"
    TONGA = "Tonga"
    TRINIDAD_AND_TOBAGO = "TrinidadAndTobago"
    TUNISIA = "Tunisia"
    TURKEY = "Turkey"
    TURKMENISTAN = "Turkmenistan"
    TUVALU = "Tuvalu"
    UGANDA = "Uganda"
    UKRAINE = "Ukraine"
    UNITED_ARAB_EMIRATES = "UnitedArabEmirates"
    UNITED_KINGDOM = "UnitedKingdom"
    UNITED_STATES_OF_AMERICA = "UnitedStatesOfAmerica"
    URUGUAY = "Uruguay"
    UZBEKISTAN = "Uzbekistan"
    VANUATU = "Vanuatu"
    VATICAN_CITY = "VaticanCity"
    VENEZUELA = "Venezuela"
    VIETNAM = "Vietnam"
    YEMEN = "Yemen"
    ZAMBIA = "Zambia"
    ZIMBABWE = "Zimbabwe"


class Material(str, Enum):
    UNDEFINED = "Undefined"
    ALUMINIUM = "Aluminium"
    BRICK = "Brick"
    CEMENT = "Cement"
    CERAMIC = "Ceramic"
    CONCRETE = "Concrete"
    COPPER = "Copper"
    GLASS = "Glass"
    GYPSUM = "Gypsum"
    INSULATION = "Insulation"
    IRON = "Iron"
    LEAD = "Lead"
    PLASTIC = "Plastic"
    SAND = "Sand"
    STEEL = "Steel"
    STONE = "Stone"
    TIMBER = "Timber"
    ZINC = "Zinc"


class ImportSourceType(str, Enum):
    """Whether import ratios are measured by cost or by mass"""
    UNDEFINED = "Undefined"
    BY_COST = "ByCost"
    BY_MASS = "ByMass"


# Tag a dataset name must contain (case-insensitive) to belong to a sourcing basis
IMPORT_SOURCE_TYPE_TAGS = {
    ImportSourceType.BY_COST: "BYCOST",
    ImportSourceType.BY_MASS: "BYMASS",
}


class LabourExploitationRisk(BaseModel):
    """Labour exploitation risk metrics for a country, optionally for one material or manufacturer"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    record_type: ClassVar[str] = "LabourExploitationRisk"

    country: Country = Field(Country.UNDEFINED, alias="Country", description="Country the metrics are associated with")
    material: Material = Field(Material.UNDEFINED, alias="Material", description="Material the metrics are specific to, Undefined when general")
    freedom_of_association: Optional[int] = Field(
        None, alias="FreedomOfAssociation", ge=1, le=6,
        description="ITUC rating of worker's rights violations, 1 (sporadic) to 6 (no guarantee of rights)"
    )
    victims_of_modern_slavery: Optional[float] = Field(
        None, alias="VictimsOfModernSlavery", ge=0,
        description="Prevalence of modern slavery, victims per 1000 population"
    )
    worker_voice: str = Field("", alias="WorkerVoice", description="Commentary from the working population")
    manufacturer: str = Field("", alias="Manufacturer", description="Manufacturer the metrics are associated with")

    @field_validator('freedom_of_association', mode='before')
    @classmethod
    def unset_rating(cls, v):
        # Datasets use 0 for "not rated"
        if v is None or v == "" or v == 0:
            return None
        return v

    @field_validator('victims_of_modern_slavery', mode='before')
    @classmethod
    def unset_prevalence(cls, v):
        if v is None or v == "":
            return None
        if isinstance(v, float) and np.isnan(v):
            return None
        return v


class MaterialImportSources(BaseModel):
    """
    Import breakdown of one material used in one import country.

    ``export_countries`` and ``import_ratios`` are parallel lists, e.g. timber
    used in the United States sourced 0.5 from Brazil and 0.5 from Vietnam.
    Ratios need not add to exactly 1.0.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    record_type: ClassVar[str] = "MaterialImportSources"

    name: str = Field("", alias="Name")
    material: Material = Field(Material.UNDEFINED, alias="Material", description="Imported material")
    export_countries: List[Country] = Field(default_factory=list, alias="ExportCountries", description="Countries the material is imported from")
    import_ratios: List[float] = Field(default_factory=list, alias="ImportRatios", description="Share of imports from each export country")
    import_country: Country = Field(Country.UNDEFINED, alias="ImportCountry", description="Country in which the material is used")

    @property
    def ratio_total(self) -> float:
        return float(np.sum(self.import_ratios)) if self.import_ratios else 0.0

    def pairs(self) -> List[Tuple[Country, float]]:
        return list(zip(self.export_countries, self.import_ratios))


@dataclass(frozen=True)
class WeightedInput:
    """One (weight, value) pair for the weighted aggregator; value None means unresolved"""
    key: Any
    weight: float
    value: Optional[float] = None


class AggregationResult(ScoringResult):
    """Weighted mean over resolved inputs plus what was left out"""
    unresolved_keys: List[Any] = Field(default_factory=list)
    used_weight: float = 0.0
    missing_weight: float = 0.0
    unresolved_weight_fraction: float = float("nan")


class FreedomOfAssociationResult(ScoringResult):
    """Freedom of association score on the ITUC 1-6 scale"""
    unresolved_countries: List[Country] = Field(default_factory=list, description="Export countries with no ITUC rating")
    unresolved_fraction: float = Field(float("nan"), description="Share of import weight with no rating")
    mass_weighted_value: Optional[float] = Field(None, description="Score multiplied by the assembly mass, when a mass is given")
    components: List["FreedomOfAssociationResult"] = Field(default_factory=list, description="Per-material results of an assembly")


FreedomOfAssociationResult.model_rebuild()


class SufferingIndexResult(ScoringResult):
    """Unnormalised slavery-prevalence weighted sum over export countries"""
    culled_countries: List[str] = Field(default_factory=list, description="Countries above the acceptable threshold")
    invalid_countries: List[str] = Field(default_factory=list, description="Countries with no usable prevalence value")


class SufferingContributionsResult(DiagnosedResult):
    """Per-country suffering contributions, count times import ratio"""
    export_countries: List[str] = Field(default_factory=list)
    contributions: List[float] = Field(default_factory=list)
    invalid_countries: List[str] = Field(default_factory=list, description="Countries with no usable value, counted as 0")

    @property
    def success(self) -> bool:
        return not self.errors


class ImportSourceResult(DiagnosedResult):
    """Resolved import breakdown, None when no record matched"""
    breakdown: Optional[MaterialImportSources] = None

    @property
    def success(self) -> bool:
        return self.breakdown is not None and not self.errors
