"""
Embodied Suffering Scoring Service

Scores the labour-rights risk embodied in building materials by combining
material import breakdowns (which countries supply a material, in what
proportion) with country reference data: ITUC Global Rights Index ratings for
freedom of association and Global Slavery Index prevalence for the suffering
index.
"""

from .models import (
    Country,
    Material,
    ImportSourceType,
    LabourExploitationRisk,
    MaterialImportSources,
    WeightedInput,
    AggregationResult,
    FreedomOfAssociationResult,
    SufferingIndexResult,
    SufferingContributionsResult,
    ImportSourceResult,
)

from .aggregation import aggregate_weighted
from .reference import CountryRiskTable, ReferenceContext
from .import_source import resolve_import_source
from .score import (
    freedom_of_association,
    freedom_of_association_assembly,
    freedom_of_association_materials,
    suffering_index,
    suffering_index_per_country,
    suffering_index_from_reference,
)
from .app import create_context
from .config import settings

__version__ = "0.1.0"
__all__ = [
    "Country",
    "Material",
    "ImportSourceType",
    "LabourExploitationRisk",
    "MaterialImportSources",
    "WeightedInput",
    "AggregationResult",
    "FreedomOfAssociationResult",
    "SufferingIndexResult",
    "SufferingContributionsResult",
    "ImportSourceResult",
    "aggregate_weighted",
    "CountryRiskTable",
    "ReferenceContext",
    "resolve_import_source",
    "freedom_of_association",
    "freedom_of_association_assembly",
    "freedom_of_association_materials",
    "suffering_index",
    "suffering_index_per_country",
    "suffering_index_from_reference",
    "create_context",
    "settings",
]
