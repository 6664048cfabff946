import logging
from typing import Dict, List, Optional

from shared.datasets import DatasetProvider
from shared.models.diagnostics import DiagnosticCode, DiagnosticLog
from .config import EmbodiedSufferingSettings, settings
from .models import (
    Country, Material, ImportSourceType, MaterialImportSources, ImportSourceResult,
    IMPORT_SOURCE_TYPE_TAGS
)
from .reference import load_records

logger = logging.getLogger(__name__)


def catalog_paths(
    provider: DatasetProvider,
    import_source_type: ImportSourceType,
    config: Optional[EmbodiedSufferingSettings] = None
) -> List[str]:
    """Material import datasets matching the sourcing basis"""
    config = config or settings
    paths = provider.list_paths_with_prefix(config.material_imports_prefix)
    tag = IMPORT_SOURCE_TYPE_TAGS.get(import_source_type)
    if tag is None:
        return list(paths)
    return [p for p in paths if tag in p.upper()]


def average_import_sources(
    records: List[MaterialImportSources],
    material: Material,
    import_country: Country
) -> MaterialImportSources:
    """
    Merge duplicate breakdowns by summing ratios per export country and
    dividing each sum by the number of distinct export countries.
    """
    summed: Dict[Country, float] = {}
    for record in records:
        for country, ratio in zip(record.export_countries, record.import_ratios):
            summed[country] = summed.get(country, 0.0) + ratio

    count = len(summed)
    return MaterialImportSources(
        material=material,
        import_country=import_country,
        export_countries=list(summed.keys()),
        import_ratios=[ratio / count for ratio in summed.values()] if count else [],
    )


def resolve_import_source(
    provider: DatasetProvider,
    material: Material,
    import_country: Optional[Country] = None,
    import_source_type: Optional[ImportSourceType] = None,
    config: Optional[EmbodiedSufferingSettings] = None
) -> ImportSourceResult:
    """Find the import breakdown of ``material`` used in ``import_country``"""
    config = config or settings
    import_country = import_country or config.default_import_country
    import_source_type = import_source_type or config.default_import_source_type
    log = DiagnosticLog(logger)

    import_sources: List[MaterialImportSources] = []
    for path in catalog_paths(provider, import_source_type, config):
        import_sources.extend(load_records(provider, path, MaterialImportSources, log))

    if not import_sources:
        log.error(
            DiagnosticCode.NO_DATA_FOR_CATALOG,
            f"No import source datasets available for source type {import_source_type.value}.",
            import_source_type=import_source_type.value,
        )
        return ImportSourceResult(diagnostics=log.entries)

    # Filter by material
    import_sources = [s for s in import_sources if s.material == material]
    if not import_sources:
        log.error(
            DiagnosticCode.NO_DATA_FOR_MATERIAL,
            f"No import source datasets available for the material type {material.value}.",
            material=material.value,
        )
        return ImportSourceResult(diagnostics=log.entries)

    # Filter by import country
    import_sources = [s for s in import_sources if s.import_country == import_country]
    if not import_sources:
        log.error(
            DiagnosticCode.NO_DATA_FOR_COUNTRY,
            f"No import source datasets available for the import country {import_country.value} "
            f"for the material type {material.value}.",
            material=material.value,
            import_country=import_country.value,
        )
        return ImportSourceResult(diagnostics=log.entries)

    if len(import_sources) == 1:
        return ImportSourceResult(breakdown=import_sources[0], diagnostics=log.entries)

    mismatched = [s for s in import_sources if len(s.export_countries) != len(s.import_ratios)]
    if mismatched:
        log.error(
            DiagnosticCode.LENGTH_MISMATCH,
            f"{len(mismatched)} of {len(import_sources)} records for import of material {material.value} "
            f"to {import_country.value} list a different number of export countries and import ratios. "
            f"Records cannot be averaged.",
            material=material.value,
            import_country=import_country.value,
            records=[s.name for s in mismatched],
        )
        return ImportSourceResult(diagnostics=log.entries)

    log.warning(
        DiagnosticCode.DUPLICATE_RECORDS_AVERAGED,
        f"{len(import_sources)} records found for import of material {material.value} to {import_country.value}. "
        f"Average of all available records returned.",
        material=material.value,
        import_country=import_country.value,
        record_count=len(import_sources),
    )
    merged = average_import_sources(import_sources, material, import_country)
    return ImportSourceResult(breakdown=merged, diagnostics=log.entries)
