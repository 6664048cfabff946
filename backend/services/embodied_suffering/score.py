import logging
from typing import List, Optional, Sequence

import numpy as np

from shared.models.diagnostics import DiagnosticCode, DiagnosticLog, Severity
from .aggregation import aggregate_weighted, check_weight_total, unique_in_order
from .config import settings
from .import_source import resolve_import_source
from .models import (
    Country, Material, ImportSourceType, MaterialImportSources, WeightedInput,
    FreedomOfAssociationResult, SufferingIndexResult, SufferingContributionsResult
)
from .reference import CountryRiskTable, ReferenceContext

logger = logging.getLogger(__name__)


def _check_breakdown_lengths(breakdown: MaterialImportSources, log: DiagnosticLog) -> bool:
    countries, ratios = len(breakdown.export_countries), len(breakdown.import_ratios)
    if countries != ratios:
        log.error(
            DiagnosticCode.LENGTH_MISMATCH,
            f"Import source for {breakdown.material.value} lists {countries} export countries "
            f"but {ratios} import ratios. Returning NaN.",
            material=breakdown.material.value,
        )
        return False
    return True


# ---------------------------------------------------------------------------
# Freedom of association
# ---------------------------------------------------------------------------

def freedom_of_association(
    breakdown: MaterialImportSources,
    table: CountryRiskTable,
    tolerance: Optional[float] = None
) -> FreedomOfAssociationResult:
    """
    Import-ratio weighted mean of the ITUC rating of each export country.

    Countries without a rating are left out of the mean and reported, along
    with the share of the import weight they carried.
    """
    log = DiagnosticLog(logger)
    if not _check_breakdown_lengths(breakdown, log):
        return FreedomOfAssociationResult(diagnostics=log.entries)

    items = [
        WeightedInput(key=country, weight=ratio, value=table.get(country))
        for country, ratio in breakdown.pairs()
    ]
    aggregate = aggregate_weighted(items, tolerance)
    log.extend(aggregate.diagnostics)

    logger.debug(f"Freedom of association for {breakdown.material.value}: {aggregate.value:.3f}")
    return FreedomOfAssociationResult(
        value=aggregate.value,
        unresolved_countries=aggregate.unresolved_keys,
        unresolved_fraction=aggregate.unresolved_weight_fraction,
        diagnostics=log.entries,
    )


def freedom_of_association_assembly(
    breakdowns: Sequence[MaterialImportSources],
    assembly_ratios: Sequence[float],
    table: CountryRiskTable,
    mass: Optional[float] = None,
    tolerance: Optional[float] = None
) -> FreedomOfAssociationResult:
    """
    Freedom of association of a multi-material assembly.

    Each material is scored on its own, then the material scores are combined
    as a mean weighted by ``assembly_ratios``. The unresolved fraction is the
    ratio-weighted mean of each material's own unresolved fraction. A material
    that cannot be scored at all counts as fully unresolved.
    """
    tolerance = settings.ratio_tolerance if tolerance is None else tolerance
    log = DiagnosticLog(logger)

    if len(breakdowns) != len(assembly_ratios):
        log.error(
            DiagnosticCode.LENGTH_MISMATCH,
            f"You must provide the same number of ratios as materials "
            f"({len(breakdowns)} materials, {len(assembly_ratios)} ratios). Returning NaN.",
        )
        return FreedomOfAssociationResult(diagnostics=log.entries)

    if not breakdowns:
        log.error(DiagnosticCode.EMPTY_INPUT, "No materials were provided. Returning NaN.")
        return FreedomOfAssociationResult(diagnostics=log.entries)

    ratios = np.asarray(assembly_ratios, dtype=float)
    total_ratio = float(ratios.sum())
    if total_ratio == 0:
        log.error(DiagnosticCode.ZERO_TOTAL_WEIGHT, "The assembly ratios sum to zero. Returning NaN.")
        return FreedomOfAssociationResult(diagnostics=log.entries)

    check_weight_total(total_ratio, tolerance, log, "Assembly ratios")

    components = [freedom_of_association(b, table, tolerance) for b in breakdowns]
    for breakdown, component in zip(breakdowns, components):
        if component.success:
            log.extend(component.diagnostics)
            continue
        # A failed material does not fail the assembly; it becomes unresolved weight
        log.extend([d for d in component.diagnostics if d.severity != Severity.ERROR])
        log.warning(
            DiagnosticCode.UNRESOLVED_KEYS,
            f"Material {breakdown.material.value} could not be scored and is excluded from the assembly score. "
            f"Reason: {'; '.join(d.message for d in component.errors)}",
            keys=[breakdown.material.value],
        )

    scored = np.array([c.success for c in components], dtype=bool)
    values = np.array([c.value if c.success else 0.0 for c in components], dtype=float)
    fractions = np.array([c.unresolved_fraction if c.success else 1.0 for c in components], dtype=float)

    unresolved_countries = unique_in_order(
        country for component in components for country in component.unresolved_countries
    )
    unresolved_fraction = float(np.dot(ratios, fractions) / total_ratio)

    scored_ratio = float(ratios[scored].sum())
    if scored_ratio == 0:
        log.error(DiagnosticCode.ALL_VALUES_UNRESOLVED, "No material in the assembly could be scored. Returning NaN.")
        return FreedomOfAssociationResult(
            unresolved_countries=unresolved_countries,
            unresolved_fraction=unresolved_fraction,
            components=components,
            diagnostics=log.entries,
        )

    value = float(np.dot(ratios[scored], values[scored]) / scored_ratio)
    logger.info(
        f"Assembly freedom of association: {value:.3f} over {len(components)} materials, "
        f"unresolved fraction {unresolved_fraction:.1%}"
    )

    return FreedomOfAssociationResult(
        value=value,
        unresolved_countries=unresolved_countries,
        unresolved_fraction=unresolved_fraction,
        mass_weighted_value=value * mass if mass is not None else None,
        components=components,
        diagnostics=log.entries,
    )


def freedom_of_association_materials(
    context: ReferenceContext,
    materials: Sequence[Material],
    ratios: Sequence[float],
    import_country: Optional[Country] = None,
    import_source_type: Optional[ImportSourceType] = None,
    mass: Optional[float] = None
) -> FreedomOfAssociationResult:
    """Resolve each material's import breakdown, then score them as an assembly"""
    log = DiagnosticLog(logger)

    if len(materials) != len(ratios):
        log.error(
            DiagnosticCode.LENGTH_MISMATCH,
            f"You must provide the same number of ratios as materials "
            f"({len(materials)} materials, {len(ratios)} ratios). Returning NaN.",
        )
        return FreedomOfAssociationResult(diagnostics=log.entries)

    breakdowns: List[MaterialImportSources] = []
    unresolved_materials: List[Material] = []
    for material in materials:
        resolved = resolve_import_source(
            context.provider, material, import_country, import_source_type, context.settings
        )
        log.extend(resolved.diagnostics)
        if resolved.success:
            breakdowns.append(resolved.breakdown)
        else:
            unresolved_materials.append(material)

    if unresolved_materials:
        names = [m.value for m in unresolved_materials]
        log.error(
            DiagnosticCode.UNRESOLVABLE_MATERIAL,
            f"No import source could be resolved for {names}. Returning NaN.",
            materials=names,
        )
        return FreedomOfAssociationResult(diagnostics=log.entries)

    result = freedom_of_association_assembly(
        breakdowns, ratios, context.freedom_of_association_table, mass, context.settings.ratio_tolerance
    )
    return result.model_copy(update={"diagnostics": log.entries + result.diagnostics})


# ---------------------------------------------------------------------------
# Suffering index
# ---------------------------------------------------------------------------

def _check_suffering_inputs(
    enslaved_counts: Sequence[Optional[float]],
    breakdown: MaterialImportSources,
    tolerance: Optional[float],
    log: DiagnosticLog
) -> bool:
    counts, ratios, countries = len(enslaved_counts), len(breakdown.import_ratios), len(breakdown.export_countries)
    if not counts == ratios == countries:
        log.error(
            DiagnosticCode.LENGTH_MISMATCH,
            f"The provided lists' lengths do not correspond ({counts} counts, {ratios} ratios, "
            f"{countries} countries). Results cannot be computed.",
        )
        return False
    if counts == 0:
        log.error(DiagnosticCode.EMPTY_INPUT, "No enslaved population values were provided.")
        return False
    if breakdown.ratio_total == 0:
        log.error(DiagnosticCode.ZERO_TOTAL_WEIGHT, "The import ratios sum to zero. Results cannot be computed.")
        return False
    check_weight_total(
        breakdown.ratio_total,
        settings.ratio_tolerance if tolerance is None else tolerance,
        log,
        "Import ratios",
        "The index is not normalised, so it scales with the ratio total.",
    )
    return True


def _as_counts(enslaved_counts: Sequence[Optional[float]]) -> np.ndarray:
    return np.array([np.nan if c is None else c for c in enslaved_counts], dtype=float)


def suffering_index(
    enslaved_counts: Sequence[Optional[float]],
    breakdown: MaterialImportSources,
    acceptable_threshold: Optional[float] = None,
    tolerance: Optional[float] = None
) -> SufferingIndexResult:
    """
    Suffering index of a material's import breakdown.

    Countries whose value exceeds ``acceptable_threshold`` are culled. Missing
    or NaN values count as 0 and are reported as invalid. The index is the sum
    of value * import ratio over the remaining countries; it is deliberately
    not divided by the remaining ratio total.
    """
    threshold = settings.acceptable_slavery_threshold if acceptable_threshold is None else acceptable_threshold
    log = DiagnosticLog(logger)

    if not _check_suffering_inputs(enslaved_counts, breakdown, tolerance, log):
        return SufferingIndexResult(diagnostics=log.entries)

    counts = _as_counts(enslaved_counts)
    ratios = np.asarray(breakdown.import_ratios, dtype=float)
    countries = [c.value for c in breakdown.export_countries]

    with np.errstate(invalid="ignore"):
        culled_mask = counts > threshold
    invalid_mask = np.isnan(counts) & ~culled_mask
    culled = [countries[i] for i in np.flatnonzero(culled_mask)]
    invalid = [countries[i] for i in np.flatnonzero(invalid_mask)]

    if culled:
        log.note(
            DiagnosticCode.VALUES_CULLED,
            f"{culled} exceed the acceptable threshold of {threshold} and were excluded.",
            countries=culled,
            threshold=threshold,
        )
    if invalid:
        log.note(
            DiagnosticCode.INVALID_VALUES,
            f"{invalid} have no valid value and were counted as 0.",
            countries=invalid,
        )

    surviving = ~culled_mask
    if not surviving.any():
        log.warning(DiagnosticCode.ALL_ENTRIES_CULLED, "Every country exceeds the acceptable threshold. Index is 0.")

    counts = np.where(invalid_mask, 0.0, counts)
    value = float(np.dot(counts[surviving], ratios[surviving]))
    logger.debug(f"Suffering index for {breakdown.material.value}: {value:.4f}")

    return SufferingIndexResult(
        value=value,
        culled_countries=culled,
        invalid_countries=invalid,
        diagnostics=log.entries,
    )


def suffering_index_per_country(
    enslaved_counts: Sequence[Optional[float]],
    breakdown: MaterialImportSources,
    tolerance: Optional[float] = None
) -> SufferingContributionsResult:
    """Per-country contributions, value * import ratio, without any threshold"""
    log = DiagnosticLog(logger)

    if not _check_suffering_inputs(enslaved_counts, breakdown, tolerance, log):
        return SufferingContributionsResult(diagnostics=log.entries)

    counts = _as_counts(enslaved_counts)
    countries = [c.value for c in breakdown.export_countries]
    invalid = [countries[i] for i in np.flatnonzero(np.isnan(counts))]
    if invalid:
        log.note(
            DiagnosticCode.INVALID_VALUES,
            f"{invalid} have no valid value and were counted as 0.",
            countries=invalid,
        )

    contributions = np.where(np.isnan(counts), 0.0, counts) * np.asarray(breakdown.import_ratios, dtype=float)
    return SufferingContributionsResult(
        export_countries=countries,
        contributions=[float(c) for c in contributions],
        invalid_countries=invalid,
        diagnostics=log.entries,
    )


def suffering_index_from_reference(
    context: ReferenceContext,
    breakdown: MaterialImportSources,
    acceptable_threshold: Optional[float] = None
) -> SufferingIndexResult:
    """Suffering index using Global Slavery Index prevalence for each export country"""
    table = context.slavery_prevalence_table
    counts = [table.get(country) for country in breakdown.export_countries]
    if acceptable_threshold is None:
        acceptable_threshold = context.settings.acceptable_slavery_threshold
    return suffering_index(counts, breakdown, acceptable_threshold, context.settings.ratio_tolerance)
