import logging
from typing import Any, Iterable, List, Optional, Sequence

import numpy as np

from shared.models.diagnostics import DiagnosticCode, DiagnosticLog
from .config import settings
from .models import AggregationResult, WeightedInput

logger = logging.getLogger(__name__)


def key_label(key: Any) -> str:
    """Display string for an aggregation key (enum keys show their value)"""
    return str(getattr(key, "value", key))


def unique_in_order(keys: Iterable[Any]) -> List[Any]:
    seen = set()
    ordered = []
    for key in keys:
        if key not in seen:
            seen.add(key)
            ordered.append(key)
    return ordered


def is_resolved(value: Optional[float]) -> bool:
    return value is not None and not np.isnan(value)


def check_weight_total(
    total_weight: float,
    tolerance: float,
    log: DiagnosticLog,
    label: str = "Weights",
    outcome: str = "The result is normalised against the supplied total."
) -> None:
    """Warn when weights do not add up to 1.0 within the tolerance"""
    if abs(total_weight - 1.0) > tolerance:
        log.warning(
            DiagnosticCode.WEIGHTS_RENORMALISED,
            f"{label} sum to {total_weight:.4f} rather than 1.0. {outcome}",
            total_weight=total_weight,
        )


def aggregate_weighted(items: Sequence[WeightedInput], tolerance: Optional[float] = None) -> AggregationResult:
    """
    Weighted mean of the resolved values, tracking unresolved entries.

    ``value = sum(w * v) / sum(w)`` over items with a value. Items whose value is
    None or NaN are dropped and reported; their combined weight, as a share of
    all weight supplied, is the ``unresolved_weight_fraction``.

    Failures return a NaN value with an error diagnostic:
        - no items
        - total weight of zero
        - no item resolved
    """
    tolerance = settings.ratio_tolerance if tolerance is None else tolerance
    log = DiagnosticLog(logger)
    items = list(items)

    if not items:
        log.error(DiagnosticCode.EMPTY_INPUT, "No weighted inputs were provided. Returning NaN.")
        return AggregationResult(diagnostics=log.entries)

    weights = np.array([item.weight for item in items], dtype=float)
    resolved = np.array([is_resolved(item.value) for item in items], dtype=bool)
    values = np.array([item.value if ok else 0.0 for item, ok in zip(items, resolved)], dtype=float)

    used_weight = float(weights[resolved].sum())
    missing_weight = float(weights[~resolved].sum())
    total_weight = used_weight + missing_weight
    unresolved_keys = unique_in_order(item.key for item, ok in zip(items, resolved) if not ok)

    if total_weight == 0:
        log.error(DiagnosticCode.ZERO_TOTAL_WEIGHT, "The weights sum to zero. Returning NaN.")
        return AggregationResult(
            unresolved_keys=unresolved_keys,
            used_weight=used_weight,
            missing_weight=missing_weight,
            diagnostics=log.entries,
        )

    unresolved_fraction = missing_weight / total_weight

    if used_weight == 0:
        log.error(
            DiagnosticCode.ALL_VALUES_UNRESOLVED,
            f"None of {[key_label(k) for k in unresolved_keys]} could be resolved. Returning NaN.",
            keys=[key_label(k) for k in unresolved_keys],
        )
        return AggregationResult(
            unresolved_keys=unresolved_keys,
            used_weight=used_weight,
            missing_weight=missing_weight,
            unresolved_weight_fraction=unresolved_fraction,
            diagnostics=log.entries,
        )

    check_weight_total(total_weight, tolerance, log)

    if unresolved_keys:
        log.warning(
            DiagnosticCode.UNRESOLVED_KEYS,
            f"No data for {[key_label(k) for k in unresolved_keys]}. "
            f"{unresolved_fraction:.1%} of the weight was excluded from the result.",
            keys=[key_label(k) for k in unresolved_keys],
            unresolved_weight_fraction=unresolved_fraction,
        )

    value = float(np.dot(weights[resolved], values[resolved]) / used_weight)
    logger.debug(
        f"Weighted aggregate: value={value:.4f}, used_weight={used_weight:.4f}, "
        f"missing_weight={missing_weight:.4f}"
    )

    return AggregationResult(
        value=value,
        unresolved_keys=unresolved_keys,
        used_weight=used_weight,
        missing_weight=missing_weight,
        unresolved_weight_fraction=unresolved_fraction,
        diagnostics=log.entries,
    )
