"""
Structured diagnostics and result types.

Scoring operations never raise for data-quality problems. They return a
``ScoringResult`` whose ``value`` is NaN on failure and whose ``diagnostics``
list records every error, warning and note raised along the way.
"""

import logging
import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ScoringException


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class DiagnosticCode(str, Enum):
    LENGTH_MISMATCH = "length_mismatch"
    EMPTY_INPUT = "empty_input"
    ZERO_TOTAL_WEIGHT = "zero_total_weight"
    ALL_VALUES_UNRESOLVED = "all_values_unresolved"
    NO_DATA_FOR_CATALOG = "no_data_for_catalog"
    NO_DATA_FOR_MATERIAL = "no_data_for_material"
    NO_DATA_FOR_COUNTRY = "no_data_for_country"
    UNRESOLVABLE_MATERIAL = "unresolvable_material"
    DUPLICATE_RECORDS_AVERAGED = "duplicate_records_averaged"
    WEIGHTS_RENORMALISED = "weights_renormalised"
    UNRESOLVED_KEYS = "unresolved_keys"
    ALL_ENTRIES_CULLED = "all_entries_culled"
    INVALID_VALUES = "invalid_values"
    VALUES_CULLED = "values_culled"
    INVALID_RECORDS = "invalid_records"


NO_REFERENCE_DATA_CODES = frozenset({
    DiagnosticCode.NO_DATA_FOR_CATALOG,
    DiagnosticCode.NO_DATA_FOR_MATERIAL,
    DiagnosticCode.NO_DATA_FOR_COUNTRY,
})

_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.NOTE: logging.INFO,
}


class Diagnostic(BaseModel):
    """A single error, warning or note attached to a result"""
    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: DiagnosticCode
    message: str
    context: Dict[str, Any] = Field(default_factory=dict, description="Structured details, e.g. keys and weights")


class DiagnosticLog:
    """Collects diagnostics for one operation and mirrors them to a logger"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.entries: List[Diagnostic] = []

    def record(self, severity: Severity, code: DiagnosticCode, message: str, **context) -> Diagnostic:
        diagnostic = Diagnostic(severity=severity, code=code, message=message, context=context)
        self.entries.append(diagnostic)
        self.logger.log(_LOG_LEVELS[severity], f"[{code.value}] {message}")
        return diagnostic

    def error(self, code: DiagnosticCode, message: str, **context) -> Diagnostic:
        return self.record(Severity.ERROR, code, message, **context)

    def warning(self, code: DiagnosticCode, message: str, **context) -> Diagnostic:
        return self.record(Severity.WARNING, code, message, **context)

    def note(self, code: DiagnosticCode, message: str, **context) -> Diagnostic:
        return self.record(Severity.NOTE, code, message, **context)

    def extend(self, diagnostics: List[Diagnostic]) -> None:
        """Adopt diagnostics already logged by a nested operation"""
        self.entries.extend(diagnostics)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.entries)


class DiagnosedResult(BaseModel):
    """Base for every result that carries diagnostics"""
    model_config = ConfigDict(frozen=True)

    diagnostics: List[Diagnostic] = Field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def notes(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.NOTE]

    def has_code(self, code: DiagnosticCode) -> bool:
        return any(d.code == code for d in self.diagnostics)


class ScoringResult(DiagnosedResult):
    """A scalar value plus the diagnostics that produced it"""

    value: float = Field(float("nan"), description="Result value, NaN when the operation failed")

    @property
    def success(self) -> bool:
        return not self.errors and not math.isnan(self.value)

    def unwrap(self) -> float:
        """Return the value or raise ScoringException carrying the first error"""
        if not self.success:
            first: Optional[Diagnostic] = self.errors[0] if self.errors else None
            raise ScoringException(first.message if first else None)
        return self.value


__all__ = [
    "Severity",
    "DiagnosticCode",
    "NO_REFERENCE_DATA_CODES",
    "Diagnostic",
    "DiagnosticLog",
    "DiagnosedResult",
    "ScoringResult",
]
