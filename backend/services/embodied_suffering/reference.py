"""
Country-level labour risk reference data.

A ``ReferenceContext`` is built once by the host around a dataset library and
passed to the scorers. It loads each reference table on first use and keeps it
for its own lifetime.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from shared.datasets import DatasetProvider, JsonDatasetLibrary
from shared.health import create_health_response
from shared.models.diagnostics import DiagnosticCode, DiagnosticLog
from shared.models.exceptions import DatasetNotFoundException
from .config import EmbodiedSufferingSettings, settings
from .models import Country, LabourExploitationRisk

logger = logging.getLogger(__name__)

RecordModel = TypeVar("RecordModel", bound=BaseModel)


def record_type_of(record: Dict[str, Any], default: str) -> str:
    """Short type name of a record; fully-qualified tags keep their last segment"""
    return str(record.get("_t", default)).rsplit(".", 1)[-1]


def load_records(
    provider: DatasetProvider,
    path: str,
    model: Type[RecordModel],
    log: Optional[DiagnosticLog] = None
) -> List[RecordModel]:
    """
    Parse the records of ``model.record_type`` stored under ``path``.

    Records that fail validation are skipped. When a ``log`` is given each
    skipped record becomes an ``INVALID_RECORDS`` warning on the caller's result.
    """
    log = log or DiagnosticLog(logger)
    parsed: List[RecordModel] = []
    for index, record in enumerate(provider.list_by_path(path)):
        if record_type_of(record, model.record_type) != model.record_type:
            continue
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as e:
            reasons = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            log.warning(
                DiagnosticCode.INVALID_RECORDS,
                f"Skipping invalid {model.record_type} record {index} in '{path}': {reasons}",
                path=path,
                record_index=index,
                reason=reasons,
            )
    return parsed


class CountryRiskTable(Mapping):
    """Immutable country -> risk value lookup built from a reference dataset"""

    def __init__(self, name: str, values: Mapping[Country, float]):
        self.name = name
        self._values = MappingProxyType(dict(values))

    @classmethod
    def from_records(cls, name: str, records: Iterable[LabourExploitationRisk], field: str) -> "CountryRiskTable":
        values: Dict[Country, float] = {}
        for record in records:
            value = getattr(record, field)
            if value is None:
                continue
            if record.country in values:
                logger.warning(f"Duplicate {name} entry for {record.country.value}; keeping the first value")
                continue
            values[record.country] = value
        logger.info(f"Built {name} table with {len(values)} countries")
        return cls(name, values)

    def __getitem__(self, country: Country) -> float:
        return self._values[country]

    def __iter__(self) -> Iterator[Country]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CountryRiskTable(name={self.name!r}, countries={len(self)})"


class ReferenceContext:
    """Holds the dataset library and the lazily built reference tables"""

    FREEDOM_OF_ASSOCIATION = "freedom_of_association"
    SLAVERY_PREVALENCE = "victims_of_modern_slavery"

    def __init__(self, provider: DatasetProvider, config: Optional[EmbodiedSufferingSettings] = None):
        self.provider = provider
        self.settings = config or settings
        self._lock = threading.Lock()
        self._tables: Dict[str, CountryRiskTable] = {}

    @classmethod
    def from_settings(cls, config: Optional[EmbodiedSufferingSettings] = None) -> "ReferenceContext":
        """Build a context over the JSON dataset library at ``dataset_root``"""
        config = config or settings
        if not config.dataset_root:
            raise DatasetNotFoundException("No dataset root configured (set EMBODIED_SUFFERING_DATASET_ROOT)")
        return cls(JsonDatasetLibrary(config.dataset_root), config)

    def ituc_freedom_of_association(self) -> List[LabourExploitationRisk]:
        """ITUC Global Rights Index records"""
        return load_records(self.provider, self.settings.ituc_dataset_path, LabourExploitationRisk)

    def global_slavery_index(self) -> List[LabourExploitationRisk]:
        """Global Slavery Index records"""
        return load_records(self.provider, self.settings.global_slavery_index_dataset_path, LabourExploitationRisk)

    @property
    def freedom_of_association_table(self) -> CountryRiskTable:
        return self._table(self.FREEDOM_OF_ASSOCIATION, self.ituc_freedom_of_association)

    @property
    def slavery_prevalence_table(self) -> CountryRiskTable:
        return self._table(self.SLAVERY_PREVALENCE, self.global_slavery_index)

    def _table(self, field: str, loader) -> CountryRiskTable:
        table = self._tables.get(field)
        if table is not None:
            return table
        with self._lock:
            # Another thread may have built it while we waited
            table = self._tables.get(field)
            if table is None:
                table = CountryRiskTable.from_records(field, loader(), field)
                self._tables[field] = table
        return table

    def health_check(self) -> Dict[str, Any]:
        """Report whether each reference dataset is available"""
        ituc = self.freedom_of_association_table
        gsi = self.slavery_prevalence_table
        import_datasets = self.provider.list_paths_with_prefix(self.settings.material_imports_prefix)
        checks = {
            "ituc_freedom_of_association": len(ituc) > 0,
            "global_slavery_index": len(gsi) > 0,
            "material_imports": bool(import_datasets),
        }
        details = {
            "ituc_countries": len(ituc),
            "global_slavery_index_countries": len(gsi),
            "material_import_datasets": len(import_datasets),
        }
        return create_health_response(self.settings.service_name, checks, self.settings.version, details)
