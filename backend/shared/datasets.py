"""
Reference dataset libraries.

Datasets are addressed by ``/``-separated path keys such as
``EmbodiedSuffering/LabourExploitationRisk/2018GlobalSlaveryIndex``. A library
returns the raw records stored under a path; typed parsing happens in the
consuming service.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from shared.models.exceptions import DatasetFormatException, DatasetNotFoundException

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def normalize_path(path: str) -> str:
    """Use forward slashes and strip surrounding separators"""
    return "/".join(part for part in path.replace("\\", "/").split("/") if part)


@runtime_checkable
class DatasetProvider(Protocol):
    """What the scoring core needs from a dataset library"""

    def list_by_path(self, path: str) -> Sequence[Record]:
        ...

    def list_paths_with_prefix(self, prefix: str) -> Sequence[str]:
        ...


class InMemoryDatasetLibrary:
    """Dataset library backed by a dict of path -> records"""

    def __init__(self, datasets: Optional[Mapping[str, Sequence[Record]]] = None):
        self._datasets: Dict[str, List[Record]] = {}
        for path, records in (datasets or {}).items():
            self.add(path, records)

    def add(self, path: str, records: Sequence[Record]) -> None:
        self._datasets[normalize_path(path)] = list(records)

    def list_by_path(self, path: str) -> List[Record]:
        return list(self._datasets.get(normalize_path(path), []))

    def list_paths_with_prefix(self, prefix: str) -> List[str]:
        prefix = normalize_path(prefix)
        return sorted(p for p in self._datasets if p.startswith(prefix))


class JsonDatasetLibrary:
    """
    Dataset library reading ``<root>/<path>.json`` files.

    A file holds either a bare list of records or an object with a ``Data``
    list (and optional ``SourceInformation``). Files are parsed on first use and
    kept for the lifetime of the library.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        if not self.root.is_dir():
            raise DatasetNotFoundException(f"Dataset root {self.root} does not exist")
        self._cache: Dict[str, List[Record]] = {}

    def _file_for(self, path: str) -> Path:
        parts = normalize_path(path).split("/")
        return self.root.joinpath(*parts[:-1], parts[-1] + ".json")

    def list_paths(self) -> List[str]:
        return sorted(
            p.relative_to(self.root).as_posix()[:-len(".json")]
            for p in self.root.rglob("*.json")
        )

    def list_paths_with_prefix(self, prefix: str) -> List[str]:
        prefix = normalize_path(prefix)
        return [p for p in self.list_paths() if p.startswith(prefix)]

    def list_by_path(self, path: str) -> List[Record]:
        key = normalize_path(path)
        if key in self._cache:
            return list(self._cache[key])

        file_path = self._file_for(key)
        if not file_path.is_file():
            logger.warning(f"No dataset found at path '{key}'")
            return []

        try:
            with file_path.open(encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read dataset {file_path}: {e}")
            raise DatasetFormatException(f"Dataset '{key}' could not be read: {e}")

        if isinstance(content, dict):
            records = content.get("Data", [])
        else:
            records = content

        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise DatasetFormatException(f"Dataset '{key}' must contain a list of records")

        logger.debug(f"Loaded {len(records)} records from dataset '{key}'")
        self._cache[key] = records
        return list(records)


__all__ = [
    "Record",
    "normalize_path",
    "DatasetProvider",
    "InMemoryDatasetLibrary",
    "JsonDatasetLibrary",
]
