"""Transaction ingestion adapters."""

from pathlib import Path

from lotbook.exceptions import TransactionImportError
from lotbook.ingestion.base import BaseAdapter, ImportResult
from lotbook.ingestion.csv_adapter import CsvAdapter
from lotbook.ingestion.manual import ManualAdapter

_ADAPTERS: dict[str, type[BaseAdapter]] = {
    ".csv": CsvAdapter,
    ".json": ManualAdapter,
}


def adapter_for(file_path: Path) -> BaseAdapter:
    """Pick an adapter by file extension."""
    adapter_cls = _ADAPTERS.get(file_path.suffix.lower())
    if adapter_cls is None:
        raise TransactionImportError(
            file_path.name, f"unsupported file type {file_path.suffix!r} (expected .csv or .json)"
        )
    return adapter_cls()


__all__ = [
    "BaseAdapter",
    "CsvAdapter",
    "ImportResult",
    "ManualAdapter",
    "adapter_for",
]
