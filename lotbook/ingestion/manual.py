"""Manual entry adapter for JSON transaction files."""

import json
from pathlib import Path

from lotbook.exceptions import TransactionImportError
from lotbook.ingestion.base import BaseAdapter, ImportResult


class ManualAdapter(BaseAdapter):
    """Imports a JSON list of transaction objects.

    Keys follow the transaction fields (``id``, ``symbol``, ``type``,
    ``quantity``, ``price``, ``amount``, ``fees``, ``date``, ``description``).
    A top-level object with a ``transactions`` list is also accepted.
    """

    def parse(self, file_path: Path) -> ImportResult:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text())
        except json.JSONDecodeError as exc:
            raise TransactionImportError(file_path.name, f"invalid JSON: {exc}") from exc

        if isinstance(raw, dict):
            raw = raw.get("transactions")
        if not isinstance(raw, list):
            raise TransactionImportError(file_path.name, "expected a list of transactions")

        transactions = []
        for index, item in enumerate(raw, start=1):
            if not isinstance(item, dict):
                raise TransactionImportError(file_path.name, f"record {index} is not an object")
            record = {
                str(key).lower(): None if value is None else str(value)
                for key, value in item.items()
            }
            transactions.append(self._build_transaction(record, index, file_path.stem))

        return ImportResult(source=file_path.name, transactions=transactions)
