"""CSV adapter for broker-style transaction exports."""

import csv
from pathlib import Path

from lotbook.exceptions import TransactionImportError
from lotbook.ingestion.base import BaseAdapter, ImportResult

# Header spellings seen in broker exports, mapped to canonical field names
_HEADER_ALIASES: dict[str, str] = {
    "ID": "id",
    "TRANSACTION ID": "id",
    "SYMBOL": "symbol",
    "TICKER": "symbol",
    "TYPE": "type",
    "ACTION": "type",
    "TRANSACTION TYPE": "type",
    "QUANTITY": "quantity",
    "SHARES": "quantity",
    "QTY": "quantity",
    "PRICE": "price",
    "PRICE PER SHARE": "price",
    "AMOUNT": "amount",
    "TOTAL": "amount",
    "FEES": "fees",
    "FEE": "fees",
    "COMMISSION": "fees",
    "DATE": "date",
    "TRADE DATE": "date",
    "DESCRIPTION": "description",
}

_REQUIRED = ("symbol", "type", "quantity", "price", "date")


class CsvAdapter(BaseAdapter):
    """Reads one transaction per row from a headed CSV file."""

    def parse(self, file_path: Path) -> ImportResult:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        text = file_path.read_text(encoding="utf-8-sig")  # Handle BOM
        reader = csv.reader(text.splitlines())
        header = next(reader, None)
        if header is None:
            raise TransactionImportError(file_path.name, "file is empty")

        columns = [_HEADER_ALIASES.get(col.strip().upper()) for col in header]
        missing = [name for name in _REQUIRED if name not in columns]
        if missing:
            raise TransactionImportError(
                file_path.name, f"missing required column(s): {', '.join(missing)}"
            )

        transactions = []
        for row_number, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            record = {
                name: cell for name, cell in zip(columns, row) if name is not None
            }
            transactions.append(self._build_transaction(record, row_number, file_path.stem))

        return ImportResult(source=file_path.name, transactions=transactions)
