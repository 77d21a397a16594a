from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from mapping_portal.exceptions import SourceNotFoundError

logger = logging.getLogger(__name__)

CSV_SUFFIX = ".csv"
EXCEL_SUFFIXES = (".xlsx", ".xlsm")
SOURCE_SUFFIXES = (CSV_SUFFIX,) + EXCEL_SUFFIXES

_INTEGER_PATTERN = re.compile(r"^\d+$")
_DECIMAL_PATTERN = re.compile(r"^\d+\.\d+$")
_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
_BOOLEAN_LITERALS = {"true", "false"}


@dataclass(frozen=True)
class SourceColumn:
    name: str
    inferred_type: str
    sample_value: str
    nullable: bool


def infer_column_type(sample: Optional[str]) -> str:
    """Classify a sample value. The first matching rule wins."""

    value = (sample or "").strip()
    if _INTEGER_PATTERN.match(value):
        return "integer"
    if _DECIMAL_PATTERN.match(value):
        return "decimal"
    if _TIMESTAMP_PATTERN.match(value):
        return "timestamp"
    if value in _BOOLEAN_LITERALS:
        return "boolean"
    return "string"


class SourceCatalog:
    """Expose seed files in a dbt project as browsable source tables.

    Each source set is a directory of delimited (or Excel) sample files; the
    file name without its extension is the table name.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def list_sources(self, source_set: str) -> List[str]:
        directory = self._source_set_path(source_set)
        tables = {
            path.stem
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in SOURCE_SUFFIXES
        }
        logger.debug("Found %d source tables in %s", len(tables), directory)
        return sorted(tables)

    def describe_columns(self, source_set: str, table: str) -> List[SourceColumn]:
        path = self._resolve_table_path(source_set, table)
        if path.suffix.lower() in EXCEL_SUFFIXES:
            headers, sample_row = self._read_excel_rows(path)
        else:
            headers, sample_row = self._read_csv_rows(path)

        columns: List[SourceColumn] = []
        for index, name in enumerate(headers):
            sample = sample_row[index] if index < len(sample_row) else ""
            columns.append(
                SourceColumn(
                    name=name,
                    inferred_type=infer_column_type(sample),
                    sample_value=sample,
                    nullable=sample == "",
                )
            )
        return columns

    # ------------------------------------------------------------------
    # File helpers

    def _source_set_path(self, source_set: str) -> Path:
        directory = self.root / source_set
        if not directory.is_dir():
            raise SourceNotFoundError(f"Source set '{source_set}' not found at {directory}")
        return directory

    def _resolve_table_path(self, source_set: str, table: str) -> Path:
        directory = self._source_set_path(source_set)
        if not table or Path(table).name != table:
            raise SourceNotFoundError(f"Source table '{table}' not found in '{source_set}'")
        for suffix in SOURCE_SUFFIXES:
            candidate = directory / f"{table}{suffix}"
            if candidate.is_file():
                return candidate
        raise SourceNotFoundError(f"Source table '{table}' not found in '{source_set}'")

    def _read_csv_rows(self, path: Path) -> tuple[List[str], List[str]]:
        # Plain comma splitting: quoted values containing commas are not supported.
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceNotFoundError(f"Unable to read source file {path}: {exc}") from exc
        lines = content.split("\n")
        if not lines[0].strip():
            return [], []
        headers = [header.strip() for header in lines[0].split(",")]
        sample_row = [value.strip() for value in lines[1].split(",")] if len(lines) > 1 else []
        return headers, sample_row

    def _read_excel_rows(self, path: Path) -> tuple[List[str], List[str]]:
        try:
            workbook = load_workbook(filename=path, read_only=True, data_only=True)
        except (InvalidFileException, OSError, KeyError) as exc:
            raise SourceNotFoundError(f"Unable to read source workbook {path}: {exc}") from exc
        try:
            sheet = workbook.active
            rows = sheet.iter_rows(min_row=1, max_row=2, values_only=True)
            header_values: Sequence[Any] = next(rows, ()) or ()
            sample_values: Sequence[Any] = next(rows, ()) or ()
        finally:
            workbook.close()

        headers = [_stringify_cell(value) for value in header_values]
        while headers and not headers[-1]:
            headers.pop()
        sample_row = [_stringify_cell(value) for value in sample_values]
        return headers, sample_row


def _stringify_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


__all__ = ["SourceCatalog", "SourceColumn", "infer_column_type"]
