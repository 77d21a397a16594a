"""Insert-or-replace helpers for ordered lists of YAML records keyed by a natural identifier."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

Record = Mapping[str, Any]


def find_record(records: Iterable[Record], key_field: str, key_value: Any) -> Optional[Record]:
    for record in records or []:
        if isinstance(record, Mapping) and record.get(key_field) == key_value:
            return record
    return None


def upsert_record(records: Optional[Iterable[Record]], key_field: str, record: Record) -> List[Record]:
    """Return a new list with ``record`` replacing the entry sharing its key, or appended.

    The input list is never mutated. An existing entry keeps its position so
    that repeated submissions do not reorder the document.
    """

    key_value = record[key_field]
    merged: List[Record] = list(records or [])
    for index, existing in enumerate(merged):
        if isinstance(existing, Mapping) and existing.get(key_field) == key_value:
            merged[index] = record
            return merged
    merged.append(record)
    return merged


def remove_records(records: Optional[Iterable[Record]], key_field: str, key_value: Any) -> List[Record]:
    """Return a new list without the entries whose ``key_field`` equals ``key_value``."""

    return [
        existing
        for existing in records or []
        if not (isinstance(existing, Mapping) and existing.get(key_field) == key_value)
    ]


__all__ = ["find_record", "remove_records", "upsert_record"]
