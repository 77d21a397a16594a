from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class EntityTypeDefinition:
    key: str
    display_name: str
    description: str
    control_fields: Tuple[str, ...]
    icon: str
    color: str
    materialization: str


@dataclass(frozen=True)
class CardinalityType:
    value: str
    label: str
    description: str


_LINEAGE_FIELDS = ("_loaded_at", "_source_schema", "_model_name", "_dbt_run_id")

ENTITY_TYPES: Mapping[str, EntityTypeDefinition] = MappingProxyType(
    {
        "dimension": EntityTypeDefinition(
            key="dimension",
            display_name="Dimension",
            description=(
                "Slowly Changing Dimension (SCD Type 2) with automatic surrogate keys and validity tracking"
            ),
            control_fields=("_surrogate_key", "_valid_from", "_valid_to", "_is_current") + _LINEAGE_FIELDS,
            icon="📊",
            color="#4F46E5",
            materialization="table",
        ),
        "fact": EntityTypeDefinition(
            key="fact",
            display_name="Fact Table",
            description="Transactional fact table with CDC tracking and incremental processing support",
            control_fields=("_transaction_time", "_ingestion_time", "_source_system") + _LINEAGE_FIELDS,
            icon="📈",
            color="#059669",
            materialization="incremental",
        ),
        "bridge": EntityTypeDefinition(
            key="bridge",
            display_name="Bridge Table",
            description="Many-to-many relationship bridge with link validity tracking",
            control_fields=("_relationship_created_at", "_is_active") + _LINEAGE_FIELDS,
            icon="🔗",
            color="#D97706",
            materialization="table",
        ),
        "snapshot": EntityTypeDefinition(
            key="snapshot",
            display_name="Snapshot",
            description="Point-in-time snapshot for tracking historical state",
            control_fields=("_snapshot_date", "_snapshot_timestamp") + _LINEAGE_FIELDS,
            icon="📸",
            color="#7C3AED",
            materialization="table",
        ),
        "staging": EntityTypeDefinition(
            key="staging",
            display_name="Staging",
            description="Minimal transformation layer with basic lineage tracking",
            control_fields=("_layer",) + _LINEAGE_FIELDS,
            icon="📥",
            color="#6B7280",
            materialization="view",
        ),
    }
)

CONTROL_FIELD_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "_surrogate_key": "Platform-generated surrogate key for each row version.",
        "_valid_from": "Timestamp from which this row version is valid.",
        "_valid_to": "Timestamp until which this row version is valid (null while current).",
        "_is_current": "True for the current version of the record.",
        "_transaction_time": "Business transaction time used as the incremental watermark.",
        "_ingestion_time": "Time the record was ingested from the source system.",
        "_source_system": "Identifier of the system the record originated from.",
        "_relationship_created_at": "Time the relationship link was first observed.",
        "_is_active": "True while the relationship link is active.",
        "_snapshot_date": "Calendar date of the snapshot.",
        "_snapshot_timestamp": "Exact time the snapshot was taken.",
        "_layer": "Data layer the model belongs to.",
        "_loaded_at": "Time the row was loaded by the platform.",
        "_source_schema": "Schema the source data was read from.",
        "_model_name": "Name of the dbt model that produced the row.",
        "_dbt_run_id": "Invocation id of the dbt run that produced the row.",
    }
)

CARDINALITY_TYPES: Tuple[CardinalityType, ...] = (
    CardinalityType(
        value="one_to_one",
        label="One-to-One (1:1)",
        description="Each record in A relates to exactly one record in B",
    ),
    CardinalityType(
        value="one_to_many",
        label="One-to-Many (1:N)",
        description="Each record in A can relate to multiple records in B",
    ),
    CardinalityType(
        value="many_to_one",
        label="Many-to-One (N:1)",
        description="Multiple records in A relate to one record in B",
    ),
    CardinalityType(
        value="many_to_many",
        label="Many-to-Many (N:M)",
        description="Multiple records in A relate to multiple records in B (requires bridge table)",
    ),
)

CARDINALITY_VALUES = frozenset(cardinality.value for cardinality in CARDINALITY_TYPES)

DEFAULT_WATERMARK_COLUMN = "updated_at"
PRIMARY_KEY_TESTS: Tuple[str, ...] = ("unique", "not_null")


def get_entity_type(key: Optional[str]) -> Optional[EntityTypeDefinition]:
    if not key:
        return None
    return ENTITY_TYPES.get(key)


def control_field_description(name: str) -> str:
    return CONTROL_FIELD_DESCRIPTIONS.get(name, f"Platform control field {name}.")
