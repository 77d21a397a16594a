from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from mapping_portal.constants.platform import CARDINALITY_VALUES
from mapping_portal.schemas.base import AliasedModel, OperationResponse, OptionalText


def _copy_legacy_key(data: Any, legacy: str, alias: str) -> Any:
    if isinstance(data, dict) and legacy in data and alias not in data:
        data = dict(data)
        data[alias] = data.pop(legacy)
    return data


class EntityColumn(AliasedModel):
    source_column: str = Field(alias="sourceColumn")
    target_column: OptionalText = Field(default=None, alias="targetColumn")
    data_type: OptionalText = Field(default=None, alias="dataType")
    track_changes: bool = Field(default=False, alias="trackChanges")
    transform: OptionalText = None
    description: OptionalText = None

    @model_validator(mode="before")
    @classmethod
    def _accept_wizard_type_key(cls, data: Any) -> Any:
        return _copy_legacy_key(data, "type", "dataType")

    @property
    def output_name(self) -> str:
        return self.target_column or self.source_column


class Relationship(AliasedModel):
    target_entity: str = Field(alias="targetEntity")
    join_key_column: str = Field(alias="joinKeyColumn")
    cardinality: str
    required: bool = False
    description: OptionalText = None

    @model_validator(mode="before")
    @classmethod
    def _accept_wizard_join_key(cls, data: Any) -> Any:
        return _copy_legacy_key(data, "joinKey", "joinKeyColumn")

    @field_validator("cardinality")
    @classmethod
    def _validate_cardinality(cls, value: str) -> str:
        if value not in CARDINALITY_VALUES:
            raise ValueError(f"Unsupported cardinality '{value}'")
        return value


class CdcConfig(AliasedModel):
    transaction_time_column: OptionalText = Field(default=None, alias="transactionTimeColumn")
    ingestion_time_column: OptionalText = Field(default=None, alias="ingestionTimeColumn")
    source_system: OptionalText = Field(default=None, alias="sourceSystem")


class PlatformEntityConfig(AliasedModel):
    entity_type: OptionalText = Field(default=None, alias="entityType")
    model_name: OptionalText = Field(default=None, alias="modelName")
    source_table: OptionalText = Field(default=None, alias="sourceTable")
    primary_key: OptionalText = Field(default=None, alias="primaryKey")
    description: OptionalText = None
    columns: List[EntityColumn] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    cdc_config: Optional[CdcConfig] = Field(default=None, alias="cdcConfig")


class EntityTypeResponse(AliasedModel):
    key: str
    display_name: str = Field(alias="displayName")
    description: str
    control_fields: List[str] = Field(alias="controlFields")
    icon: str
    color: str
    materialization: str


class CardinalityTypeResponse(AliasedModel):
    value: str
    label: str
    description: str


class PlatformEntitySummary(AliasedModel):
    name: str
    description: Optional[str] = None
    entity_type: Optional[str] = Field(default=None, alias="entityType")
    primary_key: Optional[str] = Field(default=None, alias="primaryKey")
    relationships: List[Relationship] = Field(default_factory=list)
    column_count: int = Field(default=0, alias="columnCount")


class PlatformEntityResponse(OperationResponse):
    model_name: str = Field(alias="modelName")
    files: List[str] = Field(default_factory=list)
