from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from mapping_portal.schemas.base import AliasedModel, OperationResponse, OptionalText


class MappingKind(str, Enum):
    DIRECT = "direct"
    STATIC = "static"
    FUNCTION = "function"


class ClientMappingConfig(AliasedModel):
    client_code: OptionalText = Field(default=None, alias="clientCode")
    client_name: OptionalText = Field(default=None, alias="clientName")
    source_schema: OptionalText = Field(default=None, alias="sourceSchema")
    source_table: OptionalText = Field(default=None, alias="sourceTable")
    target_model: OptionalText = Field(default=None, alias="targetModel")

    @field_validator("client_code")
    @classmethod
    def _normalize_client_code(cls, value: Optional[str]) -> Optional[str]:
        # Codes identify a client regardless of case.
        return value.upper() if value else value


class FieldMapping(AliasedModel):
    """A single target-field mapping.

    ``expression`` is the SQL fragment that gets persisted. The remaining
    attributes only let the wizard rebuild its expression builder state.
    """

    expression: Optional[str] = None
    kind: Optional[MappingKind] = Field(default=None, alias="type")
    source_field: Optional[str] = Field(default=None, alias="field")
    function: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    cast_type: Optional[str] = Field(default=None, alias="castType")
    static_value: Optional[str] = Field(default=None, alias="staticValue")


class ClientMappingRequest(AliasedModel):
    config: ClientMappingConfig = Field(default_factory=ClientMappingConfig)
    mappings: Dict[str, Optional[FieldMapping]] = Field(default_factory=dict)


class ClientSummary(AliasedModel):
    id: str
    name: str
    target_model: str = Field(alias="targetModel")
    status: str = "Active"
    last_updated: str = Field(alias="lastUpdated")


class ClientMappingResponse(OperationResponse):
    filename: str


class DemoResetResponse(OperationResponse):
    remaining_clients: List[str] = Field(default_factory=list, alias="remainingClients")
    deleted_files: List[str] = Field(default_factory=list, alias="deletedFiles")


class ExpressionPreviewResponse(AliasedModel):
    expression: str
