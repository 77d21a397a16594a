from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from mapping_portal.exceptions import ConfigValidationError
from mapping_portal.schemas.clients import ClientMappingConfig, FieldMapping
from mapping_portal.services.project_store import dump_yaml

DEFAULT_CREATED_BY = "client-mapping-portal"
CLIENT_MAPPING_SCHEMA_VERSION = 2
CLIENT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# (attribute, wire name) in the order they are reported back to the wizard.
REQUIRED_CONFIG_FIELDS = (
    ("client_name", "clientName"),
    ("client_code", "clientCode"),
    ("target_model", "targetModel"),
    ("source_table", "sourceTable"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RenderedClientMapping:
    filename: str
    record: Dict[str, Any]
    project_entry: Dict[str, Any]
    content: str


def validate_client_config(config: ClientMappingConfig) -> None:
    missing = [wire_name for attribute, wire_name in REQUIRED_CONFIG_FIELDS if not getattr(config, attribute)]
    if missing:
        raise ConfigValidationError(missing)
    if not CLIENT_CODE_PATTERN.match(config.client_code):
        raise ConfigValidationError(
            ["clientCode"],
            "clientCode may only contain letters, digits, underscores and hyphens",
        )


def collect_field_mappings(mappings: Mapping[str, Optional[FieldMapping]]) -> Dict[str, str]:
    """Keep only mappings carrying an expression; the rest are simply unmapped."""

    field_mappings: Dict[str, str] = {}
    for target_field, mapping in mappings.items():
        if mapping is None or not mapping.expression:
            continue
        field_mappings[target_field] = mapping.expression
    return field_mappings


class ClientMappingRenderer:
    """Render a client submission into its mapping file and dbt_project.yml entry."""

    def __init__(
        self,
        *,
        created_by: str = DEFAULT_CREATED_BY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.created_by = created_by
        self.clock = clock

    def render(
        self,
        config: ClientMappingConfig,
        mappings: Mapping[str, Optional[FieldMapping]],
    ) -> RenderedClientMapping:
        validate_client_config(config)
        field_mappings = collect_field_mappings(mappings)

        record: Dict[str, Any] = {
            "client_code": config.client_code,
            "client_name": config.client_name,
            "source_table": config.source_table,
            "target_model": config.target_model,
            "created_by": self.created_by,
            "created_at": self.clock().isoformat(),
            "field_mappings": dict(field_mappings),
        }
        project_entry: Dict[str, Any] = {
            "client_code": config.client_code,
            "client_name": config.client_name,
            "source_table": config.source_table,
            "target_model": config.target_model,
            "field_mappings": dict(field_mappings),
        }
        document = {
            "version": CLIENT_MAPPING_SCHEMA_VERSION,
            "client_config": record,
        }
        return RenderedClientMapping(
            filename=f"{config.client_code.lower()}.yml",
            record=record,
            project_entry=project_entry,
            content=dump_yaml(document),
        )


__all__ = [
    "ClientMappingRenderer",
    "RenderedClientMapping",
    "collect_field_mappings",
    "validate_client_config",
]
