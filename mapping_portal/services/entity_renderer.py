from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from mapping_portal.constants.platform import (
    DEFAULT_WATERMARK_COLUMN,
    ENTITY_TYPES,
    PRIMARY_KEY_TESTS,
    EntityTypeDefinition,
    control_field_description,
    get_entity_type,
)
from mapping_portal.exceptions import ConfigValidationError
from mapping_portal.schemas.platform import EntityColumn, PlatformEntityConfig, Relationship

DEFAULT_SOURCE_NAME = "platform_demo"
DIMENSION_SCD_TYPE = 2
WATERMARK_CONTROL_FIELD = "_transaction_time"
MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

REQUIRED_ENTITY_FIELDS = (
    ("model_name", "modelName"),
    ("entity_type", "entityType"),
    ("source_table", "sourceTable"),
    ("primary_key", "primaryKey"),
)


@dataclass(frozen=True)
class RenderedPlatformEntity:
    model_name: str
    record: Dict[str, Any]
    template: str


def is_valid_model_name(name: str) -> bool:
    return bool(name) and MODEL_NAME_PATTERN.match(name) is not None


def validate_entity_config(config: PlatformEntityConfig) -> EntityTypeDefinition:
    missing = [wire_name for attribute, wire_name in REQUIRED_ENTITY_FIELDS if not getattr(config, attribute)]
    if missing:
        raise ConfigValidationError(missing, "Missing required entity fields: " + ", ".join(missing))
    if not is_valid_model_name(config.model_name):
        raise ConfigValidationError(
            ["modelName"],
            "modelName must start with a letter or underscore and contain only letters, digits and underscores",
        )
    entity_type = get_entity_type(config.entity_type)
    if entity_type is None:
        supported = ", ".join(ENTITY_TYPES)
        raise ConfigValidationError(
            ["entityType"],
            f"Unsupported entity type '{config.entity_type}'. Expected one of: {supported}",
        )
    return entity_type


def render_column_projection(column: EntityColumn) -> str:
    transform = column.transform
    has_transform = bool(transform) and transform != column.source_column
    if has_transform or column.output_name != column.source_column:
        expression = transform if has_transform else column.source_column
        return f"{expression} AS {column.output_name}"
    return column.source_column


def render_relationship_comment(relationship: Relationship) -> str:
    return f"{relationship.join_key_column} -> {relationship.target_entity} ({relationship.cardinality})"


class PlatformEntityRenderer:
    """Render a platform entity definition into a dbt model and its schema entry."""

    def __init__(self, *, source_name: str = DEFAULT_SOURCE_NAME) -> None:
        self.source_name = source_name

    def render(self, config: PlatformEntityConfig) -> RenderedPlatformEntity:
        entity_type = validate_entity_config(config)
        return RenderedPlatformEntity(
            model_name=config.model_name,
            record=self._build_record(config, entity_type),
            template=self._render_template(config, entity_type),
        )

    # ------------------------------------------------------------------
    # Schema entry

    def _build_record(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> Dict[str, Any]:
        description = config.description or f"{entity_type.display_name} built from {config.source_table}"
        return {
            "name": config.model_name,
            "description": description,
            "meta": {"platform": self._build_platform_meta(config, entity_type)},
            "columns": self._build_columns(config, entity_type),
        }

    def _build_platform_meta(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> Dict[str, Any]:
        meta: Dict[str, Any] = {
            "entity_type": entity_type.key,
            "primary_key": config.primary_key,
        }
        if entity_type.key == "dimension":
            meta["scd_type"] = DIMENSION_SCD_TYPE
            meta["track_changes_columns"] = [
                column.output_name for column in config.columns if column.track_changes
            ]
        if entity_type.key == "fact" and config.cdc_config is not None:
            meta["cdc_config"] = config.cdc_config.model_dump(exclude_none=True)
        if config.relationships:
            meta["relationships"] = [self._relationship_entry(item) for item in config.relationships]
        return meta

    def _relationship_entry(self, relationship: Relationship) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "target_entity": relationship.target_entity,
            "join_key_column": relationship.join_key_column,
            "cardinality": relationship.cardinality,
            "required": relationship.required,
        }
        if relationship.description:
            entry["description"] = relationship.description
        return entry

    def _build_columns(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> List[Dict[str, Any]]:
        columns: List[Dict[str, Any]] = []
        for column in config.columns:
            entry: Dict[str, Any] = {
                "name": column.output_name,
                "description": column.description or f"Source column {column.source_column}",
            }
            if config.primary_key in (column.output_name, column.source_column):
                entry["tests"] = list(PRIMARY_KEY_TESTS)
            columns.append(entry)
        for field_name in entity_type.control_fields:
            columns.append({"name": field_name, "description": control_field_description(field_name)})
        return columns

    # ------------------------------------------------------------------
    # Model template

    def _render_template(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> str:
        sections = [
            self._render_config_block(config, entity_type),
            self._render_header(config, entity_type),
            self._render_select(config.columns, config.source_table),
        ]
        if entity_type.key == "fact":
            sections.append(self._render_incremental_filter(config))
        content = "\n".join(section for section in sections if section)
        if not content.endswith("\n"):
            content += "\n"
        return content

    def _render_config_block(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> str:
        parameters = [f"materialized='{entity_type.materialization}'"]
        if entity_type.materialization == "incremental":
            parameters.append(f"unique_key='{config.primary_key}'")
        parameters.append(f"tags={self._format_list(['platform', entity_type.key])}")
        return f"{{{{ config({', '.join(parameters)}) }}}}\n"

    def _render_header(self, config: PlatformEntityConfig, entity_type: EntityTypeDefinition) -> str:
        lines = [
            f"-- Platform entity: {config.model_name} ({entity_type.display_name})",
            f"-- Source: {config.source_table}",
        ]
        if config.relationships:
            lines.append("-- Relationships:")
            lines.extend(f"-- {render_relationship_comment(item)}" for item in config.relationships)
        return "\n".join(lines) + "\n"

    def _render_select(self, columns: Iterable[EntityColumn], source_table: str) -> str:
        projections = [render_column_projection(column) for column in columns]
        if projections:
            select_list = ",\n".join(f"    {projection}" for projection in projections)
        else:
            select_list = "    *"
        return f"select\n{select_list}\nfrom {{{{ source('{self.source_name}', '{source_table}') }}}}"

    def _render_incremental_filter(self, config: PlatformEntityConfig) -> str:
        watermark = self._watermark_column(config)
        return textwrap.dedent(
            f"""
            {{% if is_incremental() %}}
            where {watermark} > (select max({WATERMARK_CONTROL_FIELD}) from {{{{ this }}}})
            {{% endif %}}
            """
        ).strip()

    def _watermark_column(self, config: PlatformEntityConfig) -> str:
        cdc_config = config.cdc_config
        if cdc_config is not None and cdc_config.transaction_time_column:
            return cdc_config.transaction_time_column
        return DEFAULT_WATERMARK_COLUMN

    def _format_list(self, values: Iterable[str]) -> str:
        joined = ", ".join(f"'{value}'" for value in values)
        return f"[{joined}]"


__all__ = [
    "PlatformEntityRenderer",
    "RenderedPlatformEntity",
    "is_valid_model_name",
    "render_column_projection",
    "render_relationship_comment",
    "validate_entity_config",
]
