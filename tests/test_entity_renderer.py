from __future__ import annotations

import pytest

from mapping_portal.constants.platform import ENTITY_TYPES
from mapping_portal.exceptions import ConfigValidationError
from mapping_portal.schemas.platform import EntityColumn, PlatformEntityConfig
from mapping_portal.services.entity_renderer import PlatformEntityRenderer, render_column_projection


def _dimension_config(**overrides) -> PlatformEntityConfig:
    payload = {
        "entityType": "dimension",
        "modelName": "dim_customer",
        "sourceTable": "customers",
        "primaryKey": "customer_id",
        "columns": [
            {"sourceColumn": "customer_id", "dataType": "integer"},
            {"sourceColumn": "customer_name", "targetColumn": "name", "trackChanges": True},
            {"sourceColumn": "email", "transform": "LOWER(email)", "trackChanges": True},
            {"sourceColumn": "segment"},
        ],
    }
    payload.update(overrides)
    return PlatformEntityConfig.model_validate(payload)


def _fact_config(**overrides) -> PlatformEntityConfig:
    payload = {
        "entityType": "fact",
        "modelName": "fct_orders",
        "sourceTable": "orders",
        "primaryKey": "order_id",
        "columns": [{"sourceColumn": "order_id"}, {"sourceColumn": "order_total"}],
        "relationships": [
            {"targetEntity": "dim_customer", "joinKeyColumn": "customer_id", "cardinality": "many_to_one"},
        ],
    }
    payload.update(overrides)
    return PlatformEntityConfig.model_validate(payload)


def test_dimension_record_carries_scd_metadata_and_control_fields() -> None:
    rendered = PlatformEntityRenderer().render(_dimension_config())

    record = rendered.record
    assert record["name"] == "dim_customer"
    assert record["description"] == "Dimension built from customers"
    assert record["meta"]["platform"] == {
        "entity_type": "dimension",
        "primary_key": "customer_id",
        "scd_type": 2,
        "track_changes_columns": ["name", "email"],
    }

    column_names = [column["name"] for column in record["columns"]]
    assert column_names[:4] == ["customer_id", "name", "email", "segment"]
    assert column_names[4:] == list(ENTITY_TYPES["dimension"].control_fields)
    assert record["columns"][0]["tests"] == ["unique", "not_null"]
    assert "tests" not in record["columns"][1]
    assert record["columns"][3]["description"] == "Source column segment"


def test_dimension_template_is_a_table_with_projections() -> None:
    template = PlatformEntityRenderer().render(_dimension_config()).template

    assert template.startswith("{{ config(materialized='table', tags=['platform', 'dimension']) }}\n")
    assert "-- Platform entity: dim_customer (Dimension)" in template
    assert "-- Source: customers" in template
    assert (
        "select\n"
        "    customer_id,\n"
        "    customer_name AS name,\n"
        "    LOWER(email) AS email,\n"
        "    segment\n"
        "from {{ source('platform_demo', 'customers') }}"
    ) in template
    assert "is_incremental" not in template
    assert template.endswith("\n")


def test_fact_template_is_incremental_with_default_watermark() -> None:
    rendered = PlatformEntityRenderer(source_name="sales").render(_fact_config())

    template = rendered.template
    assert "materialized='incremental', unique_key='order_id'" in template
    assert "from {{ source('sales', 'orders') }}" in template
    assert "-- Relationships:\n-- customer_id -> dim_customer (many_to_one)" in template
    assert (
        "{% if is_incremental() %}\n"
        "where updated_at > (select max(_transaction_time) from {{ this }})\n"
        "{% endif %}"
    ) in template
    assert "cdc_config" not in rendered.record["meta"]["platform"]
    assert rendered.record["meta"]["platform"]["relationships"] == [
        {
            "target_entity": "dim_customer",
            "join_key_column": "customer_id",
            "cardinality": "many_to_one",
            "required": False,
        }
    ]


def test_fact_uses_cdc_transaction_time_as_watermark() -> None:
    config = _fact_config(cdcConfig={"transactionTimeColumn": "order_ts", "sourceSystem": "shop"})

    rendered = PlatformEntityRenderer().render(config)

    assert "where order_ts > (select max(_transaction_time) from {{ this }})" in rendered.template
    assert rendered.record["meta"]["platform"]["cdc_config"] == {
        "transaction_time_column": "order_ts",
        "source_system": "shop",
    }


def test_entity_without_columns_selects_everything() -> None:
    config = PlatformEntityConfig.model_validate(
        {"entityType": "staging", "modelName": "stg_orders", "sourceTable": "orders", "primaryKey": "order_id"}
    )

    rendered = PlatformEntityRenderer().render(config)

    assert "materialized='view'" in rendered.template
    assert "select\n    *\nfrom {{ source('platform_demo', 'orders') }}" in rendered.template
    assert [column["name"] for column in rendered.record["columns"]] == list(ENTITY_TYPES["staging"].control_fields)


def test_column_projection_ignores_identity_transform() -> None:
    column = EntityColumn.model_validate({"sourceColumn": "segment", "transform": "segment"})

    assert render_column_projection(column) == "segment"


def test_legacy_wizard_keys_are_accepted() -> None:
    column = EntityColumn.model_validate({"sourceColumn": "id", "type": "integer"})
    config = _fact_config(
        relationships=[{"targetEntity": "dim_customer", "joinKey": "customer_id", "cardinality": "one_to_one"}]
    )

    assert column.data_type == "integer"
    assert config.relationships[0].join_key_column == "customer_id"


def test_missing_entity_fields_are_reported() -> None:
    config = PlatformEntityConfig.model_validate({"entityType": "fact", "columns": []})

    with pytest.raises(ConfigValidationError) as excinfo:
        PlatformEntityRenderer().render(config)

    assert excinfo.value.missing_fields == ["modelName", "sourceTable", "primaryKey"]
    assert str(excinfo.value).startswith("Missing required entity fields:")


def test_unknown_entity_type_is_rejected() -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        PlatformEntityRenderer().render(_dimension_config(entityType="cube"))

    assert excinfo.value.missing_fields == ["entityType"]


@pytest.mark.parametrize("model_name", ["../dim_customer", "dim-customer", "1dim"])
def test_invalid_model_names_are_rejected(model_name: str) -> None:
    with pytest.raises(ConfigValidationError):
        PlatformEntityRenderer().render(_dimension_config(modelName=model_name))
