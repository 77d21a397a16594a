from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from mapping_portal.exceptions import ConfigValidationError, PersistenceError
from mapping_portal.schemas.platform import PlatformEntityConfig, PlatformEntitySummary, Relationship
from mapping_portal.services.entity_renderer import PlatformEntityRenderer, is_valid_model_name
from mapping_portal.services.git_publisher import Publisher, publish_best_effort
from mapping_portal.services.project_store import DbtProjectStore
from mapping_portal.services.record_merge import find_record, remove_records, upsert_record

logger = logging.getLogger(__name__)

MODEL_KEY_FIELD = "name"
EMPTY_SCHEMA_DOCUMENT: Dict[str, Any] = {"version": 2, "models": []}


@dataclass(frozen=True)
class PlatformEntityResult:
    model_name: str
    files: List[str] = field(default_factory=list)
    removed: bool = True
    warning: Optional[str] = None


def _models_section(document: Any) -> List[Any]:
    if not isinstance(document, dict):
        raise PersistenceError("Platform schema document does not contain a mapping at its top level")
    document.setdefault("version", 2)
    models = document.get("models")
    if models is None:
        models = []
        document["models"] = models
    if not isinstance(models, list):
        raise PersistenceError("'models' in the platform schema document is not a list")
    return models


def _load_relationships(model_name: Any, items: Any) -> List[Relationship]:
    relationships: List[Relationship] = []
    for item in items or []:
        try:
            relationships.append(Relationship.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid relationship on platform entity %s: %s", model_name, exc)
    return relationships


def _summarize(model: Dict[str, Any]) -> PlatformEntitySummary:
    meta = (model.get("meta") or {}).get("platform") or {}
    relationships = _load_relationships(model.get(MODEL_KEY_FIELD), meta.get("relationships"))
    return PlatformEntitySummary(
        name=model.get(MODEL_KEY_FIELD),
        description=model.get("description"),
        entity_type=meta.get("entity_type"),
        primary_key=meta.get("primary_key"),
        relationships=relationships,
        column_count=len(model.get("columns") or []),
    )


def list_platform_entities(store: DbtProjectStore) -> List[PlatformEntitySummary]:
    path = store.platform_schema_file
    if not path.exists():
        return []
    models = _models_section(store.read_yaml(path, default=EMPTY_SCHEMA_DOCUMENT))
    return [_summarize(model) for model in models if isinstance(model, dict) and model.get(MODEL_KEY_FIELD)]


def save_platform_entity(
    store: DbtProjectStore,
    publisher: Publisher,
    config: PlatformEntityConfig,
    *,
    renderer: Optional[PlatformEntityRenderer] = None,
) -> PlatformEntityResult:
    """Write the entity's model file, upsert its schema entry and publish both."""

    renderer = renderer or PlatformEntityRenderer(source_name=store.settings.platform_source_name)
    rendered = renderer.render(config)

    model_path = store.platform_model_file(rendered.model_name)
    schema_path = store.platform_schema_file
    store.write_text(model_path, rendered.template)

    def mutate(document: Any) -> None:
        document["models"] = upsert_record(_models_section(document), MODEL_KEY_FIELD, rendered.record)

    store.update_yaml(schema_path, mutate, default=EMPTY_SCHEMA_DOCUMENT)
    logger.info("Saved platform entity %s (%s)", rendered.model_name, config.entity_type)

    files = [store.relative_path(model_path), store.relative_path(schema_path)]
    message = (
        f"Add platform entity {rendered.model_name}\n\n"
        f"- Entity type: {config.entity_type}\n"
        f"- Source: {config.source_table}\n"
        f"- Primary key: {config.primary_key}\n"
        "- Created via Platform Entity Designer"
    )
    warning = publish_best_effort(publisher, files, message)
    return PlatformEntityResult(model_name=rendered.model_name, files=files, warning=warning)


def delete_platform_entity(store: DbtProjectStore, publisher: Publisher, model_name: str) -> PlatformEntityResult:
    """Remove the entity's model file and schema entry. Missing pieces are ignored."""

    if not is_valid_model_name(model_name):
        raise ConfigValidationError(["name"], f"Invalid platform entity name '{model_name}'")

    model_path = store.platform_model_file(model_name)
    schema_path = store.platform_schema_file
    removed_file = store.delete_file(model_path)

    removed_entry = False
    if schema_path.exists():
        with store.document_lock(schema_path):
            document = store.read_yaml(schema_path, default=EMPTY_SCHEMA_DOCUMENT)
            models = _models_section(document)
            if find_record(models, MODEL_KEY_FIELD, model_name) is not None:
                document["models"] = remove_records(models, MODEL_KEY_FIELD, model_name)
                store.write_yaml(schema_path, document)
                removed_entry = True

    if not (removed_file or removed_entry):
        logger.info("Platform entity %s not found; nothing to delete", model_name)
        return PlatformEntityResult(model_name=model_name, removed=False)

    files = []
    if removed_file:
        files.append(store.relative_path(model_path))
    if removed_entry:
        files.append(store.relative_path(schema_path))
    warning = publish_best_effort(publisher, files, f"Remove platform entity {model_name}")
    return PlatformEntityResult(model_name=model_name, files=files, warning=warning)


__all__ = [
    "PlatformEntityResult",
    "delete_platform_entity",
    "list_platform_entities",
    "save_platform_entity",
]
