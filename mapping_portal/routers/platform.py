from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from mapping_portal.config import Settings, get_settings
from mapping_portal.constants.platform import CARDINALITY_TYPES, ENTITY_TYPES
from mapping_portal.dependencies import get_project_store, get_publisher, get_source_catalog
from mapping_portal.exceptions import ConfigValidationError, PersistenceError, SourceNotFoundError
from mapping_portal.routers.sources import serialize_columns, source_set_label
from mapping_portal.schemas.base import OperationResponse
from mapping_portal.schemas.platform import (
    CardinalityTypeResponse,
    EntityTypeResponse,
    PlatformEntityConfig,
    PlatformEntityResponse,
    PlatformEntitySummary,
)
from mapping_portal.schemas.sources import SourceColumnResponse
from mapping_portal.services.git_publisher import Publisher
from mapping_portal.services.platform_entities import (
    delete_platform_entity,
    list_platform_entities,
    save_platform_entity,
)
from mapping_portal.services.project_store import DbtProjectStore
from mapping_portal.services.source_catalog import SourceCatalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/platform", tags=["Platform Entities"])


@router.get("/entity-types", response_model=List[EntityTypeResponse])
def read_entity_types() -> List[EntityTypeResponse]:
    return [
        EntityTypeResponse(
            key=definition.key,
            display_name=definition.display_name,
            description=definition.description,
            control_fields=list(definition.control_fields),
            icon=definition.icon,
            color=definition.color,
            materialization=definition.materialization,
        )
        for definition in ENTITY_TYPES.values()
    ]


@router.get("/cardinality-types", response_model=List[CardinalityTypeResponse])
def read_cardinality_types() -> List[CardinalityTypeResponse]:
    return [
        CardinalityTypeResponse(value=item.value, label=item.label, description=item.description)
        for item in CARDINALITY_TYPES
    ]


@router.get("/sources")
def read_platform_sources(
    settings: Settings = Depends(get_settings),
    catalog: SourceCatalog = Depends(get_source_catalog),
) -> Dict[str, List[str]]:
    try:
        tables = catalog.list_sources(settings.platform_seeds_dir)
    except SourceNotFoundError as exc:
        logger.error("Error reading platform sources: %s", exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to read platform sources") from exc
    return {source_set_label(settings.platform_seeds_dir): tables}


@router.get("/sources/{table}/schema", response_model=List[SourceColumnResponse])
def read_platform_source_schema(
    table: str,
    settings: Settings = Depends(get_settings),
    catalog: SourceCatalog = Depends(get_source_catalog),
) -> List[SourceColumnResponse]:
    try:
        columns = catalog.describe_columns(settings.platform_seeds_dir, table)
    except SourceNotFoundError as exc:
        logger.error("Error reading platform source schema %s: %s", table, exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to read source schema") from exc
    return serialize_columns(columns)


@router.get("/entities", response_model=List[PlatformEntitySummary])
def read_platform_entities(store: DbtProjectStore = Depends(get_project_store)) -> List[PlatformEntitySummary]:
    try:
        return list_platform_entities(store)
    except PersistenceError as exc:
        logger.error("Error reading platform entities: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read platform entities",
        ) from exc


@router.post("/entities", response_model=PlatformEntityResponse, response_model_exclude_none=True)
def create_platform_entity(
    config: PlatformEntityConfig,
    store: DbtProjectStore = Depends(get_project_store),
    publisher: Publisher = Depends(get_publisher),
) -> PlatformEntityResponse:
    try:
        result = save_platform_entity(store, publisher, config)
    except ConfigValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.error("Error creating platform entity: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create platform entity: {exc}",
        ) from exc

    if result.warning:
        message = f"Platform entity {result.model_name} created (git commit failed)"
    else:
        message = f"Platform entity {result.model_name} created successfully"
    return PlatformEntityResponse(
        message=message,
        model_name=result.model_name,
        files=result.files,
        warning=result.warning,
    )


@router.delete("/entities/{name}", response_model=OperationResponse, response_model_exclude_none=True)
def remove_platform_entity(
    name: str,
    store: DbtProjectStore = Depends(get_project_store),
    publisher: Publisher = Depends(get_publisher),
) -> OperationResponse:
    try:
        result = delete_platform_entity(store, publisher, name)
    except ConfigValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.error("Error deleting platform entity %s: %s", name, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete platform entity: {exc}",
        ) from exc

    if not result.removed:
        message = f"Platform entity {name} does not exist"
    elif result.warning:
        message = f"Platform entity {name} deleted (git commit failed)"
    else:
        message = f"Platform entity {name} deleted"
    return OperationResponse(message=message, warning=result.warning)
