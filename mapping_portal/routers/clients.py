from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mapping_portal.dependencies import get_project_store, get_publisher
from mapping_portal.exceptions import ConfigValidationError, NotFoundError, PersistenceError
from mapping_portal.schemas.clients import (
    ClientMappingRequest,
    ClientMappingResponse,
    ClientSummary,
    DemoResetResponse,
)
from mapping_portal.services.client_mappings import (
    get_client_mapping,
    list_clients,
    reset_demo,
    submit_client_mapping,
)
from mapping_portal.services.git_publisher import Publisher
from mapping_portal.services.project_store import DbtProjectStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Client Mappings"])


@router.get("/clients", response_model=List[ClientSummary])
def read_clients(store: DbtProjectStore = Depends(get_project_store)) -> List[ClientSummary]:
    try:
        return list_clients(store)
    except PersistenceError as exc:
        logger.error("Error reading clients: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read client mappings",
        ) from exc


@router.get("/clients/{client_code}")
def read_client(client_code: str, store: DbtProjectStore = Depends(get_project_store)) -> Dict[str, Any]:
    try:
        return get_client_mapping(store, client_code)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.error("Error reading client %s: %s", client_code, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read client mapping",
        ) from exc


@router.post("/clients", response_model=ClientMappingResponse, response_model_exclude_none=True)
def create_client_mapping(
    request: ClientMappingRequest,
    store: DbtProjectStore = Depends(get_project_store),
    publisher: Publisher = Depends(get_publisher),
) -> ClientMappingResponse:
    try:
        result = submit_client_mapping(store, publisher, request)
    except ConfigValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.error("Error creating client mapping: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create client mapping: {exc}",
        ) from exc

    if result.warning:
        message = "Client mapping created (git commit failed)"
    else:
        message = "Client mapping created successfully"
    return ClientMappingResponse(message=message, filename=result.filename, warning=result.warning)


@router.post("/reset-demo", response_model=DemoResetResponse, response_model_exclude_none=True)
def reset_demo_data(
    confirm: bool = Query(default=False, description="Must be true; the reset deletes client mapping files."),
    store: DbtProjectStore = Depends(get_project_store),
    publisher: Publisher = Depends(get_publisher),
) -> DemoResetResponse:
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Resetting demo data deletes client mappings; repeat the request with confirm=true.",
        )
    try:
        result = reset_demo(store, publisher)
    except PersistenceError as exc:
        logger.error("Error resetting demo data: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reset demo data: {exc}",
        ) from exc

    if result.warning:
        message = "Demo data reset (git commit failed)"
    else:
        message = "Demo data reset successfully"
    return DemoResetResponse(
        message=message,
        remaining_clients=result.remaining_clients,
        deleted_files=result.deleted_files,
        warning=result.warning,
    )
