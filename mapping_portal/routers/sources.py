from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from mapping_portal.config import Settings, get_settings
from mapping_portal.dependencies import get_source_catalog
from mapping_portal.exceptions import SourceNotFoundError
from mapping_portal.schemas.sources import SourceColumnResponse
from mapping_portal.services.source_catalog import SourceCatalog, SourceColumn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sources"])


def serialize_columns(columns: List[SourceColumn]) -> List[SourceColumnResponse]:
    return [
        SourceColumnResponse(
            name=column.name,
            type=column.inferred_type,
            sample=column.sample_value,
            nullable=column.nullable,
        )
        for column in columns
    ]


def source_set_label(directory: str) -> str:
    return PurePosixPath(directory).name


@router.get("/sources")
def read_sources(
    settings: Settings = Depends(get_settings),
    catalog: SourceCatalog = Depends(get_source_catalog),
) -> Dict[str, List[str]]:
    try:
        tables = catalog.list_sources(settings.client_seeds_dir)
    except SourceNotFoundError as exc:
        logger.error("Error reading sources: %s", exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to read sources") from exc
    return {source_set_label(settings.client_seeds_dir): tables}


@router.get("/sources/{schema}/{table}", response_model=List[SourceColumnResponse])
def read_source_schema(
    schema: str,
    table: str,
    settings: Settings = Depends(get_settings),
    catalog: SourceCatalog = Depends(get_source_catalog),
) -> List[SourceColumnResponse]:
    # Client sources all live in one seed directory; the schema segment only
    # mirrors how the wizard groups them.
    try:
        columns = catalog.describe_columns(settings.client_seeds_dir, table)
    except SourceNotFoundError as exc:
        logger.error("Error reading source schema %s.%s: %s", schema, table, exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to read source schema") from exc
    return serialize_columns(columns)
