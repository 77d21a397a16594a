from __future__ import annotations

from fastapi import Depends

from mapping_portal.config import Settings, get_settings
from mapping_portal.services.git_publisher import GitPublisher, Publisher
from mapping_portal.services.project_store import DbtProjectStore
from mapping_portal.services.source_catalog import SourceCatalog


def get_project_store(settings: Settings = Depends(get_settings)) -> DbtProjectStore:
    return DbtProjectStore(settings)


def get_publisher(settings: Settings = Depends(get_settings)) -> Publisher:
    return GitPublisher(
        settings.dbt_project_path,
        remote=settings.git_remote,
        branch=settings.git_branch,
        enabled=settings.git_enabled,
    )


def get_source_catalog(store: DbtProjectStore = Depends(get_project_store)) -> SourceCatalog:
    return SourceCatalog(store.root)
