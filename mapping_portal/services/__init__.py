from mapping_portal.services.entity_renderer import PlatformEntityRenderer
from mapping_portal.services.git_publisher import GitPublisher, publish_best_effort
from mapping_portal.services.mapping_renderer import ClientMappingRenderer
from mapping_portal.services.project_store import DbtProjectStore
from mapping_portal.services.source_catalog import SourceCatalog

__all__ = [
    "ClientMappingRenderer",
    "DbtProjectStore",
    "GitPublisher",
    "PlatformEntityRenderer",
    "SourceCatalog",
    "publish_best_effort",
]
