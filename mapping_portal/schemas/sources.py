from __future__ import annotations

from mapping_portal.schemas.base import AliasedModel


class SourceColumnResponse(AliasedModel):
    name: str
    type: str
    sample: str = ""
    nullable: bool = False
