"""In-memory schema source, optionally loaded from a JSON file."""

import json
from pathlib import Path
from typing import Optional, Union

from ..mapping.models import AliasTable, FieldMapping, TargetField
from .base import SchemaSource


class StaticSchemaSource(SchemaSource):
    """Serves a fixed field list, default mapping and alias table."""

    def __init__(
        self,
        fields: Optional[list[TargetField]] = None,
        default_mapping: Optional[FieldMapping] = None,
        alias_table: Optional[AliasTable] = None,
    ):
        self.fields = list(fields or [])
        self.default_mapping = dict(default_mapping or {})
        self.alias_table = dict(alias_table or {})

    @classmethod
    def from_dict(cls, data: dict) -> "StaticSchemaSource":
        """
        Build from ``{"fields": [...], "defaultMapping": {...}, "aliases": {...}}``.

        Field entries use the wire shape ``{"apiName": ..., "label": ...}``.
        """
        return cls(
            fields=[TargetField.model_validate(item) for item in data.get("fields", [])],
            default_mapping=data.get("defaultMapping", {}),
            alias_table=data.get("aliases", {}),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticSchemaSource":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    async def get_available_fields(
        self, object_to_create: Optional[str], mapping_metadata_object: Optional[str]
    ) -> list[TargetField]:
        return list(self.fields)

    async def get_default_mapping(self, mapping_metadata_object: Optional[str]) -> FieldMapping:
        return dict(self.default_mapping)

    async def get_alias_table(self, mapping_metadata_object: Optional[str]) -> AliasTable:
        return {k: list(v) for k, v in self.alias_table.items()}
