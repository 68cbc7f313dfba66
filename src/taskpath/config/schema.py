"""Pydantic validation models for pipeline configuration documents.

A pipeline document has two reserved sections and may carry any
number of other sections for the pipeline's own settings:

    locations: /data/run1            # or a table, see LayerEntry
    data:
      params:
        threshold:
          _data: 0.5
    settings:
      workers: 4
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskpath.resources.mapping import MappingSpec, mapping_spec_from_document


class LayerEntrySchema(BaseModel):
    """Explicit layer entry of a ``locations`` table.

    Attributes:
        loc: Location text.
        ext: Serialization extension (defaults to the resource's).
    """

    model_config = ConfigDict(extra="forbid")

    loc: str
    ext: Optional[str] = None


LayerEntry = Union[str, LayerEntrySchema]
LocationsSection = Union[str, Dict[str, Union[None, LayerEntry, List[LayerEntry]]]]


class PipelineConfigSchema(BaseModel):
    """Root configuration schema of a pipeline.

    Attributes:
        locations: Root location, or table of layers per slash-form path.
        data: Embedded values, mirroring the resource tree.
    """

    model_config = ConfigDict(extra="allow")

    locations: LocationsSection = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("locations")
    @classmethod
    def validate_locations(cls, v: Any) -> Any:
        """Validate that table keys are slash-form paths."""
        if isinstance(v, dict):
            for key in v:
                if not key.startswith("/"):
                    raise ValueError(f"Location path must start with '/': {key!r}")
        return v

    def mapping_spec(self) -> MappingSpec:
        """The resolver's mapping spec described by ``locations``.

        Raises:
            MappingDocumentError: If the section cannot be read.
        """
        return mapping_spec_from_document(self.locations_document())

    def locations_document(self) -> Any:
        """``locations`` as plain YAML values."""
        if isinstance(self.locations, str):
            return self.locations
        doc: Dict[str, Any] = {}
        for key, value in self.locations.items():
            doc[key] = _entry_document(value)
        return doc

    def section(self, name: str, default: Any = None) -> Any:
        """Return an extra top-level section by name."""
        extra = self.model_extra or {}
        return extra.get(name, default)


def _entry_document(value: Any) -> Any:
    if isinstance(value, list):
        return [_entry_document(v) for v in value]
    if isinstance(value, LayerEntrySchema):
        return value.model_dump(exclude_none=True)
    return value


__all__ = [
    "LayerEntrySchema",
    "LayerEntry",
    "LocationsSection",
    "PipelineConfigSchema",
]
