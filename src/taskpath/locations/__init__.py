"""Locations and path-addressed trees.

Provides the value types the resource layer is built on:
- Loc and Layer: physical locations and fallback candidates
- LocationTree: immutable trees addressed by segment paths
"""

from taskpath.locations.loc import (
    Loc,
    Layer,
    LocLayers,
    LAYER_SEPARATOR,
    render_layers,
)
from taskpath.locations.tree import (
    TreePath,
    LocationTree,
    path_to_text,
    path_from_text,
    path_to_dotted,
    path_from_dotted,
)

__all__ = [
    "Loc",
    "Layer",
    "LocLayers",
    "LAYER_SEPARATOR",
    "render_layers",
    "TreePath",
    "LocationTree",
    "path_to_text",
    "path_from_text",
    "path_to_dotted",
    "path_from_dotted",
]
