"""Run command for pipeline CLIs."""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from taskpath.locations.tree import LocationTree, TreePath, path_to_text
from taskpath.resources.mapping import MappingSpec, apply_mappings, unbound_paths
from taskpath.resources.nodes import (
    PhysicalFileNode,
    PhysicalResourceTree,
    VirtualResourceTree,
)
from taskpath.resources.split import mapping_view, read_embedded_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineRun:
    """Everything a pipeline needs to start.

    Attributes:
        config: The merged configuration.
        locations: Location-bound resource tree.
        data: Values of the embedded resources, by path.
    """

    config: Any
    locations: PhysicalResourceTree
    data: Dict[TreePath, Any]


RunFn = Callable[[PipelineRun], Optional[int]]


def cmd_run(
    run: Optional[RunFn],
    config: Any,
    tree: VirtualResourceTree,
    spec: MappingSpec,
    data_section: Optional[Dict[str, Any]] = None,
) -> int:
    """Resolve the resources of the pipeline and hand them to ``run``.

    Args:
        run: The pipeline entry point.
        config: Merged configuration.
        tree: Declaration-state tree of the pipeline.
        spec: Mapping spec read from the configuration.
        data_section: ``data`` section of the configuration.

    Returns:
        Exit code returned by ``run`` (0 if it returns None).
    """
    if run is None:
        print("Error: This pipeline has no run function", file=sys.stderr)
        return 1

    view = mapping_view(tree)
    if view is None:
        locations: PhysicalResourceTree = LocationTree(PhysicalFileNode())
    else:
        locations = apply_mappings(view, spec)
        for path in unbound_paths(locations, view):
            logger.warning(f"Resource {path_to_text(path)} is not mapped to any location")

    data = read_embedded_data(tree, data_section)
    logger.info("Running pipeline")
    code = run(PipelineRun(config=config, locations=locations, data=data))
    return 0 if code is None else code
