"""Show-locations command for pipeline CLIs."""

import sys

from taskpath.locations.tree import path_to_text
from taskpath.resources.mapping import MappingSpec, apply_mappings, unbound_paths
from taskpath.resources.nodes import VirtualResourceTree, physical_tree_report
from taskpath.resources.split import mapping_view


def cmd_show_locations(tree: VirtualResourceTree, spec: MappingSpec) -> int:
    """Print where every resource of the pipeline is mapped.

    Args:
        tree: Declaration-state tree of the pipeline.
        spec: Mapping spec read from the configuration.

    Returns:
        Exit code (always 0; unmapped resources are only reported).
    """
    view = mapping_view(tree)
    if view is None:
        print("No mapped resources.")
        return 0

    bound = apply_mappings(view, spec)
    print(physical_tree_report(bound))

    missing = unbound_paths(bound, view)
    if missing:
        print("\nUnmapped resources:", file=sys.stderr)
        for path in missing:
            print(f"  - {path_to_text(path)}", file=sys.stderr)
    return 0
