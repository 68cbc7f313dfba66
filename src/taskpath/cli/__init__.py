"""Command-line front-end for pipelines built with taskpath.

A pipeline author builds a PipelineCLI from the resource tree of the
pipeline and its default mappings, then calls ``main``:

    cli = PipelineCLI("my-pipeline", tree, Loc("./output"))
    sys.exit(cli.main(run=run_pipeline))

Usage:
    my-pipeline run [-c pipeline.yaml] [-o path=value ...]
    my-pipeline show-locations [-l /inputs/table=data/table.csv]
    my-pipeline write-config-template [--force]
    my-pipeline version

Configuration comes from the file given with ``-c`` (default
``pipeline.yaml``), or from the default document generated from the
resource tree when that file does not exist.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from taskpath.config.docrec import DocRecord
from taskpath.config.errors import ConfigLoadError, ConfigOverrideError
from taskpath.config.loader import load_config_document
from taskpath.config.overrides import Shortcut, generic_configuration_reader
from taskpath.config.reader import ConfigurationReader, add_logging_params
from taskpath.config.schema import PipelineConfigSchema
from taskpath.logger import LoggerParams
from taskpath.resources.errors import ResourceTreeError
from taskpath.resources.mapping import MappingSpec, mapping_spec_from_document
from taskpath.resources.nodes import VirtualResourceTree
from taskpath.resources.split import (
    EMBEDDED_DATA_SECTION,
    MAPPINGS_SECTION,
    ResourceTreeAndMappings,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "pipeline.yaml"

DEFAULT_SHORTCUTS: List[Shortcut] = [
    ("loc", "l", MAPPINGS_SECTION),
    ("data", "d", EMBEDDED_DATA_SECTION),
]


def default_reader(config_file: str = DEFAULT_CONFIG_FILE) -> ConfigurationReader:
    """Generic reader decoding into PipelineConfigSchema, with section shortcuts."""
    return generic_configuration_reader(PipelineConfigSchema, config_file, DEFAULT_SHORTCUTS)


def _section(config: Any, name: str) -> Any:
    if isinstance(config, DocRecord):
        return config.to_dict().get(name)
    if isinstance(config, Mapping):
        return config.get(name)
    if isinstance(config, PipelineConfigSchema) and name == MAPPINGS_SECTION:
        return config.locations_document()
    return getattr(config, name, None)


class PipelineCLI:
    """Argument parsing and command dispatch for one pipeline.

    Args:
        prog: Name of the executable.
        tree: Declaration-state tree of the pipeline.
        default_mappings: Mapping used to generate the default document.
        reader: Configuration reader (default_reader() if None). The
            config it produces is a mapping, a DocRecord, or an object
            with ``locations`` and ``data`` attributes.
        config_file: Default configuration file path.
        description: Help text of the executable.
    """

    def __init__(
        self,
        prog: str,
        tree: VirtualResourceTree,
        default_mappings: MappingSpec,
        reader: Optional[ConfigurationReader] = None,
        config_file: str = DEFAULT_CONFIG_FILE,
        description: Optional[str] = None,
    ):
        self.prog = prog
        self.tree = tree
        self.default_mappings = default_mappings
        self.config_file = config_file
        self.description = description or f"{prog} pipeline"
        self.reader = add_logging_params(reader or default_reader(config_file))

    def default_document(self) -> Dict[str, Any]:
        """Configuration document generated from the resource tree."""
        return ResourceTreeAndMappings(self.tree, self.default_mappings).to_document()

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "-c", "--config",
            default=self.config_file,
            help=f"Path to YAML configuration file (default: {self.config_file})",
        )
        self.reader.overrides_parser.add_arguments(common)

        parser = argparse.ArgumentParser(prog=self.prog, description=self.description)
        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        subparsers.add_parser(
            "run",
            parents=[common],
            help="Run the pipeline",
        )
        subparsers.add_parser(
            "show-locations",
            parents=[common],
            help="Show the locations mapped to each resource",
        )
        template_parser = subparsers.add_parser(
            "write-config-template",
            parents=[common],
            help="Write the default configuration file",
        )
        template_parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite an existing configuration file",
        )
        subparsers.add_parser(
            "version",
            help="Show version information",
        )
        return parser

    def load_document(self, config_path: str) -> Dict[str, Any]:
        """Read the configuration file, or generate the default document."""
        path = Path(config_path)
        if not path.exists():
            logger.info(f"{path} not found, using the default configuration")
            return self.default_document()
        return load_config_document(path)

    def read_config(self, args: argparse.Namespace) -> Tuple[LoggerParams, Any]:
        """Merge the configuration file and the CLI overrides.

        Warnings are logged. Errors raise ConfigOverrideError.
        """
        overrides = self.reader.overrides_parser.parse(args)
        overrides[0].configure()
        if self.reader.is_null_overrides(overrides):
            logger.debug("No configuration override given")
        document = self.load_document(args.config)
        result = self.reader.merge_with_file_source(document, overrides)
        for warning in result.warnings:
            logger.warning(warning)
        return result.unwrap()

    def mapping_spec(self, config: Any) -> MappingSpec:
        """Mapping spec of a merged config (default mappings if it has none)."""
        if isinstance(config, PipelineConfigSchema) and config.locations:
            return config.mapping_spec()
        section = _section(config, MAPPINGS_SECTION)
        if not section:
            return self.default_mappings
        return mapping_spec_from_document(section)

    def main(self, argv: Optional[List[str]] = None, run: Optional[Any] = None) -> int:
        """Main entry point.

        Args:
            argv: Command line arguments (defaults to sys.argv[1:]).
            run: Pipeline entry point, called with a PipelineRun.

        Returns:
            Exit code (0 for success, non-zero for errors).
        """
        parser = self.create_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            return 0

        if args.command == "version":
            from taskpath.cli.commands.version import cmd_version
            return cmd_version(self.prog)

        if args.command == "write-config-template":
            from taskpath.cli.commands.write_config import cmd_write_config_template
            return cmd_write_config_template(args.config, self.default_document(), args.force)

        try:
            _, config = self.read_config(args)
            spec = self.mapping_spec(config)
        except (ConfigLoadError, ConfigOverrideError, ResourceTreeError) as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 1

        if args.command == "show-locations":
            from taskpath.cli.commands.show_locations import cmd_show_locations
            return cmd_show_locations(self.tree, spec)

        elif args.command == "run":
            from taskpath.cli.commands.run import cmd_run
            return cmd_run(run, config, self.tree, spec, _section(config, EMBEDDED_DATA_SECTION))

        else:
            parser.print_help()
            return 1


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_SHORTCUTS",
    "default_reader",
    "PipelineCLI",
]
