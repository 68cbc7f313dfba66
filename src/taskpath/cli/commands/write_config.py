"""Write-config-template command for pipeline CLIs."""

import sys
from pathlib import Path
from typing import Any, Dict

from taskpath.config.loader import write_config_document


def cmd_write_config_template(config_path: str, document: Dict[str, Any], force: bool = False) -> int:
    """Write the default configuration document of a pipeline.

    Args:
        config_path: Where to write the document.
        document: Default document (``locations`` and ``data`` sections).
        force: Overwrite an existing file.

    Returns:
        Exit code (0 for success, 1 if the file exists and not ``force``).
    """
    path = Path(config_path)

    if path.exists() and not force:
        print(f"Error: {path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1

    write_config_document(path, document)
    print(f"Wrote configuration template: {path}")
    return 0
