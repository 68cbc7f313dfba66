"""Version command for pipeline CLIs."""

import platform
from importlib.metadata import PackageNotFoundError, version

# Distributions whose versions matter when reporting configuration issues.
_REPORTED = ("taskpath", "pydantic", "pyyaml")


def _installed(dist: str) -> str:
    try:
        return version(dist)
    except PackageNotFoundError:
        return "not installed"


def cmd_version(prog: str) -> int:
    """Print the pipeline name with the versions it runs on.

    Args:
        prog: Name of the pipeline executable.

    Returns:
        Exit code (always 0).
    """
    print(prog)
    print(f"  python: {platform.python_version()}")
    for dist in _REPORTED:
        print(f"  {dist}: {_installed(dist)}")
    return 0
