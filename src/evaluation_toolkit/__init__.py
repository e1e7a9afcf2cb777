"""Top-level package for the Evaluation Toolkit.

Provides subpackages:
- evaluation_toolkit.core – document models, validation and serialization
- evaluation_toolkit.storage – JSON document store (load/save collaborator)
- evaluation_toolkit.builder – measurement, pagination and PDF rendering
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version
    from pathlib import Path

    try:
        return pkg_version("evaluation-toolkit")
    except PackageNotFoundError:
        pass

    # Source checkout without an install
    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.0"
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
