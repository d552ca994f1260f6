"""Version and system information for dynadapter.

Usage:
    from dynadapter import __version__
    from dynadapter._version import get_version_info, get_debug_info

    print(__version__)     # "0.1.0"
    get_debug_info()       # "dynadapter=0.1.0 python=3.12.1 pydantic=2.8.2 platform=Linux"
"""

from __future__ import annotations

import importlib
import importlib.util
import platform
from typing import Any, Dict, Optional

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0
VERSION_SUFFIX = ""  # e.g., "alpha", "beta", "rc1"

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}{'-' + VERSION_SUFFIX if VERSION_SUFFIX else ''}"


def get_version() -> str:
    """Get the version string.

    Returns:
        Version string in format "X.Y.Z" or "X.Y.Z-suffix".
    """
    if VERSION_SUFFIX:
        return f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}-{VERSION_SUFFIX}"
    return f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"


def _get_package_version(module_name: str, package_name: Optional[str] = None) -> Optional[str]:
    """Get package version, trying __version__ first, then installed metadata.

    Args:
        module_name: Name of the module to import.
        package_name: Distribution name (defaults to module_name).

    Returns:
        Version string or None if not installed.
    """
    if importlib.util.find_spec(module_name) is None:
        return None
    module = importlib.import_module(module_name)
    version = getattr(module, "__version__", None)
    if version:
        return version
    from importlib.metadata import PackageNotFoundError, version as dist_version

    try:
        return dist_version(package_name or module_name)
    except PackageNotFoundError:
        return None


def get_dependency_versions() -> Dict[str, Optional[str]]:
    """Get versions of the runtime dependencies."""
    return {
        "pydantic": _get_package_version("pydantic"),
        "typing_extensions": _get_package_version("typing_extensions"),
    }


def get_version_info() -> Dict[str, Any]:
    """Get version, interpreter, platform and dependency information.

    Example:
        >>> info = get_version_info()
        >>> info["dynadapter"]
        '0.1.0'
    """
    return {
        "dynadapter": __version__,
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
        },
        "platform": {"system": platform.system(), "machine": platform.machine()},
        "dependencies": get_dependency_versions(),
    }


def get_debug_info() -> str:
    """Compact single-line environment description for bug reports."""
    info = get_version_info()
    parts = [f"dynadapter={info['dynadapter']}", f"python={info['python']['version']}"]
    for name, version in info["dependencies"].items():
        if version:
            parts.append(f"{name}={version}")
    parts.append(f"platform={info['platform']['system']}")
    return " ".join(parts)
