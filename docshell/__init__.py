"""docshell renders the outer HTML document of server-rendered pages."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .document import Component, DocumentShellError, HtmlDocument, create_html
from .head import Head, HeadCollector, HeadManager, HeadTag
from .options import DEFAULT_VWO_ACCOUNT_ID, DocumentOptions, OptimizerSettings

__all__ = [
    "DEFAULT_VWO_ACCOUNT_ID",
    "Component",
    "DocumentOptions",
    "DocumentShellError",
    "Head",
    "HeadCollector",
    "HeadManager",
    "HeadTag",
    "HtmlDocument",
    "OptimizerSettings",
    "__version__",
    "create_html",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("docshell")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
