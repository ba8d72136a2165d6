import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .options import DocumentOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "docshell.yml"


class ConfigError(ValueError):
    """Raised when a docshell configuration file cannot be used."""


class ShellConfig(BaseModel):
    """Project-level settings for rendering a document shell."""

    output: Path | None = Field(
        default=None,
        description="Where `docshell render` writes the document (stdout when unset).",
    )
    env_passthrough: list[str] = Field(
        default_factory=list,
        description="Process environment variables copied into the document env.",
    )
    document: DocumentOptions = Field(default_factory=DocumentOptions)

    @field_validator("output", mode="before")
    def _ensure_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("env_passthrough", mode="before")
    def _normalize_names(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def document_options(self, environ: Mapping[str, str] | None = None) -> DocumentOptions:
        """Return the document options with passthrough variables merged into ``env``.

        Keys set explicitly under ``document.env`` win over the environment.
        """
        source = os.environ if environ is None else environ
        passed: dict[str, Any] = {}
        for name in self.env_passthrough:
            if name in source:
                passed[name] = source[name]
            else:
                logger.debug("Passthrough variable %s is not set; skipping.", name)
        if not passed:
            return self.document
        return self.document.merged(env={**passed, **self.document.env})


def load_config(path: str | Path) -> ShellConfig:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/docshell.yml``) or a
    directory containing that file. A directory without a config file yields
    the defaults.
    """
    candidate = Path(path)
    data: Any = {}
    if candidate.is_dir():
        config_path = candidate / CONFIG_FILENAME
        if config_path.exists():
            data = _read_yaml(config_path)
        base_dir = candidate.resolve()
    else:
        config_path = candidate
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        data = _read_yaml(config_path)
        base_dir = config_path.parent.resolve()

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {config_path} must define a mapping at its root.")

    try:
        cfg = ShellConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc

    if cfg.output is not None and not cfg.output.is_absolute():
        cfg.output = (base_dir / cfg.output).resolve()
    return cfg


def _read_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
