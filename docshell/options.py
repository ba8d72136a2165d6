"""Option models describing a rendered document shell."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_VWO_ACCOUNT_ID = 215379


class OptimizerSettings(BaseModel):
    """Object form of the Visual Website Optimizer switch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    account_id: int | None = Field(default=None, alias="accountId", ge=1)


@dataclass(frozen=True, slots=True)
class Disabled:
    """No optimizer scripts are emitted."""


@dataclass(frozen=True, slots=True)
class DefaultAccount:
    """Optimizer enabled for the shared default account."""

    @property
    def account_id(self) -> int:
        return DEFAULT_VWO_ACCOUNT_ID


@dataclass(frozen=True, slots=True)
class CustomAccount:
    """Optimizer enabled for an explicitly configured account."""

    account_id: int


OptimizerMode = Union[Disabled, DefaultAccount, CustomAccount]


def resolve_optimizer(value: bool | OptimizerSettings | None) -> OptimizerMode:
    """Collapse the ``visual_website_optimizer`` option into a single variant."""
    if value is None or value is False:
        return Disabled()
    if value is True:
        return DefaultAccount()
    if value.account_id is None:
        return DefaultAccount()
    return CustomAccount(value.account_id)


class DocumentOptions(BaseModel):
    """Everything the document shell needs to know about a page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    title: str = Field(default="")
    description: str | None = Field(default=None)
    canonical: str | None = Field(default=None)
    visual_website_optimizer: bool | OptimizerSettings | None = Field(
        default=None,
        alias="visualWebsiteOptimizer",
    )
    env: dict[str, Any] = Field(default_factory=dict)
    title_template: str | None = Field(
        default=None,
        alias="titleTemplate",
        description="Template applied to non-empty titles; '%s' marks the title.",
    )
    html_attributes: dict[str, str] = Field(default_factory=dict, alias="htmlAttributes")

    @field_validator("title", mode="before")
    def _default_title(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("description", "canonical", mode="before")
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("env", "html_attributes", mode="before")
    def _empty_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("title_template")
    def _require_placeholder(cls, value: str | None) -> str | None:
        if value is not None and "%s" not in value:
            raise ValueError("title_template must contain a '%s' placeholder.")
        return value

    @property
    def optimizer(self) -> OptimizerMode:
        return resolve_optimizer(self.visual_website_optimizer)

    def merged(self, **overrides: Any) -> "DocumentOptions":
        """Return a copy with ``overrides`` applied (aliases accepted)."""
        if not overrides:
            return self
        data = self.model_dump()
        for key, value in overrides.items():
            data[_FIELD_ALIASES.get(key, key)] = value
        return DocumentOptions.model_validate(data)

    def format_title(self, title: str) -> str:
        """Apply ``title_template`` to ``title`` when both are set."""
        if not title or not self.title_template:
            return title
        return self.title_template.replace("%s", title)


_FIELD_ALIASES = {
    field.alias: name for name, field in DocumentOptions.model_fields.items() if field.alias
}


def coerce_options(options: DocumentOptions | dict[str, Any] | None) -> DocumentOptions:
    """Accept a model, a plain mapping, or nothing and return ``DocumentOptions``."""
    if options is None:
        return DocumentOptions()
    if isinstance(options, DocumentOptions):
        return options
    return DocumentOptions.model_validate(options)
