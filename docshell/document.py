"""Root document composition: head, bootstrap scripts, then page content."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Iterable, Protocol, runtime_checkable

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape
from markupsafe import Markup, escape

from .head import HeadBuilder, HeadCollector, HeadManager
from .options import DocumentOptions, coerce_options
from .scripts import ScriptInjector

logger = logging.getLogger(__name__)

DOCUMENT_TEMPLATE = "document.html"


class DocumentShellError(RuntimeError):
    """Raised when a document cannot be rendered."""


@runtime_checkable
class Component(Protocol):
    """Page content that may declare head tags while rendering its markup."""

    def render(self, head: HeadCollector) -> str: ...


def _inline_markup(value: str) -> Markup:
    # Keep inline script/style bodies from closing their element early.
    return Markup(str(value).replace("</", "<\\/"))


@lru_cache(maxsize=1)
def document_environment() -> Environment:
    """Return the shared Jinja environment used to render documents."""
    environment = Environment(
        loader=PackageLoader("docshell", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    environment.filters["inline_markup"] = _inline_markup
    logger.debug("Document template environment initialised.")
    return environment


def render_child(child: Any, head: HeadCollector) -> Markup:
    """Render one piece of page content into markup."""
    if child is None:
        return Markup("")
    if isinstance(child, Component):
        return Markup(child.render(head))
    if hasattr(child, "__html__"):
        return Markup(child)
    if isinstance(child, str):
        return escape(child)
    if isinstance(child, (list, tuple)):
        return Markup("").join(render_child(item, head) for item in child)
    raise DocumentShellError(f"Unsupported document child of type {type(child).__name__}.")


class HtmlDocument:
    """The outer ``<html>`` shell of a server-rendered page."""

    def __init__(
        self,
        options: DocumentOptions | dict[str, Any] | None = None,
        *,
        collector_factory: Callable[[], HeadCollector] = HeadManager,
    ) -> None:
        self.options = coerce_options(options)
        self._collector_factory = collector_factory

    def render(self, *children: Any) -> str:
        head = self._collector_factory()
        builder = HeadBuilder(self.options)
        builder.seed(head)

        # Content renders before the head is resolved so its declarations land.
        content = Markup("\n").join(_non_empty(render_child(child, head) for child in children))
        head_tags = builder.build(head)
        scripts = ScriptInjector(self.options).scripts()

        try:
            template = document_environment().get_template(DOCUMENT_TEMPLATE)
            return template.render(
                html_attributes=self.options.html_attributes,
                head_tags=head_tags,
                scripts=scripts,
                content=content,
            )
        except TemplateError as exc:
            raise DocumentShellError(f"Failed to render document template: {exc}") from exc

    __call__ = render


def _non_empty(parts: Iterable[Markup]) -> list[Markup]:
    return [part for part in parts if part]


def create_html(options: DocumentOptions | dict[str, Any] | None = None, **overrides: Any) -> HtmlDocument:
    """Build an :class:`HtmlDocument` from ``options`` plus keyword overrides."""
    resolved = coerce_options(options).merged(**overrides)
    return HtmlDocument(resolved)
