"""Head tag collection and the default head built from document options.

Page content contributes ``<title>``, ``<meta>`` and friends through a
:class:`HeadCollector`. The document seeds the collector with its own defaults
first, so anything declared by the content afterwards overrides them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol, Sequence, runtime_checkable

from .options import DocumentOptions

logger = logging.getLogger(__name__)

HEAD_TAG_KINDS = frozenset({"title", "meta", "link", "base", "script", "style"})

_META_KEY_ATTRIBUTES = ("charset", "name", "property", "http-equiv", "itemprop")


class HeadTagError(ValueError):
    """Raised when a head tag declaration is malformed."""


@dataclass(frozen=True, slots=True)
class HeadTag:
    """A single element destined for ``<head>``."""

    kind: str
    attributes: tuple[tuple[str, str], ...] = ()
    text: str = ""

    def __post_init__(self) -> None:
        if self.kind not in HEAD_TAG_KINDS:
            raise HeadTagError(f"Unsupported head tag '{self.kind}'.")

    @classmethod
    def create(cls, kind: str, attributes: Mapping[str, object] | None = None, text: str = "") -> "HeadTag":
        pairs = tuple(
            (str(name), "" if value is True else str(value))
            for name, value in (attributes or {}).items()
            if value is not None and value is not False
        )
        return cls(kind=kind, attributes=pairs, text=text)

    def get(self, name: str) -> str | None:
        for key, value in self.attributes:
            if key == name:
                return value
        return None

    @property
    def attribute_map(self) -> dict[str, str]:
        return dict(self.attributes)

    @property
    def merge_key(self) -> tuple[str, ...] | None:
        """Identity used to decide whether a later tag replaces an earlier one."""
        if self.kind in {"title", "base"}:
            return (self.kind,)
        if self.kind == "meta":
            for attribute in _META_KEY_ATTRIBUTES:
                value = self.get(attribute)
                if value is not None:
                    if attribute == "charset":
                        return ("meta", "charset")
                    return ("meta", attribute, value.lower())
            return None
        if self.kind == "link":
            rel = (self.get("rel") or "").lower()
            if rel == "canonical":
                return ("link", "canonical")
            return ("link", rel, self.get("href") or "")
        if self.kind == "script":
            src = self.get("src")
            return ("script", src) if src else None
        return None


@runtime_checkable
class HeadCollector(Protocol):
    """Collects head tags with a defined override precedence."""

    def declare(self, tag: HeadTag) -> None: ...

    def tags(self) -> Sequence[HeadTag]: ...


@dataclass(slots=True)
class HeadManager:
    """Default :class:`HeadCollector`: later declarations replace earlier ones.

    A replaced tag keeps the slot of the first tag that used its key, so the
    default ``<title>`` stays first even when content overrides it.
    """

    _order: list[tuple[str, ...] | int] = field(default_factory=list)
    _keyed: dict[tuple[str, ...], HeadTag] = field(default_factory=dict)
    _anonymous: list[HeadTag] = field(default_factory=list)

    def declare(self, tag: HeadTag) -> None:
        key = tag.merge_key
        if key is None:
            self._order.append(len(self._anonymous))
            self._anonymous.append(tag)
            return
        if key in self._keyed:
            logger.debug("Head tag %s overridden by a later declaration.", "/".join(key))
        else:
            self._order.append(key)
        self._keyed[key] = tag

    def declare_all(self, tags: Iterable[HeadTag]) -> None:
        for tag in tags:
            self.declare(tag)

    def tags(self) -> list[HeadTag]:
        resolved: list[HeadTag] = []
        for entry in self._order:
            if isinstance(entry, int):
                resolved.append(self._anonymous[entry])
            else:
                resolved.append(self._keyed[entry])
        return resolved

    @property
    def title(self) -> str:
        tag = self._keyed.get(("title",))
        return tag.text if tag is not None else ""


def default_head_tags(options: DocumentOptions) -> list[HeadTag]:
    """Tags the document always contributes before any page content."""
    tags = [HeadTag.create("title", text=options.title)]
    if options.description is not None:
        tags.append(HeadTag.create("meta", {"name": "description", "content": options.description}))
    if options.canonical is not None:
        tags.append(HeadTag.create("link", {"rel": "canonical", "href": options.canonical}))
    return tags


class HeadBuilder:
    """Assemble the final ``<head>`` children for a document."""

    def __init__(self, options: DocumentOptions) -> None:
        self._options = options

    def seed(self, collector: HeadCollector) -> None:
        for tag in default_head_tags(self._options):
            collector.declare(tag)

    def build(self, collector: HeadCollector) -> list[HeadTag]:
        resolved: list[HeadTag] = []
        for tag in collector.tags():
            if tag.kind == "title":
                tag = HeadTag(kind="title", attributes=tag.attributes, text=self._options.format_title(tag.text))
            resolved.append(tag)
        return resolved


class Head:
    """Child component declaring head tags on behalf of page content.

    Renders nothing into the body::

        Head(title="Hello!", meta=[{"name": "robots", "content": "noindex"}])
    """

    def __init__(
        self,
        *,
        title: str | None = None,
        meta: Sequence[Mapping[str, object]] = (),
        link: Sequence[Mapping[str, object]] = (),
        base: Mapping[str, object] | None = None,
        script: Sequence[Mapping[str, object]] = (),
        style: Sequence[str] = (),
    ) -> None:
        declared: list[HeadTag] = []
        if title is not None:
            declared.append(HeadTag.create("title", text=title))
        if base is not None:
            declared.append(HeadTag.create("base", base))
        declared.extend(HeadTag.create("meta", attrs) for attrs in meta)
        declared.extend(HeadTag.create("link", attrs) for attrs in link)
        for attrs in script:
            if not attrs.get("src"):
                raise HeadTagError("Declared head scripts must reference a 'src'.")
            declared.append(HeadTag.create("script", attrs))
        declared.extend(HeadTag.create("style", text=css) for css in style)
        self.tags: tuple[HeadTag, ...] = tuple(declared)

    def render(self, head: HeadCollector) -> str:
        for tag in self.tags:
            head.declare(tag)
        return ""
