"""
Content Items - read-only view of one rendered feed item

The extraction code only needs text, attributes and children of an element,
so it works against the `ContentItem` protocol. `ElementSnapshot` is the
concrete implementation built from a JSON snapshot taken in the browser
(see `page_source.SNAPSHOT_JS`) or written by hand in tests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class ContentItem(Protocol):
    """Read-only access to one rendered element."""

    def text(self) -> str:
        ...

    def attributes(self) -> Mapping[str, str]:
        ...

    def children(self) -> Sequence["ContentItem"]:
        ...


@dataclass(frozen=True)
class ElementSnapshot:
    """Immutable snapshot of an element and its element children."""
    tag: str = "div"
    inner_text: str = ""
    attrs: Tuple[Tuple[str, str], ...] = ()
    kids: Tuple["ElementSnapshot", ...] = field(default_factory=tuple)

    def text(self) -> str:
        return self.inner_text

    def attributes(self) -> Mapping[str, str]:
        return dict(self.attrs)

    def children(self) -> Sequence["ElementSnapshot"]:
        return self.kids

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementSnapshot":
        """
        Build a snapshot tree from the browser payload.

        Expected shape: {"tag": "div", "text": "...", "attrs": {...}, "children": [...]}
        """
        data = data or {}
        attrs = data.get("attrs") or {}
        return cls(
            tag=str(data.get("tag") or "div").lower(),
            inner_text=str(data.get("text") or ""),
            attrs=tuple((str(k), str(v)) for k, v in attrs.items() if v is not None),
            kids=tuple(cls.from_dict(c) for c in (data.get("children") or [])),
        )


def element(tag: str = "div", text: str = "", children: Sequence[ElementSnapshot] = (), **attrs) -> ElementSnapshot:
    """Shorthand constructor; `aria_label="x"` becomes the `aria-label` attribute."""
    return ElementSnapshot(
        tag=tag,
        inner_text=text,
        attrs=tuple((k.replace("_", "-"), str(v)) for k, v in attrs.items()),
        kids=tuple(children),
    )


def tag_of(item: ContentItem) -> str:
    """Lower-case tag name when the item exposes one, else an empty string."""
    return str(getattr(item, "tag", "") or "").lower()


def iter_descendants(item: ContentItem, include_self: bool = False) -> Iterator[ContentItem]:
    """Depth-first, document-order walk over the element tree."""
    if include_self:
        yield item
    stack = list(reversed(list(item.children())))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children())))


def find_first(item: ContentItem, predicate, include_self: bool = False) -> Optional[ContentItem]:
    for node in iter_descendants(item, include_self=include_self):
        if predicate(node):
            return node
    return None


__all__ = [
    "ContentItem",
    "ElementSnapshot",
    "element",
    "tag_of",
    "iter_descendants",
    "find_first",
]
