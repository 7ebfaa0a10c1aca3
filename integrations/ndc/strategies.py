"""
NDC Fare Engine - Field Extraction Strategies

Providers populate the same logical field in different places depending on the
call type. Each logical field is described by a FieldExtractor holding an
ordered list of named strategies; the first strategy returning a non-empty
value wins. Strategies are plain functions of a Node and can be tested alone.
"""

from typing import Any, Callable, Generic, List, NamedTuple, Optional, Sequence, Tuple, TypeVar

from integrations.ndc.document import Node

T = TypeVar("T")


class Strategy(NamedTuple):
    name: str
    extract: Callable[[Node], Any]


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


class FieldExtractor(Generic[T]):
    """Ordered, named fallbacks for one logical field."""

    def __init__(self, field: str, strategies: Sequence[Strategy]):
        self.field = field
        self.strategies: Tuple[Strategy, ...] = tuple(strategies)

    def resolve(self, node: Optional[Node]) -> Tuple[Optional[T], Optional[str]]:
        """Return (value, name of the strategy that produced it)."""
        if node is None:
            return None, None
        for strategy in self.strategies:
            value = strategy.extract(node)
            if not _is_empty(value):
                return value, strategy.name
        return None, None

    def __call__(self, node: Optional[Node], default: Optional[T] = None) -> Optional[T]:
        value, _ = self.resolve(node)
        return default if value is None else value

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.strategies]

    def __repr__(self) -> str:
        return f"FieldExtractor({self.field!r}, {self.names})"


# ================================================================
# STRATEGY BUILDERS
# ================================================================

def walk(node: Optional[Node], *names: str) -> Optional[Node]:
    """Follow first-descendant lookups, e.g. walk(item, "FareDetail", "Price")."""
    current = node
    for name in names:
        if current is None:
            return None
        current = current.find(name)
    return current


def attribute(name: str) -> Strategy:
    return Strategy(f"@{name}", lambda node: node.attr(name))


def child_text(*path: str) -> Strategy:
    *parents, leaf = path

    def extract(node: Node) -> Optional[str]:
        parent = walk(node, *parents)
        return parent.text(leaf) if parent is not None else None

    return Strategy("/".join(path), extract)


def child_attribute(*path: str, attr: str) -> Strategy:
    def extract(node: Node) -> Optional[str]:
        target = walk(node, *path)
        return target.attr(attr) if target is not None else None

    return Strategy(f"{'/'.join(path)}@{attr}", extract)


def child(*path: str) -> Strategy:
    return Strategy("/".join(path), lambda node: walk(node, *path))


def all_texts(*path: str) -> Strategy:
    """Every non-empty text of the last path element, de-duplicated in order."""
    *parents, leaf = path

    def extract(node: Node) -> List[str]:
        parent = walk(node, *parents)
        if parent is None:
            return []
        return list(dict.fromkeys(parent.texts(leaf)))

    return Strategy(f"{'/'.join(path)}*", extract)


def own_text() -> Strategy:
    return Strategy("text()", lambda node: node.content)
