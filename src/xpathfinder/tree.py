from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import ElementSnapshot


class TreeQuery(Protocol):
    """Evaluates XPath expressions against a live tree.

    Implementations raise :class:`~xpathfinder.errors.QuerySyntaxError` for
    expressions the tree cannot evaluate.
    """

    def query_all(self, expression: str, scope: Any = None) -> list[Any]: ...

    def query_first(self, expression: str, scope: Any = None) -> Any | None: ...

    def describe(self, node: Any) -> str: ...


class TreeAdapter(Protocol):
    def parent(self, node: Any) -> Any | None: ...

    def element_children(self, node: Any) -> Sequence[Any]: ...

    def tag_name(self, node: Any) -> str: ...

    def snapshot(self, node: Any) -> ElementSnapshot: ...
