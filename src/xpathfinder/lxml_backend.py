from __future__ import annotations

from pathlib import Path
from typing import Any

from lxml import etree, html

from .descriptors import build_chain, walk_ancestors
from .errors import QuerySyntaxError
from .models import AncestorChain, ChainLevel, ElementReport, ElementSnapshot


def _is_element(node: Any) -> bool:
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


class LxmlTree:
    """Tree query facility and adapter over a parsed ``lxml.html`` document."""

    def __init__(self, document: etree._Element | etree._ElementTree) -> None:
        self.root = document.getroot() if isinstance(document, etree._ElementTree) else document

    @classmethod
    def from_html(cls, markup: str | bytes) -> LxmlTree:
        return cls(html.document_fromstring(markup))

    @classmethod
    def from_file(cls, path: str | Path) -> LxmlTree:
        return cls.from_html(Path(path).read_bytes())

    def query_all(self, expression: str, scope: Any = None) -> list[etree._Element]:
        context = self.root if scope is None else scope
        try:
            result = context.xpath(expression)
        except etree.XPathError as exc:
            raise QuerySyntaxError(expression, str(exc) or type(exc).__name__) from exc
        if not isinstance(result, list):
            return []
        return [item for item in result if _is_element(item)]

    def query_first(self, expression: str, scope: Any = None) -> etree._Element | None:
        matches = self.query_all(expression, scope)
        return matches[0] if matches else None

    def describe(self, node: etree._Element) -> str:
        label = self.tag_name(node)
        identifier = (node.get("id") or "").strip()
        if identifier:
            label += f"#{identifier}"
        classes = (node.get("class") or "").split()
        if classes:
            label += "." + ".".join(classes)
        return label

    def parent(self, node: etree._Element) -> etree._Element | None:
        return node.getparent()

    def element_children(self, node: etree._Element) -> list[etree._Element]:
        return [child for child in node if _is_element(child)]

    def tag_name(self, node: etree._Element) -> str:
        return node.tag.lower() if isinstance(node.tag, str) else ""

    def snapshot(self, node: etree._Element) -> ElementSnapshot:
        # Own text nodes only: the leading text plus the tail of every child.
        pieces = [node.text or ""]
        pieces.extend(child.tail or "" for child in node)
        return ElementSnapshot(
            tag=self.tag_name(node),
            identifier=node.get("id") or None,
            class_list=node.get("class") or None,
            attributes=tuple((str(name), str(value)) for name, value in node.attrib.items()),
            direct_text="".join(pieces),
            text_nodes=tuple(piece for piece in pieces if piece),
        )

    def chain_for(self, node: etree._Element) -> tuple[ChainLevel, ...]:
        return walk_ancestors(node, self)

    def descriptors_for(self, node: etree._Element) -> AncestorChain:
        return build_chain(self.chain_for(node))

    def locate(self, xpath: str) -> ElementReport | None:
        element = self.query_first(xpath)
        if element is None:
            return None
        levels = self.chain_for(element)
        return ElementReport(element=element, xpath=xpath, levels=levels, chain=build_chain(levels))
