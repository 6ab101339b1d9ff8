from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from playwright.sync_api import Error as PlaywrightError

from .descriptors import build_chain
from .errors import QuerySyntaxError
from .models import ChainLevel, ElementReport, ElementSnapshot

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Frame, Page

_CHAIN_SCRIPT = r"""
(el) => {
  const textNodes = (node) =>
    Array.from(node.childNodes)
      .filter((child) => child.nodeType === Node.TEXT_NODE)
      .map((child) => child.textContent);

  const levels = [];
  let current = el;
  while (current && current.nodeType === Node.ELEMENT_NODE) {
    const parent = current.parentElement;
    const tag = current.tagName.toLowerCase();
    let index = 1;
    let indexOfType = 1;
    let sameTypeCount = 1;
    if (parent) {
      const children = Array.from(parent.children);
      const sameType = children.filter((child) => child.tagName.toLowerCase() === tag);
      index = children.indexOf(current) + 1;
      indexOfType = sameType.indexOf(current) + 1;
      sameTypeCount = sameType.length;
    }
    levels.push({
      tag,
      id: current.getAttribute('id') || null,
      className: current.getAttribute('class') || null,
      attributes: Array.from(current.attributes || []).map((attr) => [attr.name, attr.value]),
      texts: textNodes(current),
      index,
      indexOfType,
      sameTypeCount,
      parentTag: parent ? parent.tagName.toLowerCase() : null,
    });
    current = parent;
  }
  return levels.reverse();
}
"""

_DESCRIBE_SCRIPT = r"""
(el) => {
  let label = el.tagName ? el.tagName.toLowerCase() : String(el.nodeName || '').toLowerCase();
  const id = el.getAttribute ? el.getAttribute('id') : null;
  if (id) label += `#${id}`;
  const classes = Array.from(el.classList || []);
  if (classes.length) label += `.${classes.join('.')}`;
  return label;
}
"""


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def levels_from_payload(payload: Iterable[Mapping[str, Any]]) -> tuple[ChainLevel, ...]:
    levels: list[ChainLevel] = []
    for item in payload:
        if not isinstance(item, Mapping):
            continue
        attributes = tuple(
            (str(pair[0]), "" if pair[1] is None else str(pair[1]))
            for pair in item.get("attributes", []) or []
            if isinstance(pair, (list, tuple)) and len(pair) == 2
        )
        texts = tuple(str(piece) for piece in item.get("texts", []) or [] if piece)
        snapshot = ElementSnapshot(
            tag=str(item.get("tag") or "").lower(),
            identifier=item.get("id") or None,
            class_list=item.get("className") or None,
            attributes=attributes,
            direct_text="".join(texts),
            text_nodes=texts,
        )
        parent_tag = item.get("parentTag")
        levels.append(
            ChainLevel(
                snapshot=snapshot,
                sibling_index=_int(item.get("index"), 1),
                sibling_index_of_type=_int(item.get("indexOfType"), 1),
                same_type_count=_int(item.get("sameTypeCount"), 1),
                parent_tag=str(parent_tag).lower() if parent_tag else None,
            )
        )
    return tuple(levels)


def extract_levels(element: ElementHandle) -> tuple[ChainLevel, ...]:
    payload = element.evaluate(_CHAIN_SCRIPT)
    return levels_from_payload(payload or [])


class PageTreeQuery:
    """Tree query facility over a Playwright page or frame."""

    def __init__(self, target: Page | Frame) -> None:
        self.target = target

    def query_all(self, expression: str, scope: Any = None) -> list[ElementHandle]:
        context = scope if scope is not None else self.target
        try:
            return list(context.query_selector_all(f"xpath={expression}"))
        except PlaywrightError as exc:
            raise QuerySyntaxError(expression, exc.message) from exc

    def query_first(self, expression: str, scope: Any = None) -> ElementHandle | None:
        matches = self.query_all(expression, scope)
        return matches[0] if matches else None

    def describe(self, node: ElementHandle) -> str:
        try:
            return str(node.evaluate(_DESCRIBE_SCRIPT))
        except PlaywrightError:
            return "<detached>"

    def locate(self, xpath: str) -> ElementReport | None:
        element = self.query_first(xpath)
        if element is None:
            return None
        levels = extract_levels(element)
        return ElementReport(element=element, xpath=xpath, levels=levels, chain=build_chain(levels))
