from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from .attribute_rules import coerce_attributes, normalize_space, xpath_normalize_space
from .errors import ChainIntegrityError, EmptyChainError
from .models import AncestorChain, ChainLevel, ElementSnapshot, NodeDescriptor
from .tree import TreeAdapter

logger = logging.getLogger("xpathfinder.descriptors")


def _lead_text(snapshot: ElementSnapshot) -> str:
    # First own text node with visible content.
    for piece in snapshot.text_nodes or (snapshot.direct_text,):
        text = xpath_normalize_space(piece)
        if text:
            return text
    return ""


def build_descriptor(
    snapshot: ElementSnapshot,
    sibling_index: int,
    sibling_index_of_type: int,
    parent_tag: str | None,
) -> NodeDescriptor:
    tag = (snapshot.tag or "").strip().lower() or "*"
    identifier = (snapshot.identifier or "").strip() or None
    class_list = snapshot.class_list if snapshot.class_list and snapshot.class_list.strip() else None
    return NodeDescriptor(
        tag=tag,
        identifier=identifier,
        class_list=class_list,
        direct_text=normalize_space(snapshot.direct_text),
        sibling_index=int(sibling_index),
        sibling_index_of_type=int(sibling_index_of_type),
        parent_tag=parent_tag.lower() if parent_tag else None,
        attributes=coerce_attributes(snapshot.attributes),
        lead_text=_lead_text(snapshot),
    )


def build_chain(levels: Iterable[ChainLevel]) -> AncestorChain:
    return tuple(
        build_descriptor(
            level.snapshot,
            level.sibling_index,
            level.sibling_index_of_type,
            level.parent_tag,
        )
        for level in levels
    )


def chain_integrity_issue(chain: Sequence[NodeDescriptor]) -> str | None:
    """Describe the first broken parent link, or None when the chain is consistent."""
    for position, descriptor in enumerate(chain[1:], start=1):
        expected = chain[position - 1].tag
        if descriptor.parent_tag is not None and descriptor.parent_tag != expected:
            return f"Level {position} ({descriptor.tag}) has parent {descriptor.parent_tag!r}, expected {expected!r}."
    return None


def validate_chain(chain: Sequence[NodeDescriptor]) -> AncestorChain:
    if not chain:
        raise EmptyChainError()
    issue = chain_integrity_issue(chain)
    if issue:
        raise ChainIntegrityError(issue)
    return tuple(chain)


def require_chain(chain: Sequence[NodeDescriptor]) -> AncestorChain:
    """Accept any non-empty chain; a broken parent link is only logged.

    The tree may have changed since the chain was read, and the oracle reports
    that as a none or ambiguous outcome.
    """
    if not chain:
        raise EmptyChainError()
    issue = chain_integrity_issue(chain)
    if issue:
        logger.warning("Inconsistent ancestor chain: %s", issue)
    return tuple(chain)


def _position_among_siblings(node: Any, siblings: Sequence[Any], tag: str, adapter: TreeAdapter) -> tuple[int, int, int]:
    index = 0
    index_of_type = 0
    same_type_count = 0
    for position, sibling in enumerate(siblings, start=1):
        sibling_tag = adapter.tag_name(sibling).lower()
        if sibling_tag == tag:
            same_type_count += 1
        if sibling is node:
            index = position
            index_of_type = same_type_count
    return index, index_of_type, same_type_count


def walk_ancestors(node: Any, adapter: TreeAdapter) -> tuple[ChainLevel, ...]:
    """Collect root-first levels from ``node`` up to the outermost element."""
    levels: list[ChainLevel] = []
    current = node
    while current is not None:
        snapshot = adapter.snapshot(current)
        tag = (snapshot.tag or "").lower()
        parent = adapter.parent(current)
        if parent is None:
            levels.append(ChainLevel(snapshot, 1, 1, 1, None))
            break
        index, index_of_type, same_type_count = _position_among_siblings(
            current, adapter.element_children(parent), tag, adapter
        )
        parent_tag = adapter.tag_name(parent).lower() or None
        levels.append(ChainLevel(snapshot, index, index_of_type, same_type_count, parent_tag))
        current = parent
    levels.reverse()
    return tuple(levels)


def describe_ancestors(node: Any, adapter: TreeAdapter) -> AncestorChain:
    return build_chain(walk_ancestors(node, adapter))
