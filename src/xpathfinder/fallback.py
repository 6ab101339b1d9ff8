from __future__ import annotations

from typing import Sequence

from .attribute_rules import leading_wrapper_count
from .descriptors import require_chain
from .errors import QuerySyntaxError
from .models import NodeDescriptor
from .predicates import (
    attribute_predicate,
    class_predicate,
    flag_predicates,
    fragment,
    identifier_predicate,
    is_xpath_name,
    rooted_path,
    same_type_position,
    text_predicate,
    xpath_literal,
)
from .settings import SynthesisSettings
from .tree import TreeQuery


class BestEffortGenerator:
    """Single-pass selector heuristic that commits to one shape without verification."""

    def __init__(self, query: TreeQuery | None = None, settings: SynthesisSettings | None = None) -> None:
        self.query = query
        self.settings = settings or SynthesisSettings()

    def generate(self, chain: Sequence[NodeDescriptor]) -> str:
        descriptors = require_chain(chain)
        target = descriptors[-1]

        if target.identifier:
            position = same_type_position(target) if self._is_shared(target.identifier) else None
            conditions = [identifier_predicate(target.identifier), *flag_predicates(target)]
            return rooted_path([fragment(target.tag, conditions, position)])

        by_text = text_predicate(target)
        if by_text:
            return rooted_path([fragment(target.tag, [by_text])])

        flags = flag_predicates(target)
        if flags:
            return rooted_path([fragment(target.tag, flags)])

        by_class = class_predicate(target)
        if by_class:
            return rooted_path([fragment(target.tag, [by_class])])

        for name, value in target.custom_attributes:
            if not is_xpath_name(name):
                continue
            predicate = attribute_predicate(name, value)
            if predicate:
                return rooted_path([fragment(target.tag, [predicate])])

        skipped = leading_wrapper_count((item.tag for item in descriptors), self.settings.wrapper_tags)
        return rooted_path(
            [fragment(item.tag, position=same_type_position(item)) for item in descriptors[skipped:]]
        )

    def _is_shared(self, identifier: str) -> bool:
        if self.query is None:
            return False
        try:
            matches = self.query.query_all(f"//*[@id={xpath_literal(identifier)}]")
        except QuerySyntaxError:
            return False
        return len(matches) > 1
