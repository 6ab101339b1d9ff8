from __future__ import annotations

from typing import Callable, Sequence

from .attribute_rules import leading_wrapper_count
from .descriptors import require_chain
from .diagnostics import SynthesisObserver
from .models import AncestorChain, NodeDescriptor, SynthesisResult, SynthesisStage, Verification
from .oracle import UniquenessOracle
from .predicates import (
    class_predicate,
    custom_attribute_predicates,
    flag_predicates,
    fragment,
    identifier_predicate,
    rooted_path,
    same_type_position,
    sibling_position,
    style_predicate,
    text_predicate,
)
from .settings import SynthesisSettings

Multiplicity = Callable[[str], int]


class SelectorSynthesizer:
    """Builds the shortest XPath that the oracle confirms as unique.

    Stages run in strict priority order and the first unique candidate wins:

    * ``identifier``: the target's id plus its boolean flags.
    * ``ancestor_path``: one fragment per level, walking from the target up,
      verified after every level.
    * ``parent_child``: parent fragment joined to a child fragment.
    * ``fallback``: the last ancestor path, returned unverified.
    """

    def __init__(
        self,
        oracle: UniquenessOracle,
        settings: SynthesisSettings | None = None,
    ) -> None:
        self.oracle = oracle
        self.observer: SynthesisObserver = oracle.observer
        self.settings = settings or oracle.settings

    def synthesize(self, chain: Sequence[NodeDescriptor]) -> SynthesisResult:
        descriptors = require_chain(chain)
        multiplicity = self._multiplicity_lookup()
        attempts: list[Verification] = []

        self.observer.stage_started("identifier")
        verification = self._identifier_stage(descriptors[-1], multiplicity, attempts)
        if verification is not None and verification.ok:
            return self._finish(verification.selector, "identifier", True, attempts)

        self.observer.stage_started("ancestor_path")
        skipped = leading_wrapper_count((item.tag for item in descriptors), self.settings.wrapper_tags)
        fragments, verification = self._ancestor_path_stage(descriptors[skipped:], multiplicity, attempts)
        if verification is not None:
            return self._finish(verification.selector, "ancestor_path", True, attempts)

        # A wrapper parent would put html/body back into the output.
        if len(descriptors) >= 2 and len(descriptors) - 2 >= skipped:
            self.observer.stage_started("parent_child")
            verification = self._parent_child_stage(descriptors[-2], descriptors[-1], multiplicity, attempts)
            if verification.ok:
                return self._finish(verification.selector, "parent_child", True, attempts)

        self.observer.stage_started("fallback")
        selector = rooted_path(fragments) if fragments else f"//{descriptors[-1].tag}"
        return self._finish(selector, "fallback", False, attempts)

    def _identifier_stage(
        self,
        target: NodeDescriptor,
        multiplicity: Multiplicity,
        attempts: list[Verification],
    ) -> Verification | None:
        if not target.identifier:
            return None
        conditions = [identifier_predicate(target.identifier), *flag_predicates(target)]
        position = None
        if multiplicity(target.identifier) > 1:
            position = same_type_position(target)
        return self._check(rooted_path([fragment(target.tag, conditions, position)]), "identifier", attempts)

    def _ancestor_path_stage(
        self,
        levels: AncestorChain,
        multiplicity: Multiplicity,
        attempts: list[Verification],
    ) -> tuple[tuple[str, ...], Verification | None]:
        fragments: tuple[str, ...] = ()
        for descriptor in reversed(levels):
            fragments = (self.level_fragment(descriptor, multiplicity),) + fragments
            verification = self._check(rooted_path(fragments), "ancestor_path", attempts)
            if verification.ok:
                return fragments, verification
        return fragments, None

    def level_fragment(self, descriptor: NodeDescriptor, multiplicity: Multiplicity) -> str:
        if descriptor.identifier and multiplicity(descriptor.identifier) == 1:
            return fragment(descriptor.tag, [identifier_predicate(descriptor.identifier)])

        conditions: list[str] = []
        if descriptor.identifier:
            conditions.append(identifier_predicate(descriptor.identifier))
        conditions.extend(flag_predicates(descriptor))

        custom = custom_attribute_predicates(descriptor, excluded=self.settings.volatile_attributes)
        conditions.extend(custom)
        by_class = class_predicate(descriptor)
        if by_class:
            conditions.append(by_class)
        by_style = style_predicate(descriptor, self.settings.style_prefix_length)
        if by_style:
            conditions.append(by_style)

        needs_position = (
            not (custom or by_class)
            or descriptor.identifier is not None
            or descriptor.sibling_index_of_type > 1
        )
        position = sibling_position(descriptor) if needs_position else None
        return fragment(descriptor.tag, conditions, position)

    def _parent_child_stage(
        self,
        parent: NodeDescriptor,
        target: NodeDescriptor,
        multiplicity: Multiplicity,
        attempts: list[Verification],
    ) -> Verification:
        parent_conditions: list[str] = []
        parent_position = None
        if parent.identifier:
            parent_conditions.append(identifier_predicate(parent.identifier))
            if multiplicity(parent.identifier) > 1:
                parent_position = same_type_position(parent)
        elif flag_predicates(parent):
            parent_conditions.extend(flag_predicates(parent))
        else:
            by_class = class_predicate(parent)
            if by_class:
                parent_conditions.append(by_class)

        child_conditions: list[str] = []
        if target.identifier:
            child_conditions.append(identifier_predicate(target.identifier))
        elif flag_predicates(target):
            child_conditions.extend(flag_predicates(target))
        else:
            by_text = text_predicate(target)
            if by_text:
                child_conditions.append(by_text)

        selector = rooted_path(
            [
                fragment(parent.tag, parent_conditions, parent_position),
                fragment(target.tag, child_conditions),
            ]
        )
        return self._check(selector, "parent_child", attempts)

    def _check(self, selector: str, stage: SynthesisStage, attempts: list[Verification]) -> Verification:
        verification = self.oracle.evaluate(selector, stage=stage)
        attempts.append(verification)
        return verification

    def _finish(
        self,
        selector: str,
        stage: SynthesisStage,
        verified: bool,
        attempts: list[Verification],
    ) -> SynthesisResult:
        result = SynthesisResult(selector=selector, stage=stage, verified=verified, attempts=tuple(attempts))
        self.observer.finished(result)
        return result

    def _multiplicity_lookup(self) -> Multiplicity:
        counts: dict[str, int] = {}

        def lookup(identifier: str) -> int:
            if identifier not in counts:
                counts[identifier] = self.oracle.identifier_multiplicity(identifier)
            return counts[identifier]

        return lookup
