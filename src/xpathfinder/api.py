from __future__ import annotations

from typing import Any, Protocol, Sequence

from .diagnostics import SynthesisObserver
from .fallback import BestEffortGenerator
from .models import ChainLevel, ElementReport, NodeDescriptor, SynthesisResult, Verification
from .oracle import UniquenessOracle
from .settings import SynthesisSettings
from .structural_paths import full_xpath, indexed_xpath
from .synthesis import SelectorSynthesizer
from .tree import TreeQuery


class LocatingTree(Protocol):
    def locate(self, xpath: str) -> ElementReport | None: ...


def synthesize(
    chain: Sequence[NodeDescriptor],
    query: TreeQuery,
    *,
    observer: SynthesisObserver | None = None,
    settings: SynthesisSettings | None = None,
) -> SynthesisResult:
    oracle = UniquenessOracle(query, observer=observer, settings=settings)
    return SelectorSynthesizer(oracle).synthesize(chain)


def synthesize_unique_selector(
    chain: Sequence[NodeDescriptor],
    query: TreeQuery,
    *,
    observer: SynthesisObserver | None = None,
    settings: SynthesisSettings | None = None,
) -> str:
    """Return the first selector that verifies unique, else the best-effort ancestor path.

    Raises :class:`~xpathfinder.errors.EmptyChainError` for an empty chain.
    """
    return synthesize(chain, query, observer=observer, settings=settings).selector


def verification_details(
    selector: str,
    query: TreeQuery,
    scope: Any = None,
    *,
    observer: SynthesisObserver | None = None,
    settings: SynthesisSettings | None = None,
) -> Verification:
    return UniquenessOracle(query, observer=observer, settings=settings).evaluate(selector, scope)


def verify_unique(
    selector: str,
    query: TreeQuery,
    scope: Any = None,
    *,
    observer: SynthesisObserver | None = None,
) -> bool:
    return verification_details(selector, query, scope, observer=observer).ok


def synthesize_best_effort_selector(
    chain: Sequence[NodeDescriptor],
    query: TreeQuery | None = None,
    *,
    settings: SynthesisSettings | None = None,
) -> str:
    return BestEffortGenerator(query, settings=settings).generate(chain)


def list_matches(xpath: str, query: TreeQuery, scope: Any = None) -> list[Any]:
    return UniquenessOracle(query).find_all(xpath, scope)


def locate(xpath: str, tree: LocatingTree) -> ElementReport | None:
    return tree.locate(xpath)


def indexed_path(levels: Sequence[ChainLevel], query: TreeQuery | None = None) -> str:
    """Absolute same-type indexed path, or an id lookup when the id is unique in ``query``."""
    multiplicity = UniquenessOracle(query).identifier_multiplicity if query is not None else None
    return indexed_xpath(levels, multiplicity)


def full_path(levels: Sequence[ChainLevel]) -> str:
    return full_xpath(levels)
