from __future__ import annotations

import logging
from typing import Any

from .diagnostics import NullObserver, SynthesisObserver
from .errors import QuerySyntaxError
from .models import SynthesisStage, Verification
from .predicates import xpath_literal
from .settings import SynthesisSettings
from .tree import TreeQuery

logger = logging.getLogger("xpathfinder.oracle")


class UniquenessOracle:
    """Classifies a candidate XPath against the live tree as none, unique or ambiguous."""

    def __init__(
        self,
        query: TreeQuery,
        observer: SynthesisObserver | None = None,
        settings: SynthesisSettings | None = None,
    ) -> None:
        self.query = query
        self.observer = observer or NullObserver()
        self.settings = settings or SynthesisSettings()

    def evaluate(self, selector: str, scope: Any = None, *, stage: SynthesisStage | None = None) -> Verification:
        verification = self._classify(selector, scope)
        self.observer.candidate_checked(stage, verification)
        return verification

    def is_unique(self, selector: str, scope: Any = None) -> bool:
        return self.evaluate(selector, scope).ok

    def find_all(self, selector: str, scope: Any = None) -> list[Any]:
        if not selector or not selector.strip():
            return []
        try:
            return list(self.query.query_all(selector, scope))
        except QuerySyntaxError as exc:
            logger.warning("%s", exc)
            return []

    def identifier_multiplicity(self, identifier: str | None) -> int:
        if not identifier:
            return 0
        return len(self.find_all(f"//*[@id={xpath_literal(identifier)}]"))

    def _classify(self, selector: str, scope: Any) -> Verification:
        text = (selector or "").strip()
        if not text:
            return Verification("none", selector or "", error="empty selector")

        try:
            matches = list(self.query.query_all(text, scope))
        except QuerySyntaxError as exc:
            logger.debug("Query rejected %s: %s", text, exc.reason)
            return Verification("none", text, error=exc.reason)

        count = len(matches)
        if count == 0:
            return Verification("none", text)
        if count == 1:
            return Verification("unique", text, match_count=1, node=matches[0])

        limit = self.settings.sample_limit
        samples = tuple(self.query.describe(node) for node in matches[:limit])
        return Verification("ambiguous", text, match_count=count, samples=samples)
