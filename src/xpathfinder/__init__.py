"""Unique XPath synthesis and verification for live document trees."""

from __future__ import annotations

__version__ = "0.1.0"

from .api import (
    full_path,
    indexed_path,
    list_matches,
    locate,
    synthesize,
    synthesize_best_effort_selector,
    synthesize_unique_selector,
    verification_details,
    verify_unique,
)
from .errors import ChainIntegrityError, EmptyChainError, QuerySyntaxError, XPathFinderError
from .models import AttributeValue, ChainLevel, ElementReport, NodeDescriptor, SynthesisResult, Verification

__all__ = [
    "AttributeValue",
    "ChainIntegrityError",
    "ChainLevel",
    "ElementReport",
    "EmptyChainError",
    "NodeDescriptor",
    "QuerySyntaxError",
    "SynthesisResult",
    "Verification",
    "XPathFinderError",
    "__version__",
    "full_path",
    "indexed_path",
    "list_matches",
    "locate",
    "synthesize",
    "synthesize_best_effort_selector",
    "synthesize_unique_selector",
    "verification_details",
    "verify_unique",
]
