from __future__ import annotations

from typing import Callable, Sequence

from .models import ChainLevel


def indexed_xpath(levels: Sequence[ChainLevel], multiplicity: Callable[[str], int] | None = None) -> str:
    """Absolute path with a same-type index on every step after the first of its tag.

    An element whose id occurs exactly once is addressed by id instead. Without
    a ``multiplicity`` lookup the id is assumed to be unique.
    """
    if not levels:
        return ""
    identifier = (levels[-1].snapshot.identifier or "").strip()
    if identifier and '"' not in identifier:
        if multiplicity is None or multiplicity(identifier) == 1:
            return f'//*[@id="{identifier}"]'

    steps: list[str] = []
    for level in levels:
        tag = level.snapshot.tag.lower()
        steps.append(f"{tag}[{level.sibling_index_of_type}]" if level.sibling_index_of_type > 1 else tag)
    return "/" + "/".join(steps)


def full_xpath(levels: Sequence[ChainLevel]) -> str:
    """Absolute path indexing only the steps whose tag repeats among siblings."""
    if not levels:
        return ""
    steps: list[str] = []
    for level in levels:
        tag = level.snapshot.tag.lower()
        if level.same_type_count > 1:
            steps.append(f"{tag}[{level.sibling_index_of_type}]")
        else:
            steps.append(tag)
    return "/" + "/".join(steps)
