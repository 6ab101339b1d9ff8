from __future__ import annotations

import re
from typing import Iterable

from .models import AttributeValue

BOOLEAN_ATTRIBUTES = frozenset(
    {
        "checked",
        "selected",
        "disabled",
        "readonly",
        "required",
        "multiple",
        "autofocus",
        "hidden",
        "open",
        "async",
        "defer",
        "ismap",
        "reversed",
        "allowfullscreen",
        "novalidate",
        "formnovalidate",
        "itemscope",
    }
)

# Evaluated in order after the exact-name set.
_BOOLEAN_NAME_PATTERNS = (
    re.compile(r"^v-[\w-]+$", re.IGNORECASE),
    re.compile(r"^data-bool-", re.IGNORECASE),
    re.compile(r"^data-true$", re.IGNORECASE),
    re.compile(r"^data-false$", re.IGNORECASE),
    re.compile(r"^is-", re.IGNORECASE),
    re.compile(r"^has-", re.IGNORECASE),
    re.compile(r"^no-", re.IGNORECASE),
    re.compile(r"^not-", re.IGNORECASE),
    re.compile(r"^use-", re.IGNORECASE),
    re.compile(r"^enable-", re.IGNORECASE),
    re.compile(r"^disable-", re.IGNORECASE),
    re.compile(r"^\w+(?:vvn|ddg)$", re.IGNORECASE),
    re.compile(r"^[a-z][a-z0-9]*$", re.IGNORECASE),
)

# Only literals XPath 1.0 number() can read back.
_XPATH_NUMBER_PATTERN = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)$")

_XPATH_SPACE_PATTERN = re.compile(r"[ \t\r\n]+")

RESERVED_ATTRIBUTE_NAMES = frozenset(
    {
        "tag",
        "id",
        "class",
        "text",
        "index",
        "indexoftype",
        "parenttag",
        "nodename",
        "nodetype",
        "identifier",
        "classlist",
        "directtext",
        "siblingindex",
        "siblingindexoftype",
    }
)


def normalize_space(value: str | None, limit: int | None = None) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    if limit is not None:
        return compact[:limit]
    return compact


def xpath_normalize_space(value: str | None) -> str:
    """Collapse whitespace the way XPath `normalize-space()` does (space, tab, CR, LF only)."""
    if not value:
        return ""
    return _XPATH_SPACE_PATTERN.sub(" ", str(value)).strip(" ")


def is_boolean_attribute(name: str) -> bool:
    text = name.strip()
    if not text:
        return False
    if text.lower() in BOOLEAN_ATTRIBUTES:
        return True
    return any(pattern.search(text) for pattern in _BOOLEAN_NAME_PATTERNS)


def is_reserved_attribute(name: str) -> bool:
    return name.strip().lower() in RESERVED_ATTRIBUTE_NAMES


def parse_xpath_number(raw: str) -> int | float | None:
    text = raw.strip()
    if not _XPATH_NUMBER_PATTERN.match(text):
        return None
    if "." in text:
        return float(text)
    return int(text)


def coerce_attribute_value(name: str, raw: str | None) -> AttributeValue:
    text = "" if raw is None else str(raw)
    if text == "":
        if is_boolean_attribute(name):
            return AttributeValue("boolean", True, text)
        return AttributeValue("text", "", text)

    if text in {"true", "false"}:
        return AttributeValue("boolean", text == "true", text)

    number = parse_xpath_number(text)
    if number is not None:
        return AttributeValue("number", number, text)

    return AttributeValue("text", text, text)


def coerce_attributes(pairs: Iterable[tuple[str, str | None]]) -> dict[str, AttributeValue]:
    """Coerce raw attribute pairs, keeping document order and dropping reserved names."""
    coerced: dict[str, AttributeValue] = {}
    for name, raw in pairs:
        if not name or is_reserved_attribute(name):
            continue
        coerced[name] = coerce_attribute_value(name, raw)
    return coerced


def leading_wrapper_count(tags: Iterable[str], wrapper_tags: Iterable[str]) -> int:
    """Number of leading root-first levels that are wrapper tags.

    At most ``len(wrapper_tags)`` levels are counted and the last level (the
    target) is never counted.
    """
    tag_list = list(tags)
    wrappers = {tag.lower() for tag in wrapper_tags}
    limit = min(len(wrappers), max(0, len(tag_list) - 1))
    count = 0
    while count < limit and tag_list[count].lower() in wrappers:
        count += 1
    return count
