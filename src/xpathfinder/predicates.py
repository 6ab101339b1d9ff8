from __future__ import annotations

import re
from typing import Sequence

from .attribute_rules import normalize_space
from .models import AttributeValue, NodeDescriptor

_XPATH_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal.

    Values holding an apostrophe are split on it and rebuilt with ``concat``.
    """
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split("'")
    quoted = [f"'{piece}'" if piece else "''" for piece in pieces]
    return "concat(" + ", \"'\", ".join(quoted) + ")"


def is_xpath_name(name: str) -> bool:
    return bool(_XPATH_NAME_PATTERN.match(name))


def identifier_predicate(identifier: str) -> str:
    return f"@id={xpath_literal(identifier)}"


def flag_predicates(descriptor: NodeDescriptor) -> list[str]:
    return [f"@{name}" for name in descriptor.true_flags if is_xpath_name(name)]


def attribute_predicate(name: str, value: AttributeValue) -> str | None:
    if value.kind == "number":
        return f"@{name}={value.raw.strip()}"
    if value.kind == "text" and value.value != "":
        return f"@{name}={xpath_literal(str(value.value))}"
    return None


def custom_attribute_predicates(descriptor: NodeDescriptor, excluded: Sequence[str] = ()) -> list[str]:
    skip = {name.lower() for name in excluded}
    predicates: list[str] = []
    for name, value in descriptor.custom_attributes:
        if name.lower() in skip or not is_xpath_name(name):
            continue
        predicate = attribute_predicate(name, value)
        if predicate:
            predicates.append(predicate)
    return predicates


def class_predicate(descriptor: NodeDescriptor) -> str | None:
    token = descriptor.first_class
    if not token:
        return None
    return f"contains(@class, {xpath_literal(token)})"


def style_predicate(descriptor: NodeDescriptor, prefix_length: int) -> str | None:
    value = descriptor.attribute("style")
    if value is None or value.kind != "text":
        return None
    style_text = normalize_space(str(value.value))
    if not style_text:
        return None
    return f"contains(@style, {xpath_literal(style_text[:prefix_length])})"


def text_predicate(descriptor: NodeDescriptor) -> str | None:
    """Match one own text node by its normalized content."""
    if not descriptor.lead_text:
        return None
    return f"text()[contains(normalize-space(.), {xpath_literal(descriptor.lead_text)})]"


def same_type_position(descriptor: NodeDescriptor) -> str | None:
    if descriptor.sibling_index_of_type > 1:
        return str(descriptor.sibling_index_of_type)
    return None


def sibling_position(descriptor: NodeDescriptor) -> str | None:
    """Positional tie-break: same-type index, else the raw sibling index."""
    if descriptor.sibling_index_of_type > 1:
        return str(descriptor.sibling_index_of_type)
    if descriptor.sibling_index > 1:
        return f"count(preceding-sibling::*)={descriptor.sibling_index - 1}"
    return None


def fragment(tag: str, conditions: Sequence[str] = (), position: str | None = None) -> str:
    # The position is counted among all same-tag siblings, so it filters first.
    step = tag
    if position:
        step += f"[{position}]"
    if conditions:
        step += f"[{' and '.join(conditions)}]"
    return step


def rooted_path(fragments: Sequence[str]) -> str:
    return "//" + "/".join(fragments)
