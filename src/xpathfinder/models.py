from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

AttributeKind = Literal["boolean", "number", "text"]
VerificationStatus = Literal["none", "unique", "ambiguous"]
SynthesisStage = Literal["identifier", "ancestor_path", "parent_child", "fallback"]


@dataclass(frozen=True, slots=True)
class AttributeValue:
    kind: AttributeKind
    value: bool | int | float | str
    raw: str = ""

    @property
    def is_true(self) -> bool:
        return self.kind == "boolean" and self.value is True

    @property
    def is_custom(self) -> bool:
        return self.kind != "boolean"


@dataclass(frozen=True, slots=True)
class ElementSnapshot:
    """Raw addressing data read from one live node."""

    tag: str
    identifier: str | None = None
    class_list: str | None = None
    attributes: tuple[tuple[str, str], ...] = ()
    direct_text: str = ""
    text_nodes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ChainLevel:
    snapshot: ElementSnapshot
    sibling_index: int
    sibling_index_of_type: int
    same_type_count: int
    parent_tag: str | None


def _frozen_attributes(values: Mapping[str, AttributeValue] | None) -> Mapping[str, AttributeValue]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class NodeDescriptor:
    tag: str
    identifier: str | None
    class_list: str | None
    direct_text: str
    sibling_index: int
    sibling_index_of_type: int
    parent_tag: str | None
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    lead_text: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _frozen_attributes(self.attributes))

    @property
    def class_tokens(self) -> list[str]:
        if not self.class_list:
            return []
        return self.class_list.split()

    @property
    def first_class(self) -> str | None:
        tokens = self.class_tokens
        return tokens[0] if tokens else None

    @property
    def true_flags(self) -> list[str]:
        return [name for name, value in self.attributes.items() if value.is_true]

    @property
    def custom_attributes(self) -> list[tuple[str, AttributeValue]]:
        return [(name, value) for name, value in self.attributes.items() if value.is_custom]

    def attribute(self, name: str) -> AttributeValue | None:
        return self.attributes.get(name)


AncestorChain = tuple[NodeDescriptor, ...]


@dataclass(frozen=True, slots=True)
class Verification:
    status: VerificationStatus
    selector: str
    match_count: int = 0
    node: Any = None
    samples: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "unique"


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    selector: str
    stage: SynthesisStage
    verified: bool
    attempts: tuple[Verification, ...] = ()


@dataclass(slots=True)
class ElementReport:
    element: Any
    xpath: str
    levels: tuple[ChainLevel, ...]
    chain: AncestorChain
