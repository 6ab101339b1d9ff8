from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Protocol, Sequence

from .models import NodeDescriptor, SynthesisResult, SynthesisStage, Verification

LOG_DIR = Path.home() / ".xpathfinder"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class SynthesisObserver(Protocol):
    def stage_started(self, stage: SynthesisStage) -> None: ...

    def candidate_checked(self, stage: SynthesisStage | None, verification: Verification) -> None: ...

    def finished(self, result: SynthesisResult) -> None: ...


class NullObserver:
    def stage_started(self, stage: SynthesisStage) -> None:
        return None

    def candidate_checked(self, stage: SynthesisStage | None, verification: Verification) -> None:
        return None

    def finished(self, result: SynthesisResult) -> None:
        return None


class LoggingObserver:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("xpathfinder.synthesis")

    def stage_started(self, stage: SynthesisStage) -> None:
        self.logger.debug("Stage %s started.", stage)

    def candidate_checked(self, stage: SynthesisStage | None, verification: Verification) -> None:
        if verification.status == "unique":
            self.logger.info("XPath unique: %s", verification.selector)
        elif verification.status == "ambiguous":
            self.logger.info(
                "XPath not unique: %s (%d matches: %s)",
                verification.selector,
                verification.match_count,
                ", ".join(verification.samples),
            )
        elif verification.error:
            self.logger.warning("XPath rejected: %s (%s)", verification.selector, verification.error)
        else:
            self.logger.info("XPath matched nothing: %s", verification.selector)

    def finished(self, result: SynthesisResult) -> None:
        if result.verified:
            self.logger.info("Selector %s found at stage %s.", result.selector, result.stage)
        else:
            self.logger.warning(
                "No unique selector; returning unverified %s after %d attempts.",
                result.selector,
                len(result.attempts),
            )


@dataclass(slots=True)
class RecordingObserver:
    stages: list[SynthesisStage] = field(default_factory=list)
    checks: list[tuple[SynthesisStage | None, Verification]] = field(default_factory=list)
    results: list[SynthesisResult] = field(default_factory=list)

    def stage_started(self, stage: SynthesisStage) -> None:
        self.stages.append(stage)

    def candidate_checked(self, stage: SynthesisStage | None, verification: Verification) -> None:
        self.checks.append((stage, verification))

    def finished(self, result: SynthesisResult) -> None:
        self.results.append(result)

    @property
    def selectors(self) -> list[str]:
        return [verification.selector for _stage, verification in self.checks]


def build_logger(name: str = "xpathfinder", log_dir: Path | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    try:
        target_dir = log_dir or LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_dir / "xpathfinder.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        # Fall back to stderr when the log folder is not writable.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(stream_handler)
    return logger


def _label(descriptor: NodeDescriptor) -> str:
    label = f"<{descriptor.tag}>"
    if descriptor.identifier:
        label += f"#{descriptor.identifier}"
    label += "".join(f".{token}" for token in descriptor.class_tokens)
    return label


def _display_value(descriptor: NodeDescriptor, name: str) -> str:
    value = descriptor.attributes[name]
    if value.kind == "boolean":
        return "true" if value.value else "false"
    if value.kind == "number":
        return value.raw.strip()
    text = str(value.value)
    return text[:50] + "..." if len(text) > 50 else text


def format_chain(chain: Sequence[NodeDescriptor], minimal: bool = False) -> str:
    """Render a chain as an indented tree, target last.

    The minimal form shows labels and positions only; the full form also lists
    the target's direct text and attributes.
    """
    lines: list[str] = []
    last = len(chain) - 1
    for depth, descriptor in enumerate(chain):
        indent = "  " * depth
        position = f"[index:{descriptor.sibling_index}, indexOfType:{descriptor.sibling_index_of_type}]"
        is_target = depth == last
        prefix = "=> " if is_target else "|- "
        lines.append(f"{indent}{prefix}{_label(descriptor)} {position}")
        if minimal or not is_target:
            continue
        if descriptor.direct_text:
            lines.append(f'{indent}    text: "{descriptor.direct_text}"')
        names = sorted(descriptor.attributes)
        if names:
            lines.append(f"{indent}    attributes:")
            for name in names:
                lines.append(f"{indent}      {name}: {_display_value(descriptor, name)}")
    return "\n".join(lines)
